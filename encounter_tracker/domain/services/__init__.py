"""Domain services package."""

from .authorization import AccessPolicy, Operation
from .caching import Cache, EntityCache
from .data_service import (
    CommonDataService,
    CommonEntityDataService,
    DataService,
    EntityDataService,
)
from .lookup import LookupService
from .options import DataServiceOptions

__all__ = [
    "AccessPolicy",
    "Cache",
    "CommonDataService",
    "CommonEntityDataService",
    "DataService",
    "DataServiceOptions",
    "EntityCache",
    "EntityDataService",
    "LookupService",
    "Operation",
]
