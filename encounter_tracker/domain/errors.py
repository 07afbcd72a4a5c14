"""Domain-level exceptions.

Stores and repositories raise these; the data service converts them into
categorized ServiceResult failures at its boundary.  Wiring errors
(ConfigurationError, ServiceNotRegisteredError) are programming errors and are
never converted.
"""

from __future__ import annotations

from uuid import UUID


class StoreError(Exception):
    """Underlying persistence failure (transient or not)."""


class ConcurrencyConflictError(StoreError):
    """A conflicting write was detected when changes were flushed."""


class UniqueConstraintError(StoreError):
    """A write violated a uniqueness constraint (e.g. duplicate lookup name)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class EntityNotFoundError(LookupError):
    """No record exists with the requested id."""

    def __init__(self, entity_name: str, entity_id: UUID) -> None:
        super().__init__(f"{entity_name} {entity_id} not found")
        self.entity_name = entity_name
        self.entity_id = entity_id


class OperationCancelledError(Exception):
    """The caller's cancellation signal was set before the operation finished."""


class ConfigurationError(Exception):
    """Invalid service wiring detected at startup."""


class ServiceNotRegisteredError(LookupError):
    """A service was requested for an entity type that was never registered."""
