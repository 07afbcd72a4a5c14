"""Entity registration and request-scoped service resolution.

Wiring happens once at startup:

    registry = create_service_registry()

    async def handler(session: AsyncSession = Depends(get_session)):
        scope = registry.scope(session)
        result = await scope.data_service(Persona).get_by_id(persona_id, actor)

register_data_services() walks an explicit list of EntityMapping pairs,
validates each one, and binds factories per (interface, entity type):

  - DataService for every entity
  - CommonDataService for COMMON entities (same factory as DataService, so a
    scope hands out one instance for both interfaces)
  - LookupRepository for LOOKUP entities, sharing the data services' cache

A ServiceScope is the per-request view: it builds services lazily against the
request's session and memoizes them, so every service in a request shares one
store per entity type.  The registry, the EntityCache, and the options are
process-wide.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable

from encounter_tracker.domain.errors import ConfigurationError, ServiceNotRegisteredError
from encounter_tracker.domain.models.base import (
    Capability,
    Entity,
    capabilities_of,
    is_capability_base,
)
from encounter_tracker.domain.repositories.base import EntityStore
from encounter_tracker.domain.repositories.lookup import LookupRepository
from encounter_tracker.domain.services.authorization import AccessPolicy
from encounter_tracker.domain.services.caching import Cache, EntityCache
from encounter_tracker.domain.services.data_service import (
    CommonDataService,
    CommonEntityDataService,
    DataService,
    EntityDataService,
)
from encounter_tracker.domain.services.lookup import LookupService
from encounter_tracker.domain.services.options import DataServiceOptions
from encounter_tracker.infrastructure.cache import MemoryCache
from encounter_tracker.infrastructure.persistence.mappings import ENTITY_MAPPINGS, EntityMapping
from encounter_tracker.infrastructure.persistence.memory import InMemoryEntityStore
from encounter_tracker.infrastructure.persistence.repositories import (
    EntityLookupRepository,
    SqlEntityStore,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)

StoreFactory = Callable[[EntityMapping, Any], EntityStore]
ServiceFactory = Callable[["ServiceScope"], Any]


def sql_store_factory(mapping: EntityMapping, session: Any) -> EntityStore:
    """Default store factory: the scope's session is an AsyncSession."""
    return SqlEntityStore(mapping.domain_type, mapping.orm_type, session)


def memory_store_factory(mapping: EntityMapping, database: Any) -> EntityStore:
    """Store factory for scopes whose 'session' is an InMemoryDatabase."""
    return InMemoryEntityStore(mapping.domain_type, database)


@dataclass(frozen=True)
class RegistrationReport:
    entity_names: tuple[str, ...]
    common_names: tuple[str, ...] = ()
    lookup_names: tuple[str, ...] = ()

    @property
    def count(self) -> int:
        return len(self.entity_names)


class ServiceRegistry:
    """Process-wide map of (interface, entity type) → factory."""

    def __init__(self) -> None:
        self._bindings: dict[tuple[type, type], ServiceFactory] = {}
        self.report: RegistrationReport | None = None

    @property
    def is_registered(self) -> bool:
        return self.report is not None

    def bind(self, interface: type, entity_type: type, factory: ServiceFactory) -> None:
        key = (interface, entity_type)
        existing = self._bindings.get(key)
        if existing is not None and existing is not factory:
            raise ConfigurationError(
                f"{interface.__name__} is already bound for {entity_type.__name__}"
            )
        self._bindings[key] = factory

    def is_bound(self, interface: type, entity_type: type) -> bool:
        return (interface, entity_type) in self._bindings

    def factory_for(self, interface: type, entity_type: type) -> ServiceFactory:
        if not self.is_registered:
            raise ConfigurationError(
                "Data services have not been registered; call register_data_services() at startup"
            )
        try:
            return self._bindings[(interface, entity_type)]
        except KeyError:
            raise ServiceNotRegisteredError(
                f"No {interface.__name__} registered for {entity_type.__name__}"
            ) from None

    def scope(self, session: Any) -> ServiceScope:
        return ServiceScope(self, session)


class ServiceScope:
    """Request-scoped resolution; one instance per factory and per store."""

    def __init__(self, registry: ServiceRegistry, session: Any) -> None:
        self.registry = registry
        self.session = session
        self._instances: dict[Any, Any] = {}

    def resolve(self, interface: type, entity_type: type) -> Any:
        factory = self.registry.factory_for(interface, entity_type)
        return self.instance(factory, lambda: factory(self))

    def instance(self, key: Any, build: Callable[[], Any]) -> Any:
        if key not in self._instances:
            self._instances[key] = build()
        return self._instances[key]

    def store(self, mapping: EntityMapping, store_factory: StoreFactory) -> EntityStore:
        return self.instance(("store", mapping.domain_type), lambda: store_factory(mapping, self.session))

    def data_service(self, entity_type: type[E]) -> DataService[E]:
        return self.resolve(DataService, entity_type)

    def common_data_service(self, entity_type: type[E]) -> CommonDataService:
        return self.resolve(CommonDataService, entity_type)

    def lookup_repository(self, entity_type: type[E]) -> LookupRepository:
        return self.resolve(LookupRepository, entity_type)

    def lookup_service(self) -> LookupService:
        return LookupService(self.lookup_repository)


def _validate_mapping(mapping: EntityMapping, seen: set[type]) -> None:
    domain_type = mapping.domain_type
    if not isinstance(domain_type, type) or not issubclass(domain_type, Entity):
        raise ConfigurationError(f"{domain_type!r} is not an Entity subclass")
    if is_capability_base(domain_type):
        raise ConfigurationError(f"{domain_type.__name__} is a contract base, not a concrete entity")
    if domain_type in seen:
        raise ConfigurationError(f"{domain_type.__name__} is registered more than once")
    try:
        columns = set(inspect(mapping.orm_type).columns.keys())
    except NoInspectionAvailable:
        raise ConfigurationError(
            f"{mapping.orm_type!r} mapped to {domain_type.__name__} is not a mapped ORM class"
        ) from None
    missing = set(domain_type.model_fields) - columns
    if missing:
        raise ConfigurationError(
            f"{mapping.orm_type.__name__} lacks columns for {domain_type.__name__}: "
            f"{', '.join(sorted(missing))}"
        )


def _service_factory(
    mapping: EntityMapping,
    service_type: type[EntityDataService],
    cache: EntityCache,
    options: DataServiceOptions,
    policy: AccessPolicy,
    store_factory: StoreFactory,
) -> ServiceFactory:
    def build(scope: ServiceScope) -> EntityDataService:
        store = scope.store(mapping, store_factory)
        return service_type(mapping.domain_type, store, cache, options, policy)

    return build


def _lookup_factory(
    mapping: EntityMapping, cache: EntityCache, store_factory: StoreFactory
) -> ServiceFactory:
    def build(scope: ServiceScope) -> EntityLookupRepository:
        return EntityLookupRepository(scope.store(mapping, store_factory), cache)

    return build


def register_data_services(
    registry: ServiceRegistry,
    mappings: Iterable[EntityMapping],
    cache: EntityCache,
    options: DataServiceOptions,
    store_factory: StoreFactory = sql_store_factory,
) -> RegistrationReport:
    """Validate every mapping and bind its services.  Runs once per registry.

    Raises ConfigurationError on the first invalid mapping; nothing is bound
    in that case.
    """
    if registry.is_registered:
        raise ConfigurationError("Data services are already registered for this registry")

    mappings = list(mappings)
    seen: set[type] = set()
    for mapping in mappings:
        _validate_mapping(mapping, seen)
        seen.add(mapping.domain_type)

    policy = AccessPolicy(options)
    common: list[str] = []
    lookups: list[str] = []
    for mapping in mappings:
        capabilities = capabilities_of(mapping.domain_type)
        if Capability.COMMON in capabilities:
            factory = _service_factory(
                mapping, CommonEntityDataService, cache, options, policy, store_factory
            )
            registry.bind(CommonDataService, mapping.domain_type, factory)
            common.append(mapping.name)
        else:
            factory = _service_factory(mapping, EntityDataService, cache, options, policy, store_factory)
        registry.bind(DataService, mapping.domain_type, factory)

        if Capability.LOOKUP in capabilities:
            registry.bind(
                LookupRepository, mapping.domain_type, _lookup_factory(mapping, cache, store_factory)
            )
            lookups.append(mapping.name)

    report = RegistrationReport(
        entity_names=tuple(m.name for m in mappings),
        common_names=tuple(common),
        lookup_names=tuple(lookups),
    )
    registry.report = report
    logger.info(
        "Registered data services for %d entity types: %s", report.count, ", ".join(report.entity_names)
    )
    logger.info(
        "Registered %d common data services and %d lookup repositories",
        len(report.common_names),
        len(report.lookup_names),
    )
    return report


def create_service_registry(
    options: DataServiceOptions | None = None,
    cache: Cache | None = None,
    mappings: Iterable[EntityMapping] | None = None,
    store_factory: StoreFactory | None = None,
) -> ServiceRegistry:
    """Build the whole stack: options, cache, and a fully registered registry.

    Defaults: options from the environment, a process-local MemoryCache sized
    by options.cache_max_entries, the application's ENTITY_MAPPINGS, and SQL
    stores.
    """
    options = options or DataServiceOptions()
    entity_cache = EntityCache(cache or MemoryCache(max_size=options.cache_max_entries), options)
    registry = ServiceRegistry()
    register_data_services(
        registry,
        ENTITY_MAPPINGS if mappings is None else mappings,
        entity_cache,
        options,
        store_factory or sql_store_factory,
    )
    return registry
