"""Generic data service.

One implementation serves every registered entity type.  Each call composes
the cross-cutting policies in a fixed order:

    authorization → cache lookup → soft-delete/tenant filters → store query
    → cache population → audit stamping → persistence → cache invalidation
    → ServiceResult

Instances are request scoped (bound to a request's store); the EntityCache
and the backing database are process-wide.

Error contract: no exception crosses a public method.  Every failure becomes a
ServiceResult with an ErrorKind (see service_operation).  asyncio.CancelledError
is the one exception that propagates, because swallowing it would break task
cancellation; callers who want an OperationCancelled result pass an
asyncio.Event as `cancel` instead.

Decisions:
  - get_by_id on a missing record is a NOT_FOUND failure, not an empty success.
  - With soft delete enabled, deleted records stay readable through get_by_id
    unless options.soft_deleted_visible_by_id is False; listings, paging, and
    search always hide them.
  - Deleting an already soft-deleted record is a no-op success.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from functools import wraps
from typing import Any, Generic, TypeVar
from uuid import UUID, uuid4

from pydantic import ValidationError

from encounter_tracker.domain.errors import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    OperationCancelledError,
    StoreError,
    UniqueConstraintError,
)
from encounter_tracker.domain.models.actor import Actor, actor_label
from encounter_tracker.domain.models.base import (
    AuditTracked,
    CommonEntity,
    Entity,
    LookupEntity,
    SoftDeletable,
    utc_now,
    validate_entity,
)
from encounter_tracker.domain.models.query import Filter, combine
from encounter_tracker.domain.models.results import ErrorKind, PagedResult, ServiceResult
from encounter_tracker.domain.repositories.base import EntityStore

from .authorization import AccessPolicy, Operation
from .caching import EntityCache
from .options import DataServiceOptions

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)
C = TypeVar("C", bound=CommonEntity)

NIL_ID = UUID(int=0)


class ServiceFailure(Exception):
    """Raised inside an operation to end it with a specific failure result."""

    def __init__(self, message: str, kind: ErrorKind) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind


def check_cancelled(cancel: asyncio.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelledError()


def describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err["loc"])
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(parts)


def service_operation(action: str) -> Callable:
    """Convert every failure of the wrapped operation into a ServiceResult.

    action is the gerund used in messages ("retrieving", "updating", ...).
    """

    def decorator(func: Callable[..., Awaitable[ServiceResult]]) -> Callable[..., Awaitable[ServiceResult]]:
        @wraps(func)
        async def wrapper(self: EntityDataService, *args: Any, **kwargs: Any) -> ServiceResult:
            name = self.entity_name
            try:
                return await func(self, *args, **kwargs)
            except ServiceFailure as exc:
                return ServiceResult.failure(exc.message, exc.kind)
            except OperationCancelledError:
                logger.info("%s operation was cancelled for %s", func.__name__, name)
                return ServiceResult.failure("Operation was cancelled", ErrorKind.OPERATION_CANCELLED)
            except ConcurrencyConflictError as exc:
                logger.warning("Concurrency conflict %s %s: %s", action, name, exc)
                return ServiceResult.failure(
                    "The record was modified by another user. Refresh and try again.",
                    ErrorKind.CONCURRENCY_ERROR,
                )
            except UniqueConstraintError as exc:
                logger.info("Uniqueness violation %s %s: %s", action, name, exc)
                return ServiceResult.failure(str(exc), ErrorKind.VALIDATION_ERROR)
            except ValidationError as exc:
                return ServiceResult.failure(describe_validation_error(exc), ErrorKind.VALIDATION_ERROR)
            except EntityNotFoundError as exc:
                return ServiceResult.failure(str(exc), ErrorKind.NOT_FOUND)
            except StoreError:
                logger.exception("Store error %s %s", action, name)
                return ServiceResult.failure(f"Store error {action} {name}", ErrorKind.STORE_ERROR)
            except Exception:
                logger.exception("Error %s %s", action, name)
                return ServiceResult.failure(f"Error {action} {name}", ErrorKind.UNKNOWN_ERROR)

        return wrapper

    return decorator


class DataService(ABC, Generic[T]):
    """Policy-composed CRUD, paging, and search over one entity type."""

    entity_type: type[T]

    @property
    def entity_name(self) -> str:
        return self.entity_type.__name__

    @abstractmethod
    async def get_by_id(
        self, id: UUID, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[T]: ...

    @abstractmethod
    async def get_all(
        self, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[list[T]]: ...

    @abstractmethod
    async def get_paged(
        self,
        page: int = 1,
        page_size: int | None = None,
        filter: Filter | None = None,
        order_by: str | None = None,
        ascending: bool = True,
        actor: Actor | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ServiceResult[PagedResult[T]]: ...

    @abstractmethod
    async def create(
        self, entity: T, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[T]: ...

    @abstractmethod
    async def update(
        self, entity: T, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[T]: ...

    @abstractmethod
    async def delete(
        self, id: UUID, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[bool]: ...

    @abstractmethod
    async def search(
        self, filter: Filter, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[list[T]]: ...


class CommonDataService(DataService[C]):
    """Narrower interface for audit-tracked, soft-deletable entities."""

    @abstractmethod
    async def restore(
        self, id: UUID, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[C]:
        """Re-activate a soft-deleted record."""


class EntityDataService(DataService[T]):
    def __init__(
        self,
        entity_type: type[T],
        store: EntityStore[T],
        cache: EntityCache,
        options: DataServiceOptions,
        policy: AccessPolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.entity_type = entity_type
        self._store = store
        self._cache = cache
        self._options = options
        self._policy = policy or AccessPolicy(options)
        self._clock = clock
        self._default_order = "name" if issubclass(entity_type, LookupEntity) else "created_at"

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    @service_operation("retrieving")
    async def get_by_id(
        self, id: UUID, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[T]:
        self._require_id(id)

        cached = await self._cache.get_entity(self.entity_name, id)
        if cached is not None:
            logger.debug("Cache hit for %s %s", self.entity_name, id)
            self._authorize_record(actor, cached, Operation.READ)
            return ServiceResult.success(cached)

        check_cancelled(cancel)
        by_id_filter = None if self._options.soft_deleted_visible_by_id else self._soft_delete_filter()
        entity = await self._store.get(id, by_id_filter)
        if entity is None:
            raise ServiceFailure(f"{self.entity_name} {id} not found", ErrorKind.NOT_FOUND)

        self._authorize_record(actor, entity, Operation.READ)
        await self._cache.set_entity(self.entity_name, entity)
        logger.info("Retrieved %s %s for user %s", self.entity_name, id, actor_label(actor))
        return ServiceResult.success(entity)

    @service_operation("retrieving all")
    async def get_all(
        self, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[list[T]]:
        self._authorize(actor, Operation.READ_ALL)

        key = EntityCache.listing_key(self.entity_name, "all", actor_label(actor))
        cached = await self._cache.get_listing(key)
        if cached is not None:
            logger.debug("Cache hit for all %s entities", self.entity_name)
            return ServiceResult.success(list(cached))

        check_cancelled(cancel)
        entities = await self._store.list(self._visibility_filter(actor), order_by=self._default_order)
        await self._cache.set_listing(self.entity_name, key, tuple(entities))
        logger.info(
            "Retrieved all %s entities (%d items) for user %s",
            self.entity_name,
            len(entities),
            actor_label(actor),
        )
        return ServiceResult.success(entities)

    @service_operation("retrieving paged")
    async def get_paged(
        self,
        page: int = 1,
        page_size: int | None = None,
        filter: Filter | None = None,
        order_by: str | None = None,
        ascending: bool = True,
        actor: Actor | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ServiceResult[PagedResult[T]]:
        page = max(page, 1)
        if page_size is None or page_size < 1:
            page_size = self._options.default_page_size
        page_size = min(page_size, self._options.max_page_size)

        self._authorize(actor, Operation.READ_ALL)
        self._check_fields(filter, order_by)

        key = EntityCache.listing_key(
            self.entity_name, "paged", actor_label(actor), page, page_size, filter, order_by, ascending
        )
        cached = await self._cache.get_listing(key)
        if cached is not None:
            return ServiceResult.success(PagedResult(list(cached.items), cached.total_count, page, page_size))

        query_filter = combine(self._visibility_filter(actor), filter)
        check_cancelled(cancel)
        total = await self._store.count(query_filter)
        check_cancelled(cancel)
        items = await self._store.list(
            query_filter,
            order_by=order_by or self._default_order,
            ascending=ascending,
            limit=page_size,
            offset=(page - 1) * page_size,
        )
        result = PagedResult(items=items, total_count=total, page=page, page_size=page_size)
        await self._cache.set_listing(self.entity_name, key, PagedResult(tuple(items), total, page, page_size))
        logger.info(
            "Retrieved paged %s entities (page %d/%d, %d/%d items) for user %s",
            self.entity_name,
            page,
            result.total_pages,
            len(items),
            total,
            actor_label(actor),
        )
        return ServiceResult.success(result)

    @service_operation("searching")
    async def search(
        self, filter: Filter, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[list[T]]:
        if filter is None:
            raise ServiceFailure("Search predicate cannot be null", ErrorKind.VALIDATION_ERROR)
        self._authorize(actor, Operation.READ_ALL)
        self._check_fields(filter, None)

        check_cancelled(cancel)
        entities = await self._store.list(
            combine(self._visibility_filter(actor), filter),
            order_by=self._default_order,
            limit=self._options.max_search_results,
        )
        logger.info(
            "Searched %s entities, found %d results for user %s",
            self.entity_name,
            len(entities),
            actor_label(actor),
        )
        return ServiceResult.success(entities)

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    @service_operation("creating")
    async def create(
        self, entity: T, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[T]:
        self._require_instance(entity)
        self._authorize(actor, Operation.CREATE)

        now = self._clock()
        stamp: dict[str, Any] = {"created_at": now, "updated_at": now, "version": 1}
        if entity.id is None or entity.id == NIL_ID:
            stamp["id"] = uuid4()
        if isinstance(entity, AuditTracked):
            stamp["created_by_id"] = actor.id if actor is not None else None
            stamp["modified_by_id"] = None
        stamped = validate_entity(entity.model_copy(update=stamp))

        async with self._writing(cancel):
            created = await self._store.add(stamped)

        await self._cache.invalidate_listings(self.entity_name)
        logger.info("Created %s %s by user %s", self.entity_name, created.id, actor_label(actor))
        return ServiceResult.success(created)

    @service_operation("updating")
    async def update(
        self, entity: T, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[T]:
        self._require_instance(entity)
        self._require_id(entity.id)

        check_cancelled(cancel)
        stored = await self._store.get(entity.id)
        if stored is None:
            raise ServiceFailure(f"{self.entity_name} {entity.id} not found", ErrorKind.NOT_FOUND)
        self._authorize_record(actor, stored, Operation.UPDATE)

        stamped = validate_entity(entity.model_copy(update=self._modification_stamp(stored, actor)))
        async with self._writing(cancel):
            updated = await self._store.update(stamped)

        await self._invalidate(entity.id)
        logger.info("Updated %s %s by user %s", self.entity_name, entity.id, actor_label(actor))
        return ServiceResult.success(updated)

    @service_operation("deleting")
    async def delete(
        self, id: UUID, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[bool]:
        self._require_id(id)

        check_cancelled(cancel)
        entity = await self._store.get(id)
        if entity is None:
            raise ServiceFailure(f"{self.entity_name} not found", ErrorKind.NOT_FOUND)
        self._authorize_record(actor, entity, Operation.DELETE)

        soft = self._soft_delete_applies()
        if soft and not entity.is_active:  # type: ignore[attr-defined]
            logger.info("%s %s is already inactive", self.entity_name, id)
            return ServiceResult.success(True)
        async with self._writing(cancel):
            if soft:
                stamp = {"is_active": False, **self._modification_stamp(entity, actor)}
                await self._store.update(entity.model_copy(update=stamp))
            else:
                await self._store.remove(id)

        await self._invalidate(id)
        logger.info(
            "Deleted %s %s by user %s (soft: %s)", self.entity_name, id, actor_label(actor), soft
        )
        return ServiceResult.success(True)

    # ------------------------------------------------------------------ #
    # Helpers                                                              #
    # ------------------------------------------------------------------ #

    def _require_id(self, id: UUID | None) -> None:
        if id is None or id == NIL_ID:
            logger.warning("Invalid ID provided: %s for entity %s", id, self.entity_name)
            raise ServiceFailure("Invalid ID provided", ErrorKind.VALIDATION_ERROR)

    def _require_instance(self, entity: Any) -> None:
        if entity is None:
            raise ServiceFailure("Entity cannot be null", ErrorKind.VALIDATION_ERROR)
        if not isinstance(entity, self.entity_type):
            raise ServiceFailure(
                f"Expected {self.entity_name}, got {type(entity).__name__}", ErrorKind.VALIDATION_ERROR
            )

    def _authorize(self, actor: Actor | None, operation: Operation) -> None:
        if not self._policy.can_perform(actor, operation, self.entity_name):
            logger.warning(
                "Access denied for user %s to %s %s", actor_label(actor), operation.value, self.entity_name
            )
            raise ServiceFailure("Access denied", ErrorKind.UNAUTHORIZED_ACCESS)

    def _authorize_record(self, actor: Actor | None, entity: Entity, operation: Operation) -> None:
        if not self._policy.can_access(actor, entity, operation, self.entity_name):
            logger.warning(
                "Access denied for user %s to %s %s %s",
                actor_label(actor),
                operation.value,
                self.entity_name,
                entity.id,
            )
            raise ServiceFailure("Access denied", ErrorKind.UNAUTHORIZED_ACCESS)

    def _check_fields(self, filter: Filter | None, order_by: str | None) -> None:
        referenced = set(filter.fields()) if filter else set()
        if order_by is not None:
            referenced.add(order_by)
        unknown = referenced - set(self.entity_type.model_fields)
        if unknown:
            raise ServiceFailure(
                f"Unknown field(s) for {self.entity_name}: {', '.join(sorted(unknown))}",
                ErrorKind.VALIDATION_ERROR,
            )

    def _soft_delete_applies(self) -> bool:
        return self._options.use_soft_delete and issubclass(self.entity_type, SoftDeletable)

    def _soft_delete_filter(self) -> Filter | None:
        return Filter.equals(is_active=True) if self._soft_delete_applies() else None

    def _visibility_filter(self, actor: Actor | None) -> Filter:
        return combine(self._soft_delete_filter(), self._policy.tenant_filter(actor, self.entity_type))

    def _next_timestamp(self, previous: datetime | None) -> datetime:
        now = self._clock()
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    def _modification_stamp(self, stored: T, actor: Actor | None) -> dict[str, Any]:
        stamp: dict[str, Any] = {
            "created_at": stored.created_at,
            "updated_at": self._next_timestamp(stored.updated_at),
        }
        if isinstance(stored, AuditTracked):
            stamp["created_by_id"] = stored.created_by_id
            stamp["modified_by_id"] = actor.id if actor is not None else None
        return stamp

    @asynccontextmanager
    async def _writing(self, cancel: asyncio.Event | None) -> AsyncIterator[None]:
        """Stage changes in the body, then flush; a failure discards this write only."""
        check_cancelled(cancel)
        async with self._store.begin_write():
            yield
            check_cancelled(cancel)
            await self._store.save()

    async def _invalidate(self, id: UUID) -> None:
        await self._cache.forget_entity(self.entity_name, id)
        await self._cache.invalidate_listings(self.entity_name)


class CommonEntityDataService(EntityDataService[C], CommonDataService[C]):
    """Data service for COMMON entities; adds restore()."""

    @service_operation("restoring")
    async def restore(
        self, id: UUID, actor: Actor | None = None, cancel: asyncio.Event | None = None
    ) -> ServiceResult[C]:
        self._require_id(id)

        check_cancelled(cancel)
        entity = await self._store.get(id)
        if entity is None:
            raise ServiceFailure(f"{self.entity_name} {id} not found", ErrorKind.NOT_FOUND)
        self._authorize_record(actor, entity, Operation.UPDATE)
        if entity.is_active:
            return ServiceResult.success(entity)

        stamp = {"is_active": True, **self._modification_stamp(entity, actor)}
        async with self._writing(cancel):
            restored = await self._store.update(entity.model_copy(update=stamp))

        await self._invalidate(id)
        logger.info("Restored %s %s by user %s", self.entity_name, id, actor_label(actor))
        return ServiceResult.success(restored)
