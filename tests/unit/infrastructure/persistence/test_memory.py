"""Tests for InMemoryEntityStore — staging, ordering, and write contracts."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from encounter_tracker.domain.errors import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    UniqueConstraintError,
)
from encounter_tracker.domain.models.lookups import SocialMediaApp
from encounter_tracker.domain.models.personas import Persona
from encounter_tracker.domain.models.query import Filter, Operator
from encounter_tracker.infrastructure.persistence.memory import (
    InMemoryDatabase,
    InMemoryEntityStore,
)


T0 = datetime(2025, 6, 1, tzinfo=timezone.utc)


def _store(entity_type=Persona, db=None):
    return InMemoryEntityStore(entity_type, db if db is not None else InMemoryDatabase())


async def _saved(store, *entities):
    for entity in entities:
        await store.add(entity)
    await store.save()
    return entities


# --- Staging ---

async def test_add_is_invisible_until_save():
    store = _store()
    persona = Persona(name="Alice")
    await store.add(persona)
    assert await store.get(persona.id) is None
    await store.save()
    assert await store.get(persona.id) == persona


async def test_rollback_discards_staged_changes():
    store = _store()
    await store.add(Persona(name="Alice"))
    await store.rollback()
    await store.save()
    assert await store.count() == 0


async def test_failed_write_keeps_earlier_writes():
    store = _store(SocialMediaApp)
    (first,) = await _saved(store, SocialMediaApp(name="Acme"))
    with pytest.raises(UniqueConstraintError):
        async with store.begin_write():
            await store.add(SocialMediaApp(name="Acme"))
            await store.save()
    await _saved(store, SocialMediaApp(name="Other"))
    assert [a.name for a in await store.list(order_by="name")] == ["Acme", "Other"]
    assert await store.get(first.id) == first


async def test_stores_share_database():
    db = InMemoryDatabase()
    (persona,) = await _saved(_store(db=db), Persona(name="Alice"))
    assert await _store(db=db).get(persona.id) == persona


# --- Reads ---

async def test_get_with_non_matching_filter_returns_none():
    store = _store()
    (persona,) = await _saved(store, Persona(name="Alice"))
    assert await store.get(persona.id, Filter.equals(name="Bob")) is None


async def test_list_filters_and_orders():
    store = _store()
    await _saved(store, Persona(name="carol"), Persona(name="alice"), Persona(name="bob"))
    result = await store.list(Filter.where("name", Operator.NE, "bob"), order_by="name")
    assert [p.name for p in result] == ["alice", "carol"]


async def test_list_descending():
    store = _store()
    await _saved(store, *(Persona(name=n) for n in ("a", "c", "b")))
    assert [p.name for p in await store.list(order_by="name", ascending=False)] == ["c", "b", "a"]


async def test_list_sorts_none_first():
    store = _store()
    await _saved(store, Persona(name="x", notes="n"), Persona(name="y", notes=None))
    assert [p.name for p in await store.list(order_by="notes")] == ["y", "x"]


async def test_list_windows_after_ordering():
    store = _store()
    await _saved(store, *(Persona(name=f"p{i}", created_at=T0 + timedelta(minutes=i)) for i in range(10)))
    result = await store.list(order_by="created_at", offset=3, limit=4)
    assert [p.name for p in result] == ["p3", "p4", "p5", "p6"]


async def test_count_applies_filter():
    store = _store()
    await _saved(store, Persona(name="a"), Persona(name="a"), Persona(name="b"))
    assert await store.count(Filter.equals(name="a")) == 2


# --- update ---

async def test_update_bumps_version_on_save():
    store = _store()
    (persona,) = await _saved(store, Persona(name="Alice"))
    updated = await store.update(persona.model_copy(update={"name": "Alicia"}))
    await store.save()
    stored = await store.get(persona.id)
    assert updated.version == 2
    assert stored.name == "Alicia"
    assert stored.version == 2


async def test_update_missing_raises_not_found():
    with pytest.raises(EntityNotFoundError):
        await _store().update(Persona(name="Ghost"))


async def test_update_stale_version_raises_conflict():
    store = _store()
    (persona,) = await _saved(store, Persona(name="Alice"))
    await store.update(persona.model_copy(update={"name": "One"}))
    await store.save()
    with pytest.raises(ConcurrencyConflictError):
        await store.update(persona.model_copy(update={"name": "Two"}))


async def test_concurrent_staged_updates_conflict_on_save():
    db = InMemoryDatabase()
    (persona,) = await _saved(_store(db=db), Persona(name="Alice"))
    first, second = _store(db=db), _store(db=db)
    await first.update(persona.model_copy(update={"name": "One"}))
    await second.update(persona.model_copy(update={"name": "Two"}))
    await first.save()
    with pytest.raises(ConcurrencyConflictError):
        await second.save()
    assert (await first.get(persona.id)).name == "One"


# --- remove ---

async def test_remove_missing_returns_false():
    assert await _store().remove(uuid4()) is False


async def test_remove_existing_deletes_on_save():
    store = _store()
    (persona,) = await _saved(store, Persona(name="Alice"))
    assert await store.remove(persona.id) is True
    await store.save()
    assert await store.get(persona.id) is None


# --- Uniqueness ---

async def test_duplicate_id_raises():
    store = _store()
    (persona,) = await _saved(store, Persona(name="Alice"))
    await store.add(persona)
    with pytest.raises(UniqueConstraintError):
        await store.save()


async def test_lookup_names_unique_by_default():
    store = _store(SocialMediaApp)
    await _saved(store, SocialMediaApp(name="Acme"))
    await store.add(SocialMediaApp(name="Acme"))
    with pytest.raises(UniqueConstraintError) as exc_info:
        await store.save()
    assert exc_info.value.field == "name"


async def test_failed_save_leaves_table_unchanged():
    store = _store(SocialMediaApp)
    await _saved(store, SocialMediaApp(name="Acme"))
    await store.add(SocialMediaApp(name="Other"))
    await store.add(SocialMediaApp(name="Acme"))
    with pytest.raises(UniqueConstraintError):
        await store.save()
    assert await store.count() == 1


async def test_custom_unique_fields():
    db = InMemoryDatabase(unique_fields={Persona: ("name",)})
    store = _store(db=db)
    await _saved(store, Persona(name="Alice"))
    await store.add(Persona(name="Alice"))
    with pytest.raises(UniqueConstraintError):
        await store.save()
