"""Tests for EntityCache in encounter_tracker/domain/services/caching.py."""

from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from encounter_tracker.domain.models.personas import Persona
from encounter_tracker.domain.services.caching import Cache, EntityCache
from encounter_tracker.domain.services.options import DataServiceOptions


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, minutes):
        self.now += minutes * 60


def _cache(backend=None, clock=None):
    options = DataServiceOptions(_env_file=None, cache_expiration_minutes=30, cache_sliding_expiration_minutes=5)
    return EntityCache(backend or AsyncMock(spec=Cache), options, clock=clock or _Clock())


# --- Keys ---

def test_entity_key_format():
    entity_id = uuid4()
    assert EntityCache.entity_key("Persona", entity_id) == f"Persona:{entity_id}"


def test_listing_key_joins_parts():
    assert EntityCache.listing_key("Persona", "paged", "anonymous", 2, 20) == "Persona:paged:anonymous:2:20"


def test_listing_keys_differ_by_actor():
    assert EntityCache.listing_key("Persona", "all", "a") != EntityCache.listing_key("Persona", "all", "b")


# --- Backend interaction ---

async def test_set_entity_uses_absolute_and_sliding_expiration():
    backend = AsyncMock(spec=Cache)
    persona = Persona(name="Alice")
    await _cache(backend).set_entity("Persona", persona)
    backend.set.assert_awaited_once_with(
        f"Persona:{persona.id}",
        persona,
        absolute_expiration=timedelta(minutes=30),
        sliding_expiration=timedelta(minutes=5),
    )


async def test_forget_entity_removes_key():
    backend = AsyncMock(spec=Cache)
    entity_id = uuid4()
    await _cache(backend).forget_entity("Persona", entity_id)
    backend.remove.assert_awaited_once_with(f"Persona:{entity_id}")


async def test_set_listing_tracks_key():
    cache = _cache()
    await cache.set_listing("Persona", "Persona:all:anonymous", ())
    assert cache.tracked_listing_keys("Persona") == {"Persona:all:anonymous"}


async def test_tracked_listing_keys_drop_once_expired():
    clock = _Clock()
    cache = _cache(clock=clock)
    await cache.set_listing("Persona", "Persona:paged:a:1", ())
    clock.advance(31)
    await cache.set_listing("Persona", "Persona:paged:a:2", ())
    assert cache.tracked_listing_keys("Persona") == {"Persona:paged:a:2"}


async def test_tracked_listing_keys_kept_until_expiry():
    clock = _Clock()
    cache = _cache(clock=clock)
    await cache.set_listing("Persona", "Persona:paged:a:1", ())
    clock.advance(29)
    await cache.set_listing("Persona", "Persona:paged:a:2", ())
    assert cache.tracked_listing_keys("Persona") == {"Persona:paged:a:1", "Persona:paged:a:2"}


async def test_set_listing_uses_absolute_expiration_only():
    backend = AsyncMock(spec=Cache)
    await _cache(backend).set_listing("Persona", "k", ())
    backend.set.assert_awaited_once_with("k", (), absolute_expiration=timedelta(minutes=30))


async def test_invalidate_listings_removes_tracked_keys():
    backend = AsyncMock(spec=Cache)
    cache = _cache(backend)
    await cache.set_listing("Persona", "Persona:all:a", ())
    await cache.set_listing("Persona", "Persona:all:b", ())
    await cache.invalidate_listings("Persona")
    removed = {call.args[0] for call in backend.remove.await_args_list}
    assert removed == {"Persona:all:a", "Persona:all:b"}
    assert cache.tracked_listing_keys("Persona") == frozenset()


async def test_invalidate_listings_leaves_other_entity_types():
    backend = AsyncMock(spec=Cache)
    cache = _cache(backend)
    await cache.set_listing("Persona", "Persona:all:a", ())
    await cache.set_listing("Encounter", "Encounter:all:a", ())
    await cache.invalidate_listings("Persona")
    assert cache.tracked_listing_keys("Encounter") == {"Encounter:all:a"}


async def test_invalidate_listings_with_nothing_tracked_is_noop():
    backend = AsyncMock(spec=Cache)
    await _cache(backend).invalidate_listings("Persona")
    backend.remove.assert_not_awaited()


def test_cache_is_abstract():
    with pytest.raises(TypeError):
        Cache()  # type: ignore[abstract]
