"""Tests for encounter_tracker/domain/repositories/base.py."""

import pytest

from encounter_tracker.domain.models.personas import Persona
from encounter_tracker.domain.repositories.base import EntityStore


class _Full(EntityStore):
    entity_type = Persona

    def __init__(self):
        self.rollbacks = 0

    async def get(self, id, filter=None): return None
    async def list(self, filter=None, order_by=None, ascending=True, limit=None, offset=0): return []
    async def count(self, filter=None): return 0
    async def add(self, entity): return entity
    async def update(self, entity): return entity
    async def remove(self, id): return False
    async def save(self): return None

    async def rollback(self):
        self.rollbacks += 1


def test_entity_store_cannot_be_instantiated_directly():
    with pytest.raises(TypeError):
        EntityStore()  # type: ignore[abstract]


def test_entity_store_concrete_subclass_must_implement_all_methods():
    class _Partial(EntityStore):
        async def get(self, id, filter=None): return None
        # missing list, count, add, update, remove, save, rollback

    with pytest.raises(TypeError):
        _Partial()  # type: ignore[abstract]


def test_entity_store_full_concrete_subclass_instantiates():
    assert _Full().entity_name == "Persona"


# --- begin_write ---

async def test_begin_write_rolls_back_when_body_raises():
    store = _Full()
    with pytest.raises(RuntimeError):
        async with store.begin_write():
            raise RuntimeError("flush failed")
    assert store.rollbacks == 1


async def test_begin_write_leaves_successful_write_alone():
    store = _Full()
    async with store.begin_write():
        await store.save()
    assert store.rollbacks == 0
