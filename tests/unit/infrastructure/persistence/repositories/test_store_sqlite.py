"""SqlEntityStore writes against a real SQLite database (aiosqlite).

Each test runs the data service the way a request does: one session, one
outer transaction, several writes.
"""

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine

from encounter_tracker.domain.models.lookups import BehaviorType
from encounter_tracker.domain.models.results import ErrorKind
from encounter_tracker.domain.services.caching import EntityCache
from encounter_tracker.domain.services.data_service import CommonEntityDataService
from encounter_tracker.domain.services.options import DataServiceOptions
from encounter_tracker.infrastructure.cache import MemoryCache
from encounter_tracker.infrastructure.database import build_session_factory
from encounter_tracker.infrastructure.persistence.models import lookups as orm
from encounter_tracker.infrastructure.persistence.repositories.store import SqlEntityStore


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'encounters.db'}")

    # SQLAlchemy emits BEGIN itself so SAVEPOINT nests inside the outer transaction.
    @event.listens_for(engine.sync_engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(orm.BehaviorType.__table__.create)
    yield engine
    await engine.dispose()


def _service(session):
    options = DataServiceOptions(_env_file=None)
    store = SqlEntityStore(BehaviorType, orm.BehaviorType, session)
    return CommonEntityDataService(BehaviorType, store, EntityCache(MemoryCache(), options), options)


async def test_duplicate_create_keeps_earlier_writes(engine):
    sessions = build_session_factory(engine)
    async with sessions() as session:
        async with session.begin():
            service = _service(session)
            acme = (await service.create(BehaviorType(name="Acme"))).data
            assert (await service.create(BehaviorType(name="Other"))).is_success

            duplicate = await service.create(BehaviorType(name="Acme"))
            assert duplicate.error_kind is ErrorKind.VALIDATION_ERROR

            listed = await service.get_all()
            assert listed.is_success
            assert [b.name for b in listed.data] == ["Acme", "Other"]

    async with sessions() as session:
        result = await _service(session).get_by_id(acme.id)
    assert result.is_success
    assert result.data.name == "Acme"


async def test_write_after_failed_write_is_committed(engine):
    sessions = build_session_factory(engine)
    async with sessions() as session:
        async with session.begin():
            service = _service(session)
            await service.create(BehaviorType(name="Acme"))
            await service.create(BehaviorType(name="Acme"))
            assert (await service.create(BehaviorType(name="Third"))).is_success

    async with sessions() as session:
        listed = await _service(session).get_all()
    assert [b.name for b in listed.data] == ["Acme", "Third"]
