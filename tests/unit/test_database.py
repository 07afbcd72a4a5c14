"""Unit tests for encounter_tracker/infrastructure/database.py.

Tests cover Settings defaults, env var override, and object types.
No database connection is required.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from encounter_tracker.infrastructure.database import (
    AsyncSessionLocal,
    Base,
    Settings,
    build_engine,
    build_session_factory,
    engine,
)


def _settings():
    return Settings(_env_file=None)


def test_settings_default_url_uses_asyncpg(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert "postgresql+asyncpg" in _settings().database_url


def test_settings_default_url_targets_localhost(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert "localhost" in _settings().database_url


def test_settings_reads_database_url_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@myhost/mydb")
    assert _settings().database_url == "postgresql+asyncpg://u:p@myhost/mydb"


def test_settings_sql_echo_defaults_off(monkeypatch):
    monkeypatch.delenv("SQL_ECHO", raising=False)
    assert _settings().sql_echo is False


def test_settings_reads_log_level_from_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    assert _settings().log_level == "DEBUG"


def test_base_is_declarative_base():
    assert issubclass(Base, DeclarativeBase)


def test_engine_is_async():
    assert isinstance(engine, AsyncEngine)


def test_session_factory_produces_async_sessions():
    assert isinstance(AsyncSessionLocal, async_sessionmaker)
    assert AsyncSessionLocal.class_ is AsyncSession


# --- Builders ---

def test_build_engine_honours_sql_echo():
    built = build_engine(Settings(_env_file=None, sql_echo=True))
    assert built.echo is True


def test_build_engine_uses_configured_url():
    built = build_engine(Settings(_env_file=None, database_url="postgresql+asyncpg://u:p@db/encounters"))
    assert built.url.host == "db"
    assert built.url.database == "encounters"


def test_build_session_factory_keeps_objects_after_commit():
    factory = build_session_factory(engine)
    assert factory.kw["expire_on_commit"] is False
