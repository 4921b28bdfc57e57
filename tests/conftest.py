from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Make the package importable when running the suite from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from people_api.core import config as core_config  # noqa: E402
from people_api.core.cache import TagCache  # noqa: E402
from people_api.db import create_tables  # noqa: E402
from people_api.db import session as db_session  # noqa: E402
from people_api.repositories.person_repository import PersonRepository  # noqa: E402
from people_api.repositories.sql_repository import SQLRepository  # noqa: E402

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Temporary SQLite database; settings and engine caches are reset on both ends."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]

    engine = db_session.get_engine()
    create_tables.drop_all()
    create_tables.create_all()

    yield db_file

    create_tables.drop_all()
    engine.dispose()
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


class CountingSessions:
    """Session factory that records how many sessions were opened."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return db_session.get_session()


@pytest.fixture()
def sql_repo(temp_db) -> SQLRepository:
    return SQLRepository()


@pytest.fixture()
def environment(sql_repo):
    return sql_repo.create_environment()


@pytest.fixture()
def user_id_class(sql_repo, environment):
    return sql_repo.create_attribute_class(environment.id, "userId")


@pytest.fixture()
def cache() -> TagCache:
    return TagCache(max_size=100)


@pytest.fixture()
def sessions(temp_db) -> CountingSessions:
    return CountingSessions()


@pytest.fixture()
def repo(cache, sql_repo, sessions) -> PersonRepository:
    return PersonRepository(cache, sql_repo, session_factory=sessions, clock=lambda: FIXED_NOW)


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW
