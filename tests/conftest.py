"""Shared fixtures: a throwaway SQLite database, wired services and an HTTP client."""

import os

os.environ["REDIS_ENABLED"] = "false"
os.environ["TELEMETRY_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient

from caseflow.api.v1.dependencies import compose_services
from caseflow.core.config import get_settings
from caseflow.core.limiter import limiter
from caseflow.infrastructure.persistence import models  # noqa: F401  (registers tables)
from caseflow.infrastructure.persistence.database import (
    Base,
    build_engine,
    build_session_factory,
    get_db,
    get_db_transactional,
)

get_settings.cache_clear()


@pytest.fixture
async def engine(tmp_path):
    async_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'caseflow-test.db'}")
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_engine
    await async_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as db:
        yield db


@pytest.fixture
def services(session):
    """Engine services on one session; nothing is committed."""
    return compose_services(session)


@pytest.fixture
async def client(session_factory):
    from caseflow.main import create_app

    app = create_app()

    async def override_get_db():
        async with session_factory() as db:
            yield db

    async def override_get_db_transactional():
        async with session_factory() as db:
            async with db.begin():
                yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_transactional] = override_get_db_transactional
    limiter.reset()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
