import sys
from pathlib import Path

import pytest
import pytest_asyncio
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine


def _configure_path() -> None:
    src_path = Path(__file__).resolve().parents[1] / "src"
    if src_path.exists():
        sys.path.insert(0, str(src_path))


_configure_path()

from rewards_api.app import build_letter_registry, create_app  # noqa: E402
from rewards_api.db.base import Base  # noqa: E402
from rewards_api.db.session import get_session, get_session_factory  # noqa: E402


@pytest_asyncio.fixture
async def engine(tmp_path):
    # File-backed so concurrent sessions each get their own connection.
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rewards.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def app_with_db(session_factory):
    app = create_app()
    # ASGITransport does not run the lifespan that installs the registry.
    app.state.provider_letters = build_letter_registry()

    async def override_get_session():
        async with session_factory() as session:
            yield session

    async def override_get_session_factory():
        return session_factory

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = override_get_session_factory

    try:
        yield app, session_factory
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def log_records():
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    try:
        yield records
    finally:
        logger.remove(handler_id)
