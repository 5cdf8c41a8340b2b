"""
Shared fixtures.

Every test gets its own SQLite file under tmp_path, created through the
same adapter the application uses, and an app built with create_app()
around that database.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from urlsh.core.setting import Settings
from urlsh.db.session import create_engine_from_settings, create_session_maker, create_tables
from urlsh.gen.shortener import CodeGenerator
from urlsh.main import create_app

BASE_URL = "http://localhost:8090"


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'urlsh-test.db'}",
        BASE_URL=BASE_URL,
        LINK_TTL_HOURS=24,
    )


@pytest.fixture
def generator():
    return CodeGenerator(BASE_URL)


@pytest_asyncio.fixture
async def engine(test_settings):
    engine = create_engine_from_settings(test_settings)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return create_session_maker(engine)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def app(test_settings, session_maker, generator):
    return create_app(test_settings, session_maker=session_maker, generator=generator)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
