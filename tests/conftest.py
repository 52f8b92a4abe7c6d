# tests/conftest.py
import asyncio
import os
import shutil
import tempfile
from pathlib import Path

# must be set before the app (and its engine) is imported
TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="bugtracker-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_DIR / 'test_bugs.db'}"
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from bugtracker.bug import models  # noqa: F401  registers the bugs table
from bugtracker.core.database import Base, build_engine, drop_db, init_db
from bugtracker.main import app


class RecordingEventSink:
    def __init__(self):
        self.events = []

    def emit(self, event, **fields):
        self.events.append((event, fields))

    def names(self):
        return [name for name, _ in self.events]


async def reset_db():
    await drop_db()
    await init_db()


@pytest.fixture(scope="session", autouse=True)
def test_db_dir():
    yield TEST_DB_DIR
    shutil.rmtree(TEST_DB_DIR, ignore_errors=True)


@pytest.fixture
def client():
    asyncio.run(reset_db())
    with TestClient(app) as c:
        yield c


@pytest.fixture
def event_sink():
    return RecordingEventSink()


@pytest.fixture
def bug_payload():
    return {
        "title": "Login button unresponsive",
        "description": "Clicking the login button on the home page does nothing",
        "reporter": "Dana",
    }


@pytest_asyncio.fixture
async def db_session(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'bugs.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session

    await engine.dispose()
