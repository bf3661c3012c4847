"""Pytest configuration and fixtures."""

import os
import tempfile
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from bizledger.database import Database
from bizledger.providers import Completion, MistralProvider
from bizledger.services import AIService, AnalyticsService, OperationsService
from bizledger.settings import Settings

TODAY = date(2026, 10, 19)


def _remove_db_files(path: str):
    for ext in ["", "-wal", "-shm"]:
        p = path + ext
        if os.path.exists(p):
            os.unlink(p)


@pytest_asyncio.fixture
async def db():
    """Create a temporary migrated database for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    database = Database(path)
    await database.connect()
    await database.migrate()

    yield database

    await database.close()
    _remove_db_files(path)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        environment="development",
        data_dir=tmp_path,
        database_path=tmp_path / "bizledger.db",
        mistral_api_key="",
    )


@pytest.fixture
def operations(db):
    return OperationsService(db, today=lambda: TODAY)


@pytest.fixture
def analytics(db):
    return AnalyticsService(db)


@pytest_asyncio.fixture
async def offline_provider(settings):
    """Provider without an API key."""
    provider = MistralProvider(settings)
    yield provider
    await provider.close()


def _provider_double(text: str = "Provider analysis", tokens: int = 42, error: Exception | None = None) -> MagicMock:
    """Configured provider double. Pass ``error`` to make every call fail."""
    provider = MagicMock(spec=MistralProvider)
    provider.configured = True
    provider.model = "mistral-test"
    if error is not None:
        provider.complete = AsyncMock(side_effect=error)
    else:
        provider.complete = AsyncMock(return_value=Completion(text=text, tokens=tokens, model="mistral-test"))
    return provider


@pytest.fixture
def make_provider():
    return _provider_double


@pytest.fixture
def make_ai(db, analytics, settings):
    """Build an AIService around a given provider, pinned to TODAY."""

    def _make(provider) -> AIService:
        return AIService(db, analytics, provider, settings, today=lambda: TODAY)

    return _make


@pytest_asyncio.fixture
async def category_ids(db):
    """Two categories, returned by name."""
    office = await db.insert_category("Office Supplies")
    software = await db.insert_category("Software")
    return {"Office Supplies": office, "Software": software}
