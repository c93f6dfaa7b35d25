import pytest
import pytest_asyncio
from pathlib import Path
from unittest.mock import Mock
from fastapi.testclient import TestClient
from typing import AsyncGenerator, Generator

from core.config import Settings, DEFAULT_STATIC_DIR
from main import create_app
from services.comment_store import CommentStore


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def database_url(tmp_path) -> str:
    """A fresh SQLite database file for each test."""
    return sqlite_url(tmp_path / "comments.db")


@pytest.fixture
def settings(database_url) -> Settings:
    return Settings(database_url=database_url, static_dir=DEFAULT_STATIC_DIR)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def test_client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app, running its lifespan."""
    with TestClient(app) as client:
        yield client


@pytest_asyncio.fixture
async def store(database_url) -> AsyncGenerator[CommentStore, None]:
    """A bootstrapped comment store backed by a temporary database."""
    comment_store = CommentStore.open(database_url)
    await comment_store.bootstrap()
    yield comment_store
    await comment_store.close()


@pytest.fixture
def sample_comment():
    """Sample create-comment payload for testing."""
    return {
        "username": "alice",
        "novelName": "Dune",
        "readTime": "ch.1",
        "content": "great opening",
    }


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("LOG_FILE", raising=False)


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    logger = Mock()
    logger.info = Mock()
    logger.error = Mock()
    logger.warning = Mock()
    logger.debug = Mock()
    return logger
