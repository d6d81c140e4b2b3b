"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from ams_moderation.clients import InMemoryBlobStorage, InMemoryMediaServices
from ams_moderation.config import settings
from ams_moderation.dependencies import build_pipeline, get_pipeline
from ams_moderation.main import app
from ams_moderation.services import ResultStore
from tests.fixtures import FakeClock


@pytest.fixture
def temp_output_dir():
    """Create a temporary directory for downloaded results during tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings(temp_output_dir):
    """Override settings for testing."""
    original = {
        "output_dir": settings.output_dir,
        "function_keys": settings.function_keys,
        "backend": settings.backend,
        "strict_job_outcome": settings.strict_job_outcome,
        "max_file_size_mb": settings.max_file_size_mb,
    }

    # Set test configuration
    settings.output_dir = temp_output_dir
    settings.function_keys = "test_key_123,test_key_456"
    settings.backend = "memory"
    settings.strict_job_outcome = False

    yield settings

    # Restore original settings
    for name, value in original.items():
        setattr(settings, name, value)


@pytest.fixture
def clock():
    """Simulated time shared by every stage of a pipeline."""
    return FakeClock()


@pytest.fixture
def blob_storage():
    return InMemoryBlobStorage()


@pytest.fixture
def media(blob_storage):
    """In-memory media account backed by ``blob_storage``."""
    return InMemoryMediaServices(blob_storage)


@pytest.fixture
def store(temp_output_dir):
    return ResultStore(temp_output_dir)


@pytest.fixture
def pipeline(test_settings, media, blob_storage, clock):
    """Pipeline over the in-memory backend with simulated time."""
    return build_pipeline(test_settings, media, blob_storage, clock=clock.now, sleep=clock.sleep)


@pytest.fixture
def client(test_settings, pipeline):
    """Create a test client whose routes use the in-memory pipeline."""
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def api_key():
    """Valid function key for testing."""
    return "test_key_123"


@pytest.fixture
def headers(api_key):
    """Request headers with valid function key."""
    return {"x-functions-key": api_key}
