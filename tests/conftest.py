from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from uniform_registry.api import create_app
from uniform_registry.image_storage import ImageStorage
from uniform_registry.settings import Settings
from uniform_registry.timestamps import MonotonicTimestamp
from uniform_registry.uniform_service import UniformService
from uniform_registry.uniform_store import UniformStore


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        uniform_data_file=tmp_path / "data" / "uniforms.json",
        uniform_uploads_dir=tmp_path / "uploads",
        cors_allowed_origins=["https://localhost:5173"],
    )


@pytest.fixture
def client(app_settings):
    """A test client whose lifespan has bootstrapped the storage paths."""
    with TestClient(create_app(app_settings)) as c:
        yield c


@pytest.fixture
def store(tmp_path):
    store = UniformStore(tmp_path / "data" / "uniforms.json")
    store.ensure_exists()
    return store


@pytest.fixture
def images(tmp_path):
    images = ImageStorage(tmp_path / "uploads")
    images.ensure_exists()
    return images


@pytest.fixture
def service(store, images):
    return UniformService(store, images, ids=MonotonicTimestamp())


@pytest.fixture
def sample_uniform():
    """Form fields of a complete uniform."""
    return {
        "school": "St. Mary's College",
        "schoolType": "Secondary",
        "uniformCombo": "White shirt, navy trousers",
        "compoundWear": "House T-shirt",
        "churchWear": "All white",
    }
