"""FastAPI dependency factories for the Uniform Registry service."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from uniform_registry.image_storage import ImageStorage
from uniform_registry.settings import Settings
from uniform_registry.timestamps import MonotonicTimestamp
from uniform_registry.uniform_service import UniformService
from uniform_registry.uniform_store import UniformStore


def get_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""

    return request.state.settings


def get_uniform_store(request: Request) -> UniformStore:
    """Return the shared *UniformStore* from the lifespan state."""

    return request.state.uniform_store


def get_image_storage(request: Request) -> ImageStorage:
    """Return the shared *ImageStorage* from the lifespan state."""

    return request.state.image_storage


def get_timestamps(request: Request) -> MonotonicTimestamp:
    return request.state.timestamps


def get_uniform_service(
    store: Annotated[UniformStore, Depends(get_uniform_store)],
    images: Annotated[ImageStorage, Depends(get_image_storage)],
    timestamps: Annotated[MonotonicTimestamp, Depends(get_timestamps)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> UniformService:
    """Create a *UniformService* wired with the shared store and image storage."""

    return UniformService(
        store,
        images,
        ids=timestamps,
        delete_orphaned_images=app_settings.delete_orphaned_images,
    )
