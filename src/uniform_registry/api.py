"""Application entry point for the Uniform Registry micro-service.

Public API:
    - create_app: Creates and configures the FastAPI application instance.
    - startup: Runs the application with uvicorn.
    - main: Console script entry point.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from uniform_registry.image_storage import PUBLIC_PREFIX, ImageStorage
from uniform_registry.router import router as uniform_router
from uniform_registry.settings import Settings, settings
from uniform_registry.timestamps import MonotonicTimestamp
from uniform_registry.uniform_store import UniformStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare on-disk storage and share it with request handlers.

    Ensures the uploads directory and an empty collection file exist, then
    exposes the store and image storage through `request.state`.
    """
    app_settings: Settings = app.state.settings
    timestamps = MonotonicTimestamp()

    store = UniformStore(app_settings.uniform_data_file)
    store.ensure_exists()
    images = ImageStorage(app_settings.uniform_uploads_dir, timestamps)
    images.ensure_exists()

    logger.info(
        "Serving uniforms from %s, uploads in %s",
        store.data_file,
        images.uploads_dir,
    )
    yield {
        "settings": app_settings,
        "uniform_store": store,
        "image_storage": images,
        "timestamps": timestamps,
    }


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render errors as ``{"message": ...}`` like every other response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    app_settings = app_settings or settings

    app = FastAPI(
        title="Uniform Registry Service",
        description="Stores school uniforms and their images for the frontend.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.mount(
        PUBLIC_PREFIX,
        StaticFiles(directory=app_settings.uniform_uploads_dir, check_dir=False),
        name="uploads",
    )
    app.include_router(uniform_router)
    return app


async def startup() -> None:
    """Run the HTTP server using *uvicorn* with the configured parameters."""

    app = create_app()

    config = uvicorn.Config(
        app,
        host=settings.uniform_service_host,
        port=settings.uniform_service_port,
        workers=settings.uniform_service_n_workers,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    logger.info("🚀 Server running on port %d", settings.uniform_service_port)
    await server.serve()


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(startup())


if __name__ == "__main__":
    main()
