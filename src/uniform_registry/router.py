"""API router for the Uniform Registry service."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi import Path as FastAPIPath  # name conflict with pathlib
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from uniform_registry.dependencies import get_uniform_service
from uniform_registry.schemas import MessageResponse, UniformRecord, UniformResponse
from uniform_registry.uniform_service import NotFoundError, UniformService, ValidationError
from uniform_registry.uniform_store import CorruptStoreError
from uniform_registry.validation import parse_uniform_submission

router = APIRouter()
logger = logging.getLogger(__name__)

# load ./docs/openapi/uniform_form.yaml relative to this file regardless of cwd
OPENAPI_SPEC_UNIFORM_FORM = yaml.safe_load(
    (Path(__file__).parent / "docs" / "openapi" / "uniform_form.yaml").read_text()
)


@router.get("/", response_class=PlainTextResponse, tags=["Health"])
async def root() -> str:
    return "✅ Backend running fine!"


@router.get(
    "/healthz",
    response_class=PlainTextResponse,
    summary="Health check",
    tags=["Health"],
)
async def health_check() -> str:
    """Simple liveness probe used by orchestration systems."""

    return "OK"


@router.get(
    "/uniforms",
    response_model=list[UniformRecord],
    response_model_exclude_unset=True,
    summary="List every uniform in store order",
    tags=["Uniforms"],
)
async def list_uniforms(
    service: UniformService = Depends(get_uniform_service),
) -> list[dict]:
    try:
        return await run_in_threadpool(service.list_uniforms)
    except CorruptStoreError:
        logger.error("Unable to read uniform store", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Uniform store is unreadable.",
        )


@router.post(
    "/add-uniform",
    response_model=UniformResponse,
    response_model_exclude_unset=True,
    summary="Create a uniform with up to three images",
    tags=["Uniforms"],
    openapi_extra=OPENAPI_SPEC_UNIFORM_FORM,
)
async def add_uniform(
    request: Request,
    service: UniformService = Depends(get_uniform_service),
) -> dict:
    """Store the uploaded images and append a new uniform record."""
    try:
        submission = await parse_uniform_submission(request)
        record = await run_in_threadpool(
            service.create_uniform, submission.fields, submission.images
        )
        return {"message": "Uniform added successfully!", "data": record}
    except ValidationError as exc:
        logger.warning("Rejected new uniform: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except HTTPException:
        raise
    except Exception:
        logger.error("Add error", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error while adding uniform.",
        )


@router.put(
    "/update-uniform/{uniform_id}",
    response_model=UniformResponse,
    response_model_exclude_unset=True,
    summary="Merge new fields and images into a uniform",
    tags=["Uniforms"],
    openapi_extra=OPENAPI_SPEC_UNIFORM_FORM,
)
async def update_uniform(
    request: Request,
    uniform_id: str = FastAPIPath(..., description="Uniform id"),
    service: UniformService = Depends(get_uniform_service),
) -> dict:
    """Overwrite submitted fields; image slots change only on a new upload."""
    try:
        submission = await parse_uniform_submission(request)
        record = await run_in_threadpool(
            service.update_uniform, uniform_id, submission.fields, submission.images
        )
        return {"message": "Uniform updated successfully!", "data": record}
    except ValidationError as exc:
        logger.warning("Rejected update of %s: %s", uniform_id, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except HTTPException:
        raise
    except Exception:
        logger.error("Update error", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error while updating uniform.",
        )


@router.delete(
    "/delete-uniform/{uniform_id}",
    response_model=MessageResponse,
    summary="Delete a uniform",
    tags=["Uniforms"],
)
async def delete_uniform(
    uniform_id: str = FastAPIPath(..., description="Uniform id"),
    service: UniformService = Depends(get_uniform_service),
) -> MessageResponse:
    try:
        await run_in_threadpool(service.delete_uniform, uniform_id)
        return MessageResponse(message="Uniform deleted successfully!")
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except Exception:
        logger.error("Delete error", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error while deleting uniform.",
        )
