"""Input parsing for uniform submissions.

Create and update requests carry the same shape: up to five text fields and
up to three image slots holding at most one file each. Multipart and
urlencoded forms are read through Starlette; a JSON object is accepted for
text-only submissions.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from fastapi import Request
from starlette.datastructures import UploadFile

from uniform_registry.image_storage import ImageUpload
from uniform_registry.uniform_service import IMAGE_SLOTS, TEXT_FIELDS, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class UniformSubmission:
    """Text fields and image uploads submitted for one record."""

    fields: dict[str, str] = field(default_factory=dict)
    images: dict[str, ImageUpload] = field(default_factory=dict)


async def parse_uniform_submission(request: Request) -> UniformSubmission:
    """Extract the known text fields and image slots from *request*.

    Unknown keys (including ``id``) are ignored. Empty text values are kept,
    they overwrite on update.

    Raises:
        ValidationError: If a slot holds more than one file, or a JSON body
            is not an object of strings.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        return await _parse_json(request)

    submission = UniformSubmission()
    async with request.form() as form:
        for name, value in form.multi_items():
            if isinstance(value, UploadFile):
                if name not in IMAGE_SLOTS:
                    logger.debug("Ignoring file in unknown field %r", name)
                    continue
                content = await value.read()
                # browsers send an empty part when no file was chosen
                if not value.filename and not content:
                    continue
                if name in submission.images:
                    raise ValidationError(f"Only one file may be uploaded for {name}.")
                submission.images[name] = ImageUpload(value.filename or "", content)
            elif name in TEXT_FIELDS:
                submission.fields[name] = value

    return submission


async def _parse_json(request: Request) -> UniformSubmission:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Request body must be valid JSON.") from exc

    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object.")

    submission = UniformSubmission()
    for name in TEXT_FIELDS:
        if name not in body:
            continue
        if not isinstance(body[name], str):
            raise ValidationError(f"{name} must be a string.")
        submission.fields[name] = body[name]
    return submission
