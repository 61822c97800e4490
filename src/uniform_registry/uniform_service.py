"""Business logic for the uniform collection.

Each operation is a single read-modify-write cycle over the whole collection
held by `UniformStore`. Cycles are serialized on the store lock so concurrent
requests cannot drop each other's changes.

Records are plain dicts shaped like::

    {
        "id": "1718000000000",
        "school": "St. Mary's",
        "schoolType": "Secondary",
        "uniformCombo": "Blue shirt, grey trousers",
        "uniformImage": "/uploads/1718000000001.jpg",
        "compoundWear": "...",
        "compoundImage": None,
        "churchWear": "...",
        "churchImage": None,
    }
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from uniform_registry.image_storage import ImageStorage, ImageUpload
from uniform_registry.timestamps import MonotonicTimestamp
from uniform_registry.uniform_store import UniformStore

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("school", "schoolType", "uniformCombo", "compoundWear", "churchWear")
IMAGE_SLOTS = ("uniformImage", "compoundImage", "churchImage")
REQUIRED_FIELDS = ("school", "uniformCombo")

# field order of a freshly created record
_RECORD_LAYOUT = (
    ("school", None),
    ("schoolType", None),
    ("uniformCombo", None),
    (None, "uniformImage"),
    ("compoundWear", None),
    (None, "compoundImage"),
    ("churchWear", None),
    (None, "churchImage"),
)


class UniformServiceError(Exception):
    """Base class for errors reported back to the caller."""


class ValidationError(UniformServiceError):
    """Raised when a submission lacks required data."""


class NotFoundError(UniformServiceError):
    """Raised when no record has the requested id."""


class UniformService:
    """List, create, update and delete uniform records.

    Args:
        store: Backing JSON store.
        images: Storage for uploaded image files.
        ids: Source of record ids, shared timestamps by default.
        delete_orphaned_images: Remove image files that no record points at
            anymore after an update or delete.
    """

    def __init__(
        self,
        store: UniformStore,
        images: ImageStorage,
        ids: Optional[MonotonicTimestamp] = None,
        delete_orphaned_images: bool = True,
    ):
        self._store = store
        self._images = images
        self._ids = ids or MonotonicTimestamp()
        self._delete_orphaned_images = delete_orphaned_images

    def list_uniforms(self) -> list[dict[str, Any]]:
        return self._store.load_all()

    def create_uniform(
        self,
        fields: Mapping[str, str],
        images: Mapping[str, ImageUpload],
    ) -> dict[str, Any]:
        """Validate, store uploads and append a new record.

        Raises:
            ValidationError: If ``school`` or ``uniformCombo`` is missing.
            CorruptStoreError: If the backing file cannot be parsed.
        """
        if any(not fields.get(name) for name in REQUIRED_FIELDS):
            raise ValidationError("School name and uniform combination are required.")

        with self._store.locked():
            records = self._store.load_all()
            record_id = self._new_id(records)

            stored = self._store_images(images)
            record: dict[str, Any] = {"id": record_id}
            for field, slot in _RECORD_LAYOUT:
                if slot is not None:
                    record[slot] = stored.get(slot)
                elif field in fields:
                    record[field] = fields[field]

            records.append(record)
            self._save_or_discard(records, stored)

        logger.info("Added new uniform: %s", record)
        return record

    def update_uniform(
        self,
        uniform_id: str,
        fields: Mapping[str, str],
        images: Mapping[str, ImageUpload],
    ) -> dict[str, Any]:
        """Shallow-merge *fields* and new uploads into an existing record.

        Every submitted text field overwrites the old value, empty strings
        included. Image slots only change when a new file was uploaded.

        Raises:
            NotFoundError: If *uniform_id* is unknown.
            CorruptStoreError: If the backing file cannot be parsed.
        """
        with self._store.locked():
            records = self._store.load_all()
            index = self._index_of(records, uniform_id)
            if index is None:
                raise NotFoundError("Uniform not found")

            old = records[index]
            stored = self._store_images(images)
            updated = {
                **old,
                **{name: value for name, value in fields.items() if name in TEXT_FIELDS},
                **stored,
            }

            records[index] = updated
            self._save_or_discard(records, stored)

        logger.info("Updated uniform: %s", updated)
        if self._delete_orphaned_images:
            for slot in stored:
                if old.get(slot) != updated[slot]:
                    self._images.delete(old.get(slot))
        return updated

    def delete_uniform(self, uniform_id: str) -> None:
        """Remove the record with *uniform_id*.

        Raises:
            NotFoundError: If *uniform_id* is unknown.
            CorruptStoreError: If the backing file cannot be parsed.
        """
        with self._store.locked():
            records = self._store.load_all()
            remaining = [r for r in records if r.get("id") != uniform_id]
            if len(remaining) == len(records):
                raise NotFoundError("Uniform not found")

            self._store.save_all(remaining)

        logger.info("Deleted uniform: %s", uniform_id)
        if self._delete_orphaned_images:
            for record in records:
                if record.get("id") == uniform_id:
                    for slot in IMAGE_SLOTS:
                        self._images.delete(record.get(slot))

    def _new_id(self, records: list[dict[str, Any]]) -> str:
        taken = {str(r.get("id")) for r in records}
        record_id = str(self._ids.next())
        while record_id in taken:
            record_id = str(self._ids.next())
        return record_id

    @staticmethod
    def _index_of(records: list[dict[str, Any]], uniform_id: str) -> Optional[int]:
        for index, record in enumerate(records):
            if record.get("id") == uniform_id:
                return index
        return None

    def _store_images(self, images: Mapping[str, ImageUpload]) -> dict[str, str]:
        stored: dict[str, str] = {}
        try:
            for slot in IMAGE_SLOTS:
                if slot in images:
                    stored[slot] = self._images.save(images[slot])
        except Exception:
            self._discard(stored)
            raise
        return stored

    def _save_or_discard(
        self, records: list[dict[str, Any]], stored: Mapping[str, str]
    ) -> None:
        """Persist *records*; drop this request's uploads if that fails."""
        try:
            self._store.save_all(records)
        except Exception:
            self._discard(stored)
            raise

    def _discard(self, stored: Mapping[str, str]) -> None:
        for public_path in stored.values():
            self._images.delete(public_path)
