"""Flat JSON file store for uniform records.

The whole collection lives in a single JSON array::

    [
      {"id": "1718000000000", "school": "...", "uniformCombo": "...", ...},
      ...
    ]

Every operation reads the full document and, when mutating, rewrites the
full document. Nothing is cached between calls; the file is the only source
of truth. Callers that read, modify and write back must hold `locked()` for
the whole cycle, otherwise concurrent writers overwrite each other.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class CorruptStoreError(RuntimeError):
    """Raised when the backing file does not hold a JSON array."""


class UniformStore:
    """Read and write the uniform collection backed by *data_file*.

    Args:
        data_file: Path of the JSON document holding all records.
    """

    def __init__(self, data_file: Path):
        self._data_file = Path(data_file)
        self._lock = threading.Lock()

    @property
    def data_file(self) -> Path:
        return self._data_file

    def ensure_exists(self) -> None:
        """Create the parent directory and an empty collection if missing."""
        self._data_file.parent.mkdir(parents=True, exist_ok=True)
        if not self._data_file.exists():
            self._data_file.write_text("[]", encoding="utf-8")
            logger.info("Created empty uniform store at %s", self._data_file)

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the single-writer lock for a read-modify-write cycle."""
        with self._lock:
            yield

    def load_all(self) -> list[dict[str, Any]]:
        """Return every record in store order.

        Raises:
            CorruptStoreError: If the file is not valid JSON or not an array.
            OSError: If the file cannot be read.
        """
        raw = self._data_file.read_text(encoding="utf-8")
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptStoreError(
                f"Uniform store {self._data_file} is not valid JSON"
            ) from exc

        if not isinstance(records, list):
            raise CorruptStoreError(
                f"Uniform store {self._data_file} must contain a JSON array"
            )
        return records

    def save_all(self, records: list[dict[str, Any]]) -> None:
        """Overwrite the backing file with *records*.

        The document is written to a temporary sibling first and moved into
        place, so readers see either the old or the new collection.
        """
        payload = json.dumps(records, indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(
            dir=self._data_file.parent, prefix=".uniforms-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                tmp_file.write(payload)
            os.replace(tmp_path, self._data_file)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

        logger.debug("Saved %d uniform records to %s", len(records), self._data_file)
