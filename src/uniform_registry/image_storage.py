"""Local disk storage for uploaded uniform images."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional

from uniform_registry.timestamps import MonotonicTimestamp

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded file already read into memory."""

    filename: str
    content: bytes


class ImageStorage:
    """Write uploads into *uploads_dir* and map them to public paths.

    Files are named after a millisecond timestamp plus the original file
    extension, e.g. ``1718000000000.jpg``, and served as
    ``/uploads/1718000000000.jpg``.

    Args:
        uploads_dir: Directory the files are written to.
        timestamps: Source of unique file name stems.
    """

    def __init__(
        self,
        uploads_dir: Path,
        timestamps: Optional[MonotonicTimestamp] = None,
    ):
        self._uploads_dir = Path(uploads_dir)
        self._timestamps = timestamps or MonotonicTimestamp()

    @property
    def uploads_dir(self) -> Path:
        return self._uploads_dir

    def ensure_exists(self) -> None:
        self._uploads_dir.mkdir(parents=True, exist_ok=True)

    def save(self, upload: ImageUpload) -> str:
        """Persist *upload* and return its public path."""
        suffix = PurePosixPath(upload.filename.replace("\\", "/")).suffix
        name = f"{self._timestamps.next()}{suffix}"
        dest = self._uploads_dir / name

        dest.write_bytes(upload.content)
        logger.debug("Stored upload %r as %s (%d bytes)", upload.filename, dest, len(upload.content))
        return f"{PUBLIC_PREFIX}/{name}"

    def delete(self, public_path: Optional[str]) -> bool:
        """Remove the file behind *public_path*.

        Paths outside the uploads prefix are ignored. Returns whether a file
        was removed.
        """
        local = self._resolve(public_path)
        if local is None:
            return False
        try:
            local.unlink()
        except FileNotFoundError:
            logger.warning("Image %s already gone from %s", public_path, self._uploads_dir)
            return False

        logger.debug("Deleted image %s", local)
        return True

    def _resolve(self, public_path: Optional[str]) -> Optional[Path]:
        if not public_path or not public_path.startswith(f"{PUBLIC_PREFIX}/"):
            return None
        name = public_path[len(PUBLIC_PREFIX) + 1 :]
        # only plain file names written by save() are ours to delete
        if not name or "/" in name or "\\" in name or name in {".", ".."}:
            return None
        return self._uploads_dir / name
