"""
Filesystem storage for news featured images.

Uploads are staged in a temporary directory, validated, then moved under the
permanent image root with a generated name. The database only ever stores the
public path (``<url_prefix>/<filename>``).
"""

from __future__ import annotations

import mimetypes
import secrets
import shutil
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Protocol

from loguru import logger

from school_portal.core.config import settings
from school_portal.core.exceptions import NotFoundError, StorageError, ValidationError

CHUNK_SIZE = 64 * 1024
UNSAFE_FILENAME_PARTS = ("..", "/", "\\", "\x00")


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


@dataclass
class UploadedImage:
    """A staged upload waiting to be validated and committed."""

    original_name: str
    size: int
    content_type: str
    temp_path: Path


def is_safe_filename(filename: str) -> bool:
    if not filename or filename.strip() != filename:
        return False
    return not any(part in filename for part in UNSAFE_FILENAME_PARTS)


class NewsImageStorage:
    """Stage, validate, commit and remove news images."""

    def __init__(
        self,
        root: Path | str,
        staging: Path | str | None = None,
        url_prefix: str = "/api/v1/news/images",
        max_bytes: int = 5 * 1024 * 1024,
        allowed_types: Optional[Iterable[str]] = None,
    ) -> None:
        self.root = Path(root)
        self.staging = Path(staging) if staging else self.root.parent / "tmp"
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes
        self.allowed_types = {
            content_type.lower()
            for content_type in (allowed_types or settings.NEWS_IMAGE_ALLOWED_TYPES)
        }
        self.root.mkdir(parents=True, exist_ok=True)
        self.staging.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls) -> "NewsImageStorage":
        upload_dir = Path(settings.UPLOAD_DIR)
        return cls(
            root=upload_dir / "news",
            staging=upload_dir / "tmp",
            url_prefix=settings.NEWS_IMAGE_URL_PREFIX,
            max_bytes=settings.NEWS_IMAGE_MAX_BYTES,
            allowed_types=settings.NEWS_IMAGE_ALLOWED_TYPES,
        )

    async def stage(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        stream: AsyncReadable,
    ) -> UploadedImage:
        """
        Copy an incoming stream into the staging directory.

        Reading stops once the stream exceeds ``max_bytes``; the recorded size
        is then larger than the limit and ``validate`` rejects it.
        """
        temp_path = self.staging / f"upload-{uuid.uuid4().hex}"
        size = 0
        try:
            with temp_path.open("wb") as handle:
                while True:
                    chunk = await stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_bytes:
                        break
                    handle.write(chunk)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to stage uploaded image: {exc}") from exc

        return UploadedImage(
            original_name=filename or "",
            size=size,
            content_type=(content_type or "").lower(),
            temp_path=temp_path,
        )

    def validate(self, upload: UploadedImage) -> None:
        if upload.content_type not in self.allowed_types:
            raise ValidationError(
                "Only image files are allowed (jpeg, jpg, png, gif, webp)",
                errors=[{"field": "image", "message": f"Unsupported content type '{upload.content_type}'"}],
            )
        if upload.size > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise ValidationError(
                f"File too large. Maximum size is {limit_mb}MB",
                errors=[{"field": "image", "message": f"{upload.size} bytes exceeds the limit"}],
            )

    def _extension_for(self, upload: UploadedImage) -> str:
        suffix = Path(upload.original_name).suffix.lower()
        if suffix and is_safe_filename(suffix):
            return suffix
        return mimetypes.guess_extension(upload.content_type) or ""

    def generate_filename(self, upload: UploadedImage) -> str:
        millis = int(time.time() * 1000)
        return f"news-{millis}-{secrets.randbelow(10**9)}{self._extension_for(upload)}"

    def commit(self, upload: UploadedImage) -> str:
        """Move a staged file into permanent storage and return its public path."""
        filename = self.generate_filename(upload)
        destination = self.root / filename
        try:
            shutil.move(str(upload.temp_path), str(destination))
        except OSError as exc:
            raise StorageError(f"Failed to store image: {exc}") from exc

        logger.info(f"Stored news image {filename} ({upload.size} bytes)")
        return f"{self.url_prefix}/{filename}"

    def discard(self, upload: Optional[UploadedImage]) -> None:
        if upload is None:
            return
        try:
            upload.temp_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning(f"Could not remove staged upload {upload.temp_path}: {exc}")

    def resolve(self, filename: str) -> Path:
        """Path of a stored image; rejects names that could escape the image root."""
        if not is_safe_filename(filename):
            raise ValidationError("Invalid filename")
        return self.root / filename

    @staticmethod
    def filename_from_path(public_path: str) -> str:
        return public_path.rstrip("/").rsplit("/", 1)[-1]

    def exists(self, public_path: Optional[str]) -> bool:
        if not public_path:
            return False
        filename = self.filename_from_path(public_path)
        if not is_safe_filename(filename):
            return False
        return (self.root / filename).is_file()

    def delete(self, public_path: Optional[str]) -> bool:
        """
        Remove a stored image by public path or bare filename.

        Returns False when there was nothing to delete.
        """
        if not public_path:
            return False
        filename = self.filename_from_path(public_path)
        if not is_safe_filename(filename):
            logger.warning(f"Refusing to delete image with unsafe name: {public_path}")
            return False
        try:
            (self.root / filename).unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Failed to delete image {filename}: {exc}") from exc
        logger.info(f"Deleted news image {filename}")
        return True

    def open_path(self, filename: str) -> Path:
        """Existing file for ``filename``, for serving."""
        path = self.resolve(filename)
        if not path.is_file():
            raise NotFoundError("Image not found")
        return path
