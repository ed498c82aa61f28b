from __future__ import annotations

import io
import re
from pathlib import Path

import pytest

from school_portal.core.exceptions import NotFoundError, ValidationError
from school_portal.domains.news import NewsImageStorage


class BytesStream:
    def __init__(self, payload: bytes) -> None:
        self._buffer = io.BytesIO(payload)

    async def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.mark.asyncio
async def test_stage_writes_temp_file(image_storage: NewsImageStorage) -> None:
    upload = await image_storage.stage("photo.png", "image/png", BytesStream(PNG_BYTES))

    assert upload.size == len(PNG_BYTES)
    assert upload.content_type == "image/png"
    assert upload.temp_path.parent == image_storage.staging
    assert upload.temp_path.read_bytes() == PNG_BYTES


@pytest.mark.asyncio
async def test_commit_moves_file_and_returns_public_path(image_storage: NewsImageStorage) -> None:
    upload = await image_storage.stage("Photo.PNG", "image/png", BytesStream(PNG_BYTES))

    public_path = image_storage.commit(upload)

    assert re.fullmatch(r"/api/v1/news/images/news-\d+-\d+\.png", public_path)
    assert not upload.temp_path.exists()
    assert image_storage.exists(public_path)
    filename = image_storage.filename_from_path(public_path)
    assert (image_storage.root / filename).read_bytes() == PNG_BYTES


@pytest.mark.asyncio
async def test_validate_rejects_unsupported_type(image_storage: NewsImageStorage) -> None:
    upload = await image_storage.stage("notes.pdf", "application/pdf", BytesStream(b"%PDF-1.4"))

    with pytest.raises(ValidationError) as exc_info:
        image_storage.validate(upload)

    assert exc_info.value.errors[0]["field"] == "image"


@pytest.mark.asyncio
async def test_validate_rejects_oversized_upload(image_storage: NewsImageStorage) -> None:
    upload = await image_storage.stage("big.jpg", "image/jpeg", BytesStream(b"x" * 4096))

    assert upload.size > image_storage.max_bytes
    with pytest.raises(ValidationError):
        image_storage.validate(upload)


@pytest.mark.asyncio
async def test_discard_is_idempotent(image_storage: NewsImageStorage) -> None:
    upload = await image_storage.stage("photo.gif", "image/gif", BytesStream(b"GIF89a"))

    image_storage.discard(upload)
    image_storage.discard(upload)
    image_storage.discard(None)

    assert not upload.temp_path.exists()


@pytest.mark.asyncio
async def test_delete_is_idempotent(image_storage: NewsImageStorage) -> None:
    upload = await image_storage.stage("photo.webp", "image/webp", BytesStream(b"RIFF0000WEBP"))
    public_path = image_storage.commit(upload)

    assert image_storage.delete(public_path) is True
    assert image_storage.delete(public_path) is False
    assert image_storage.exists(public_path) is False


@pytest.mark.parametrize(
    "filename",
    ["../secret.png", "..", "nested/photo.png", "nested\\photo.png", "", "photo\x00.png"],
)
def test_resolve_rejects_unsafe_names(image_storage: NewsImageStorage, filename: str) -> None:
    with pytest.raises(ValidationError):
        image_storage.resolve(filename)


def test_delete_refuses_unsafe_names(image_storage: NewsImageStorage, tmp_path: Path) -> None:
    outside = tmp_path / "uploads" / "keep.png"
    outside.write_bytes(b"keep")

    assert image_storage.delete("..\\keep.png") is False
    assert outside.exists()


def test_open_path_missing_file(image_storage: NewsImageStorage) -> None:
    with pytest.raises(NotFoundError):
        image_storage.open_path("news-1-1.png")
