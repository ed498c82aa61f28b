from __future__ import annotations

import io

import pytest

from school_portal.core.exceptions import ValidationError
from school_portal.domains.news import NewsFacade
from school_portal.models import User


class BytesStream:
    def __init__(self, payload: bytes) -> None:
        self._buffer = io.BytesIO(payload)

    async def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


@pytest.mark.asyncio
async def test_staged_image_is_consumed_by_create(news_facade: NewsFacade, admin_user: User) -> None:
    staged = await news_facade.stage_image("sampul.png", "image/png", BytesStream(b"\x89PNG" + b"0" * 20))
    assert staged.temp_path.is_file()

    article = await news_facade.create(
        {
            "title": "Peringatan Hari Kartini",
            "content": "<p>Siswa mengenakan pakaian adat dari berbagai daerah.</p>",
            "category": "kegiatan-sekolah",
        },
        actor=admin_user,
        image=staged,
    )

    assert article.featured_image.endswith(".png")
    assert not staged.temp_path.exists()
    assert list(news_facade.storage.staging.iterdir()) == []


@pytest.mark.asyncio
async def test_staged_image_is_discarded_when_create_fails(news_facade: NewsFacade) -> None:
    staged = await news_facade.stage_image("sampul.png", "image/png", BytesStream(b"\x89PNG" + b"0" * 20))

    with pytest.raises(ValidationError):
        await news_facade.create({"title": "Judul"}, image=staged)

    assert not staged.temp_path.exists()
    assert list(news_facade.storage.root.iterdir()) == []
