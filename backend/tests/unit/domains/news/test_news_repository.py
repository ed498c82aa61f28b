from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.domains.news.repositories.news_repository import (
    DEFAULT_CATEGORIES,
    NewsFilters,
    NewsRepository,
)
from school_portal.models.news import NewsStatus
from tests.utils.news_builders import create_category, create_news, utc_naive


@pytest.mark.asyncio
async def test_fetch_by_id_and_slug(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    article = await create_news(async_session, title="Lomba Cerdas Cermat")

    by_id = await repo.fetch_by_id(article.id)
    by_slug = await repo.fetch_by_slug("lomba-cerdas-cermat")

    assert by_id is not None and by_id.id == article.id
    assert by_slug is not None and by_slug.id == article.id
    assert await repo.fetch_by_slug("missing") is None


@pytest.mark.asyncio
async def test_ensure_unique_slug_appends_counter(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    first = await create_news(async_session, title="Rapat Guru", slug="rapat-guru")
    await create_news(async_session, title="Rapat Guru 2", slug="rapat-guru-1")

    assert await repo.ensure_unique_slug("rapat-guru") == "rapat-guru-2"
    assert await repo.ensure_unique_slug("rapat-guru", exclude_id=first.id) == "rapat-guru"
    assert await repo.ensure_unique_slug("rapat-baru") == "rapat-baru"


@pytest.mark.asyncio
@pytest.mark.parametrize("route_name", ["admin", "categories", "featured", "images", "stats", "upload"])
async def test_ensure_unique_slug_skips_route_names(async_session: AsyncSession, route_name: str) -> None:
    repo = NewsRepository(async_session)

    assert await repo.ensure_unique_slug(route_name) == f"{route_name}-1"


@pytest.mark.asyncio
async def test_fetch_by_id_outside_integer_range(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    await create_news(async_session, title="Pentas Seni")

    assert await repo.fetch_by_id(2**31) is None
    assert await repo.fetch_by_id(10**20) is None
    assert await repo.fetch_by_id(0) is None


@pytest.mark.asyncio
async def test_fetch_by_featured_image_matches_whole_filename(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    article = await create_news(
        async_session,
        title="Foto Upacara",
        featured_image="/api/v1/news/images/news-1_a.jpg",
    )
    await create_news(
        async_session,
        title="Foto Lain",
        featured_image="/api/v1/news/images/news-1xa.jpg",
    )
    await create_news(async_session, title="Tanpa Foto")

    matches = await repo.fetch_by_featured_image("news-1_a.jpg")

    assert [match.id for match in matches] == [article.id]
    assert await repo.fetch_by_featured_image("a.jpg") == []


@pytest.mark.asyncio
async def test_category_details_by_slug(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    await create_category(async_session, name="Prestasi", slug="prestasi", color="#ffc107")
    await create_category(async_session, name="Umum", slug="umum", color="#6c757d")

    details = await repo.category_details(["prestasi", "prestasi", "tidak-dikenal", ""])

    assert set(details) == {"prestasi"}
    assert details["prestasi"].name == "Prestasi"
    assert details["prestasi"].color == "#ffc107"
    assert await repo.category_details([]) == {}


@pytest.mark.asyncio
async def test_list_news_combines_filters(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    for index in range(12):
        await create_news(
            async_session,
            title=f"Pengumuman nomor {index}",
            category="pengumuman",
            status=NewsStatus.PUBLISHED,
            published_at=utc_naive(day=index + 1),
        )
    await create_news(async_session, title="Draft pengumuman", category="pengumuman", status=NewsStatus.DRAFT)
    await create_news(async_session, title="Prestasi siswa", category="prestasi")

    filters = NewsFilters(
        status=NewsStatus.PUBLISHED,
        category="pengumuman",
        page=2,
        limit=10,
    )
    items, total = await repo.list_news(filters)

    assert total == 12
    assert len(items) == 2
    assert all(item.status == NewsStatus.PUBLISHED for item in items)
    assert all(item.category == "pengumuman" for item in items)


@pytest.mark.asyncio
async def test_list_news_search_matches_title_content_or_excerpt(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    await create_news(async_session, title="Pentas Seni Tahunan", content="<p>Acara meriah di aula sekolah.</p>")
    await create_news(async_session, title="Kegiatan Pramuka", content="<p>Perkemahan dan pentas api unggun.</p>")
    await create_news(async_session, title="Jadwal Ujian", content="<p>Ujian dimulai hari Senin.</p>")

    items, total = await repo.list_news(NewsFilters(search="PENTAS"))

    assert total == 2
    assert {item.title for item in items} == {"Pentas Seni Tahunan", "Kegiatan Pramuka"}


@pytest.mark.asyncio
async def test_list_news_author_featured_and_date_range(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    await create_news(async_session, title="Berita Januari", author_name="Bu Sari", published_at=utc_naive(month=1, day=10))
    await create_news(
        async_session,
        title="Berita Februari",
        author_name="Pak Budi",
        is_featured=True,
        published_at=utc_naive(month=2, day=10),
    )
    await create_news(async_session, title="Berita Maret", author_name="Bu Sari", published_at=utc_naive(month=3, day=10))

    by_author, _ = await repo.list_news(NewsFilters(author="sari"))
    featured, _ = await repo.list_news(NewsFilters(featured=True))
    in_range, total = await repo.list_news(
        NewsFilters(start_date=utc_naive(month=1, day=15), end_date=utc_naive(month=3, day=1))
    )

    assert {item.title for item in by_author} == {"Berita Januari", "Berita Maret"}
    assert [item.title for item in featured] == ["Berita Februari"]
    assert total == 1
    assert in_range[0].title == "Berita Februari"


@pytest.mark.asyncio
async def test_list_news_sorting_and_fallback(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    await create_news(async_session, title="Banyak dibaca", view_count=50, created_at=utc_naive(day=1))
    await create_news(async_session, title="Sedikit dibaca", view_count=5, created_at=utc_naive(day=3))
    await create_news(async_session, title="Agak dibaca", view_count=20, created_at=utc_naive(day=2))

    by_views, _ = await repo.list_news(NewsFilters(sort_by="viewCount", sort_order="asc"))
    by_title, _ = await repo.list_news(NewsFilters(sort_by="title", sort_order="ASC"))
    fallback, _ = await repo.list_news(NewsFilters(sort_by="password_hash; DROP TABLE news", sort_order="ASC"))

    assert [item.view_count for item in by_views] == [5, 20, 50]
    assert [item.title for item in by_title] == ["Agak dibaca", "Banyak dibaca", "Sedikit dibaca"]
    # Unknown key: created_at descending regardless of requested order
    assert [item.title for item in fallback] == ["Sedikit dibaca", "Agak dibaca", "Banyak dibaca"]


@pytest.mark.asyncio
async def test_increment_views_adds_one(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    article = await create_news(async_session, view_count=3)

    await repo.increment_views(article.id)
    await async_session.commit()
    await async_session.refresh(article)

    assert article.view_count == 4


@pytest.mark.asyncio
async def test_fetch_featured_only_published(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    await create_news(async_session, title="Unggulan terbit", is_featured=True)
    await create_news(async_session, title="Unggulan draft", is_featured=True, status=NewsStatus.DRAFT)
    await create_news(async_session, title="Biasa terbit")

    featured = await repo.fetch_featured(limit=5)

    assert [item.title for item in featured] == ["Unggulan terbit"]


@pytest.mark.asyncio
async def test_aggregate_statistics(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    await create_news(async_session, title="Satu", view_count=10, published_at=utc_naive(day=1))
    await create_news(async_session, title="Dua", view_count=30, is_featured=True, published_at=utc_naive(day=5))
    await create_news(async_session, title="Tiga", status=NewsStatus.DRAFT, view_count=99)
    await create_news(async_session, title="Empat", status=NewsStatus.ARCHIVED, view_count=1)

    stats = await repo.aggregate_statistics()

    assert stats.total == 4
    assert (stats.published, stats.draft, stats.archived) == (2, 1, 1)
    assert stats.featured == 1
    assert stats.total_views == 140
    assert [item.title for item in stats.most_viewed] == ["Dua", "Satu"]
    assert [item.title for item in stats.recent] == ["Dua", "Satu"]


@pytest.mark.asyncio
async def test_list_categories_counts_published_articles(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)
    await create_category(async_session, name="Prestasi", slug="prestasi")
    await create_category(async_session, name="Umum", slug="umum")
    await create_news(async_session, title="Juara Lomba", category="prestasi")
    await create_news(async_session, title="Juara Draft", category="prestasi", status=NewsStatus.DRAFT)

    categories = {item["slug"]: item for item in await repo.list_categories()}

    assert categories["prestasi"]["news_count"] == 1
    assert categories["umum"]["news_count"] == 0


@pytest.mark.asyncio
async def test_seed_default_categories_is_idempotent(async_session: AsyncSession) -> None:
    repo = NewsRepository(async_session)

    assert await repo.seed_default_categories() == len(DEFAULT_CATEGORIES)
    assert await repo.seed_default_categories() == 0

    slugs = {item["slug"] for item in await repo.list_categories()}
    assert slugs == {"pengumuman", "kegiatan-sekolah", "prestasi", "akademik", "umum"}
