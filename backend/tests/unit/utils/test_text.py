from __future__ import annotations

import re

import pytest

from school_portal.utils.text import generate_excerpt, slugify

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Ujian Akhir Semester", "ujian-akhir-semester"),
        ("  Hello   World  ", "hello-world"),
        ("Juara 1 -- Lomba Sains!", "juara-1-lomba-sains"),
        ("Rapat Orang Tua & Guru (2024)", "rapat-orang-tua-guru-2024"),
        ("---Already-hyphenated---", "already-hyphenated"),
        ("Café Déjà Vu", "caf-dj-vu"),
    ],
)
def test_slugify_examples(title: str, expected: str) -> None:
    assert slugify(title) == expected


@pytest.mark.parametrize(
    "title",
    [
        "A",
        "Pengumuman: Libur Nasional!!",
        "tab\tseparated\nlines",
        "émoji 🎉 party 2024",
        "__under_scores__ and dots...",
    ],
)
def test_slugify_output_shape(title: str) -> None:
    assert SLUG_PATTERN.match(slugify(title))


def test_slugify_without_alphanumerics_falls_back() -> None:
    assert slugify("!!! ???") == "news"
    assert slugify("") == "news"


def test_slugify_is_deterministic() -> None:
    assert slugify("Kegiatan Pramuka") == slugify("Kegiatan Pramuka")


def test_excerpt_short_content_is_returned_without_tags() -> None:
    assert generate_excerpt("<p>Halo <strong>semua</strong></p>") == "Halo semua"


def test_excerpt_exactly_at_limit_is_unchanged() -> None:
    text = "a" * 150
    assert generate_excerpt(text) == text


def test_excerpt_truncates_on_last_space() -> None:
    words = "kata " * 40  # 200 characters
    excerpt = generate_excerpt(f"<div>{words}</div>")

    assert excerpt.endswith("...")
    body = excerpt[:-3]
    assert len(body) <= 150
    assert not body.endswith(" ")
    assert words.strip().startswith(body)


def test_excerpt_hard_cut_without_spaces() -> None:
    excerpt = generate_excerpt("x" * 200)
    assert excerpt == "x" * 150 + "..."


def test_excerpt_custom_length() -> None:
    assert generate_excerpt("satu dua tiga empat", max_length=9) == "satu dua..."
