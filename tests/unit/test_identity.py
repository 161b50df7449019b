"""Tests for font identity resolution."""

import asyncio
from pathlib import Path

import pytest

from fontrange.config.formats import DEFAULT_FONT_EXTENSIONS
from fontrange.core.identity import (
    font_identity,
    is_font_url,
    resolve_font,
    target_format_for,
)


def test_identity_is_final_path_segment():
    assert font_identity("./files/nanum-gothic-latin-400-normal.woff2") == (
        "nanum-gothic-latin-400-normal.woff2"
    )


def test_identity_ignores_query_and_fragment():
    base = font_identity("fonts/inter.woff2")
    assert font_identity("fonts/inter.woff2?v=3") == base
    assert font_identity("fonts/inter.woff2#iefix") == base
    assert font_identity("https://cdn.example.com/fonts/inter.woff2?v=3#x") == base


def test_hashed_copies_collapse_to_one_identity():
    """Test dot- and dash-separated content hashes are removed."""
    plain = font_identity("nanum-gothic-latin-400-normal.woff2")
    assert font_identity("/assets/nanum-gothic-latin-400-normal.8f3c2d1a.woff2") == plain
    assert font_identity("/assets/nanum-gothic-latin-400-normal-8f3c2d1a.woff2") == plain


@pytest.mark.parametrize(
    "name",
    [
        "inter-latin-400-normal-BxFg3k_a.woff2",
        "inter-latin-400-normal-D9sPq2Lm.woff2",
        "inter-latin-400-normal-3f2a91bc4e5d6f70.woff2",
    ],
)
def test_bundler_hash_shapes_are_removed(name):
    assert font_identity(name) == "inter-latin-400-normal.woff2"


@pytest.mark.parametrize(
    "name",
    [
        "roboto-v30-latin-700italic.woff2",
        "Inter-SemiBold.woff2",
        "inter-cyrillic-ext-400-normal.woff2",
        "noto-sans-semibold.woff2",
    ],
)
def test_style_qualifiers_are_not_hashes(name):
    assert font_identity(name) == name


def test_weight_and_style_qualifiers_are_kept():
    """Test distinct weights stay distinct identities."""
    regular = font_identity("inter-latin-400-normal.woff2")
    bold = font_identity("inter-latin-700-normal.woff2")
    italic = font_identity("inter-latin-400-italic.woff2")
    assert len({regular, bold, italic}) == 3


def test_extension_is_lowercased_and_kept():
    assert font_identity("Fonts/Inter.WOFF2") == "Inter.woff2"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("a.woff", "woff"),
        ("a.woff2", "woff2"),
        ("a.ttf", "truetype"),
        ("a.otf", "opentype"),
        ("a.eot", "eot"),
        ("a.TTF", "truetype"),
        ("a.svg", "woff2"),
        ("/abs/path/a.woff?x=1", "woff"),
    ],
)
def test_target_format_for(name, expected):
    assert target_format_for(name) == expected


@pytest.mark.parametrize(
    "url,matches",
    [
        ("a.woff2", True),
        ("a.WOFF", True),
        ("a.ttf?v=1", True),
        ("a.otf#x", True),
        ("a.eot?#iefix", True),
        ('local("A")', False),
        ("a.svg", False),
        ("", False),
    ],
)
def test_is_font_url(url, matches):
    assert is_font_url(url, DEFAULT_FONT_EXTENSIONS) is matches


def test_resolve_font(memory_host):
    host = memory_host({"fonts/a.ttf": b"font"})

    font = asyncio.run(
        resolve_font("fonts/a.ttf?v=2", Path("styles.css"), host, DEFAULT_FONT_EXTENSIONS)
    )

    assert font.url == "fonts/a.ttf?v=2"
    assert font.location == "fonts/a.ttf"
    assert font.identity == "a.ttf"
    assert font.target_format == "truetype"


def test_resolve_font_skips_non_fonts(memory_host):
    host = memory_host({"a.svg": b""})
    result = asyncio.run(resolve_font("a.svg", Path("s.css"), host, DEFAULT_FONT_EXTENSIONS))
    assert result is None


def test_resolve_font_unresolvable(memory_host):
    host = memory_host()
    result = asyncio.run(
        resolve_font("missing.woff2", Path("s.css"), host, DEFAULT_FONT_EXTENSIONS)
    )
    assert result is None
