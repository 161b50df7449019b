"""Tests for in-memory font subsetting."""

import re
from io import BytesIO

import pytest
from fontTools.ttLib import TTFont

from fontrange.core.font_io import format_size, iter_files, subset_font_bytes
from fontrange.exceptions import SubsettingError

DIGITS = range(0x30, 0x3A)


def load(data: bytes) -> TTFont:
    return TTFont(BytesIO(data))


def test_subset_keeps_only_requested_code_points(font_bytes):
    result = subset_font_bytes(font_bytes, DIGITS, "truetype")

    assert len(result) < len(font_bytes)
    cmap = load(result).getBestCmap()
    assert set(DIGITS) <= set(cmap)
    assert 0x41 not in cmap


def test_subset_woff2_flavor(font_bytes):
    result = subset_font_bytes(font_bytes, DIGITS, "woff2")

    assert result[:4] == b"wOF2"
    assert load(result).flavor == "woff2"


def test_subset_woff_flavor(font_bytes):
    result = subset_font_bytes(font_bytes, DIGITS, "woff")
    assert result[:4] == b"wOFF"


def test_subset_ignores_code_points_not_in_font(font_bytes):
    result = subset_font_bytes(font_bytes, [0x41, 0x4E00], "truetype")
    cmap = load(result).getBestCmap()
    assert 0x41 in cmap
    assert 0x4E00 not in cmap
    assert 0x42 not in cmap


def test_eot_is_not_writable(font_bytes):
    with pytest.raises(SubsettingError, match="eot"):
        subset_font_bytes(font_bytes, DIGITS, "eot")


def test_garbage_input():
    with pytest.raises(SubsettingError):
        subset_font_bytes(b"not a font", DIGITS, "woff2")


def test_iter_files(tmp_path):
    (tmp_path / "css").mkdir()
    (tmp_path / "css" / "b.css").write_text("")
    (tmp_path / "a.css").write_text("")
    (tmp_path / "a.js").write_text("")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "c.css").write_text("")

    files = list(iter_files(tmp_path, re.compile(r"\.css$")))

    assert files == [tmp_path / "a.css", tmp_path / "css" / "b.css"]


def test_format_size():
    assert format_size(10240) == "10.0KB"
    assert format_size(1536) == "1.5KB"
