"""Shared pytest fixtures."""

from io import BytesIO
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

# Printable ASCII, enough glyphs that a digits-only subset is clearly smaller
FONT_CODE_POINTS = list(range(0x20, 0x7F))


def _box_glyph(width: int):
    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((50, 700))
    pen.lineTo((width - 50, 700))
    pen.lineTo((width - 50, 0))
    pen.closePath()
    return pen.glyph()


def build_test_font(code_points=FONT_CODE_POINTS, family="Test Sans") -> bytes:
    """Build a TrueType font with one box glyph per code point."""
    glyph_names = [f"uni{cp:04X}" for cp in code_points]
    glyph_order = [".notdef", *glyph_names]

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(dict(zip(code_points, glyph_names)))
    fb.setupGlyf({name: _box_glyph(600) for name in glyph_order})
    fb.setupHorizontalMetrics({name: (600, 50) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": family, "styleName": "Regular"})
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    fb.setupPost()
    fb.setupMaxp()

    output = BytesIO()
    fb.save(output)
    return output.getvalue()


@pytest.fixture(scope="session")
def font_bytes() -> bytes:
    """TrueType font covering printable ASCII."""
    return build_test_font()


@pytest.fixture
def site_dir(tmp_path: Path, font_bytes: bytes) -> Path:
    """Source tree with one stylesheet and one font."""
    site = tmp_path / "site"
    (site / "fonts").mkdir(parents=True)
    (site / "fonts" / "test-sans-latin-400-normal.ttf").write_bytes(font_bytes)
    (site / "styles.css").write_text(
        "@font-face {\n"
        '  font-family: "Test Sans";\n'
        '  src: url(./fonts/test-sans-latin-400-normal.ttf) format("truetype");\n'
        "  unicode-range: U+0030-0039;\n"
        "}\n"
        'body { font-family: "Test Sans"; }\n',
        encoding="utf-8",
    )
    return site


class MemoryHost:
    """BuildHost backed by dicts, recording every call."""

    def __init__(self, files: dict[str, bytes] | None = None):
        self.files = dict(files or {})
        self.written: dict[str, bytes] = {}
        self.reads: list[str] = []

    async def resolve(self, url: str, importer: Path) -> str | None:
        name = url.split("?", 1)[0].split("#", 1)[0]
        return name if name in self.files else None

    async def read_file(self, location) -> bytes:
        self.reads.append(str(location))
        return self.files[str(location)]

    async def write_file(self, location, data: bytes) -> None:
        self.written[str(location)] = data

    def reference_for(self, location, importer: Path) -> str:
        return Path(location).as_posix()


@pytest.fixture
def memory_host():
    return MemoryHost
