"""
Font I/O utilities for in-memory subsetting.
"""

import re
from collections.abc import Iterable, Iterator
from io import BytesIO
from pathlib import Path

from fontTools.subset import Options, Subsetter
from fontTools.ttLib import TTFont, TTLibError

from fontrange.config.formats import FONTTOOLS_FLAVORS
from fontrange.config.paths import NODE_MODULES
from fontrange.exceptions import SubsettingError


def subset_font_bytes(
    font_bytes: bytes,
    code_points: Iterable[int],
    target_format: str,
) -> bytes:
    """
    Subset a font to the given code points.

    Args:
        font_bytes: Source font (TTF, OTF, WOFF or WOFF2)
        code_points: Code points to keep
        target_format: woff, woff2, truetype, opentype or sfnt

    Returns:
        Subset font bytes in the target format

    Raises:
        SubsettingError: If the format is not writable or fontTools fails
    """
    if target_format not in FONTTOOLS_FLAVORS:
        raise SubsettingError(f"Unsupported target format: {target_format}")

    options = Options()
    options.layout_features = ["*"]
    options.name_IDs = ["*"]
    options.notdef_outline = True
    options.recommended_glyphs = True

    try:
        font = TTFont(BytesIO(font_bytes))
    except (TTLibError, ValueError, OSError) as e:
        raise SubsettingError(f"Could not read font: {e}") from e

    try:
        subsetter = Subsetter(options=options)
        subsetter.populate(unicodes=set(code_points))
        subsetter.subset(font)

        font.flavor = FONTTOOLS_FLAVORS[target_format]
        output = BytesIO()
        font.save(output)
    except Exception as e:
        raise SubsettingError(f"Subsetting failed: {e}") from e
    finally:
        font.close()

    return output.getvalue()


def iter_files(
    directory: Path,
    pattern: re.Pattern,
    exclude_dirs: tuple[str, ...] = (NODE_MODULES,),
) -> Iterator[Path]:
    """
    Iterate over files whose path matches a pattern, sorted by path.

    Args:
        directory: Directory to search recursively
        pattern: Regex searched in each file's POSIX path
        exclude_dirs: Directory names to skip

    Yields:
        Paths to matching files
    """
    files = sorted(
        path
        for path in directory.rglob("*")
        if path.is_file()
        and not any(part in exclude_dirs for part in path.relative_to(directory).parts)
        and pattern.search(path.as_posix())
    )
    return iter(files)


def format_size(size: int) -> str:
    """Format a byte count in kilobytes, e.g. "12.3KB"."""
    return f"{size / 1024:.1f}KB"
