"""
Font identity resolution.

Maps a src URL to the key that identifies the underlying font binary and to
the format its subset is written in.
"""

import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from fontrange.config.formats import DEFAULT_TARGET_FORMAT, TARGET_FORMATS
from fontrange.utils.logging import logger

if TYPE_CHECKING:
    from fontrange.core.host import BuildHost

# Trailing content hash added by bundlers: lowercase hex of 8+ characters
# ("-3f2a91bc") or 8-character base64url ("-BxFg3k_a"). A base64url hash must
# hold an uppercase letter and a digit or "_", so qualifiers such as
# "-700italic" or "-SemiBold" are kept; hashes outside those shapes (or
# containing "-") are not recognized.
HASH_SUFFIX_RE = re.compile(
    r"-(?:(?=[0-9a-f]*\d)[0-9a-f]{8,}"
    r"|(?=[A-Za-z0-9_]*[A-Z])(?=[A-Za-z0-9_]*[0-9_])[A-Za-z0-9_]{8})$"
)


@dataclass(frozen=True)
class ResolvedFont:
    """A src URL resolved to a concrete font resource."""

    url: str
    location: str  # file path, or URL for remote fonts
    identity: str
    target_format: str


def strip_query(url: str) -> str:
    """Remove query string and fragment from a URL."""
    return url.split("?", 1)[0].split("#", 1)[0]


def font_identity(url: str) -> str:
    """
    Derive the identity key of a font URL.

    Only the final path segment counts. Query strings, fragments, dot-separated
    hash segments ("name.3f2a91bc.woff2") and trailing "-<hash>" suffixes are
    removed; the extension is kept and lowercased.

    Examples:
        fonts/nanum-gothic-latin-400-normal.woff2 -> nanum-gothic-latin-400-normal.woff2
        /assets/nanum-gothic-latin-400-normal.8f3c2d1a.woff2 -> nanum-gothic-latin-400-normal.woff2
        /assets/nanum-gothic-latin-400-normal-8f3c2d1a.woff2?v=2 -> nanum-gothic-latin-400-normal.woff2
    """
    name = PurePosixPath(urlsplit(strip_query(url)).path).name
    if "." not in name:
        return name

    stem, extension = name.rsplit(".", 1)
    stem = stem.split(".", 1)[0] or stem
    stem = HASH_SUFFIX_RE.sub("", stem)
    return f"{stem}.{extension.lower()}"


def target_format_for(location: str) -> str:
    """Map a file name to the subsetter's target format."""
    suffix = PurePosixPath(strip_query(location)).suffix.lower()
    return TARGET_FORMATS.get(suffix, DEFAULT_TARGET_FORMAT)


def is_font_url(url: str, font_extensions: re.Pattern) -> bool:
    """Check a URL's path (query and fragment removed) against the extension pattern."""
    return bool(url) and bool(font_extensions.search(strip_query(url)))


async def resolve_font(
    url: str,
    importer: Path,
    host: "BuildHost",
    font_extensions: re.Pattern,
) -> ResolvedFont | None:
    """
    Resolve a src URL to a font resource.

    Args:
        url: URL as written in the stylesheet
        importer: Stylesheet the URL appears in
        host: Build host used for resolution
        font_extensions: Pattern selecting subsettable fonts

    Returns:
        The resolved font, or None if the URL is not a font or cannot be resolved
    """
    if not is_font_url(url, font_extensions):
        return None

    location = await host.resolve(url, importer)
    if location is None:
        logger.warning(f"Could not resolve {url} (from {importer.name})")
        return None

    return ResolvedFont(
        url=url,
        location=str(location),
        identity=font_identity(url),
        target_format=target_format_for(str(location)),
    )
