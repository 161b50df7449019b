"""
CSS unicode-range parsing.

Reference: https://www.w3.org/TR/css-fonts-4/#unicode-range-desc

Accepted token forms:
  U+26        single code point
  U+0025-00FF explicit range (inclusive)
  U+4??       wildcard range (U+400-4FF)
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from fontrange.config.formats import MAX_CODE_POINT

WILDCARD_RE = re.compile(r"^u\+([0-9a-f?]{1,6})$", re.IGNORECASE)
INTERVAL_RE = re.compile(r"^u\+([0-9a-f]{1,6})-([0-9a-f]{1,6})$", re.IGNORECASE)
SINGLE_RE = re.compile(r"^u\+([0-9a-f]{1,6})$", re.IGNORECASE)


@dataclass(frozen=True, order=True)
class CodePointRange:
    """Inclusive interval of code points."""

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.start > self.end:
            raise ValueError(f"Invalid code point range: {self.start:X}-{self.end:X}")

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        if self.start == self.end:
            return f"{self.start:04X}"
        return f"{self.start:04X}-{self.end:04X}"


def parse_token(token: str) -> CodePointRange | None:
    """
    Parse a single unicode-range token.

    Returns:
        The range, or None if the token is malformed or starts above U+10FFFF
    """
    token = token.strip()

    if "?" in token:
        match = WILDCARD_RE.match(token)
        if not match:
            return None
        digits = match.group(1)
        # Wildcards are only allowed as trailing digits
        if "?" in digits.rstrip("?"):
            return None
        start = int(digits.replace("?", "0"), 16)
        end = int(digits.replace("?", "F"), 16)
    elif match := INTERVAL_RE.match(token):
        start = int(match.group(1), 16)
        end = int(match.group(2), 16)
        if start > end:
            return None
    elif match := SINGLE_RE.match(token):
        start = end = int(match.group(1), 16)
    else:
        return None

    if start > MAX_CODE_POINT:
        return None
    return CodePointRange(start, min(end, MAX_CODE_POINT))


def parse_unicode_range(value: str) -> list[CodePointRange]:
    """
    Parse a unicode-range property value.

    Malformed tokens are dropped; the remaining tokens keep their order.

    Args:
        value: Property value, e.g. "U+0000-00FF, U+0131, U+02??"

    Returns:
        Parsed ranges
    """
    ranges = []
    for token in re.split(r"\s*,\s*", value.strip()):
        if not token:
            continue
        parsed = parse_token(token)
        if parsed is not None:
            ranges.append(parsed)
    return ranges


def expand_code_points(ranges: Iterable[CodePointRange]) -> set[int]:
    """Expand ranges into the set of code points they cover, end included."""
    code_points: set[int] = set()
    for r in ranges:
        code_points.update(range(r.start, r.end + 1))
    return code_points


def format_ranges(ranges: Iterable[CodePointRange]) -> str:
    """Format ranges as a pyftsubset-style --unicodes value."""
    return ",".join(str(r) for r in ranges)
