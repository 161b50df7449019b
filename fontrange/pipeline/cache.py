"""
Subset cache and subsetting invoker.

Each font identity is subset at most once per build. The first request for
an identity stores its in-flight task before anything is awaited, so
concurrent requests for the same identity all await that one task. The
code points are fixed by whichever request arrives first.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from fontrange.config.paths import SUBSET_PREFIX
from fontrange.core.font_io import subset_font_bytes
from fontrange.core.host import BuildHost
from fontrange.core.unicode_range import CodePointRange, expand_code_points
from fontrange.pipeline.report import ReportCollector
from fontrange.utils.logging import logger

SubsetFunction = Callable[[bytes, Iterable[int], str], bytes]
FontLoader = Callable[[], Awaitable[bytes]]


@dataclass
class SubsetEntry:
    """Result of subsetting one font identity."""

    identity: str
    original_size: int
    subset_size: int
    subset_bytes: bytes = field(repr=False)
    accepted: bool
    ranges: tuple[CodePointRange, ...] = ()
    output_location: str | None = None


class SubsetCache:
    """
    Per-build map from font identity to subset result.

    Args:
        cache_dir: Directory accepted subsets are written to
        host: Build host used to write subset files
        report: Collector fed with every accepted subset
        subset: Subsetting function (font bytes, code points, format) -> bytes
    """

    def __init__(
        self,
        cache_dir: Path,
        host: BuildHost,
        report: ReportCollector,
        subset: SubsetFunction = subset_font_bytes,
    ):
        self.cache_dir = Path(cache_dir)
        self.host = host
        self.report = report
        self.subset = subset
        self._tasks: dict[str, asyncio.Task[SubsetEntry | None]] = {}

    def output_location(self, identity: str) -> Path:
        """Deterministic subset file location for an identity."""
        return self.cache_dir / f"{SUBSET_PREFIX}{identity}"

    async def get_or_create(
        self,
        identity: str,
        ranges: tuple[CodePointRange, ...],
        target_format: str,
        load_font: FontLoader,
    ) -> SubsetEntry | None:
        """
        Return the subset entry for an identity, computing it on first request.

        Args:
            identity: Font identity key
            ranges: Code point ranges, used only by the first request
            target_format: Subsetter target format
            load_font: Coroutine function returning the font bytes

        Returns:
            The entry, or None if loading or subsetting failed
        """
        task = self._tasks.get(identity)
        if task is None:
            task = asyncio.ensure_future(
                self._create(identity, tuple(ranges), target_format, load_font)
            )
            self._tasks[identity] = task
        else:
            logger.debug(f"Reusing subset of {identity}")

        entry = await task
        if entry is not None and tuple(ranges) != entry.ranges:
            logger.debug(
                f"{identity} already subset for other ranges; later unicode-range ignored"
            )
        return entry

    async def _create(
        self,
        identity: str,
        ranges: tuple[CodePointRange, ...],
        target_format: str,
        load_font: FontLoader,
    ) -> SubsetEntry | None:
        try:
            font_bytes = await load_font()
        except Exception as e:
            logger.error(f"Could not load {identity}: {e}")
            return None

        code_points = expand_code_points(ranges)
        logger.debug(f"Subsetting {identity} to {len(code_points)} code points ({target_format})")

        try:
            subset_bytes = await asyncio.to_thread(
                self.subset, font_bytes, code_points, target_format
            )
        except Exception as e:
            logger.error(f"Failed to subset {identity}: {e}")
            return None

        entry = SubsetEntry(
            identity=identity,
            original_size=len(font_bytes),
            subset_size=len(subset_bytes),
            subset_bytes=subset_bytes,
            accepted=len(subset_bytes) < len(font_bytes),
            ranges=ranges,
        )

        if not entry.accepted:
            logger.info(
                f"Keeping {identity}: subset is not smaller "
                f"({entry.subset_size} >= {entry.original_size} bytes)"
            )
            return entry

        location = self.output_location(identity)
        try:
            await self.host.write_file(location, subset_bytes)
        except OSError as e:
            logger.error(f"Could not write {location}: {e}")
            return None

        entry.output_location = str(location)
        self.report.add(identity, entry.original_size, entry.subset_size)
        logger.debug(f"Wrote {location}")
        return entry

