"""
Font subsetting pipeline.

One FontSubsetPipeline holds all state of a single build: the subset cache,
the report, and the stylesheets already analyzed. Create a new instance for
every build so nothing carries over between builds.

Flow per stylesheet:
  1. parse          - tinycss2 -> top-level at-rules
  2. extract        - @font-face rules with family, src and unicode-range
  3. resolve        - src URLs -> font identity and target format
  4. subset         - once per identity (SubsetCache)
  5. rewrite        - accepted subsets handed to the ReferenceRewriter
"""

import asyncio
from collections.abc import Iterable
from pathlib import Path

from fontrange.config.options import PluginOptions
from fontrange.core.font_io import subset_font_bytes
from fontrange.core.host import BuildHost
from fontrange.core.identity import resolve_font
from fontrange.core.stylesheet import (
    FontFaceDeclaration,
    decode_stylesheet,
    extract_font_faces,
    parse_stylesheet,
)
from fontrange.exceptions import StylesheetParseError
from fontrange.pipeline.cache import SubsetCache, SubsetFunction
from fontrange.pipeline.report import ReportCollector
from fontrange.pipeline.rewriter import ReferenceRewriter
from fontrange.utils.logging import logger


class FontSubsetPipeline:
    """
    Analyzes stylesheets and subsets the fonts they reference.

    Args:
        options: Stylesheet selection, font matching and cache directory
        host: Build host collaborator
        rewriter: Strategy applying accepted subsets to build output
        subset: Subsetting function, fontTools by default
    """

    def __init__(
        self,
        options: PluginOptions,
        host: BuildHost,
        rewriter: ReferenceRewriter,
        subset: SubsetFunction = subset_font_bytes,
    ):
        self.options = options
        self.host = host
        self.rewriter = rewriter
        self.report = ReportCollector()
        self.cache = SubsetCache(options.cache_dir, host, self.report, subset)
        self._stylesheets: dict[Path, asyncio.Task[str | None]] = {}

    async def process_stylesheet(self, path: Path, code: str | None = None) -> str | None:
        """
        Analyze one stylesheet and return its final text.

        Repeated calls for the same path share the first call's result.

        Args:
            path: Stylesheet path
            code: Stylesheet text; read through the host when omitted

        Returns:
            Rewritten text, the original text if nothing changed or analysis
            failed, or None if the path is not selected by the options
        """
        path = Path(path)
        if not self.options.matches(path):
            return code

        task = self._stylesheets.get(path)
        if task is None:
            task = asyncio.ensure_future(self._process(path, code))
            self._stylesheets[path] = task
        return await task

    async def _process(self, path: Path, code: str | None) -> str | None:
        try:
            if code is None:
                code = decode_stylesheet(await self.host.read_file(path))
            faces = extract_font_faces(parse_stylesheet(code))
        except (StylesheetParseError, OSError) as e:
            logger.error(f"Error analyzing {path}: {e}")
            return code

        if not faces:
            return code

        logger.debug(f"{path.name}: {len(faces)} @font-face rule(s) with unicode-range")
        await asyncio.gather(*(self._process_face(face, path) for face in faces))
        return self.rewriter.transform(code, path)

    async def _process_face(self, face: FontFaceDeclaration, importer: Path) -> None:
        await asyncio.gather(
            *(self._process_source(url, face, importer) for url in face.urls)
        )

    async def _process_source(
        self, url: str, face: FontFaceDeclaration, importer: Path
    ) -> None:
        try:
            font = await resolve_font(url, importer, self.host, self.options.font_extensions)
        except OSError as e:
            logger.error(f"Could not resolve {url}: {e}")
            return
        if font is None:
            return

        entry = await self.cache.get_or_create(
            font.identity,
            face.ranges,
            font.target_format,
            lambda: self.host.read_file(font.location),
        )
        if entry is None or not entry.accepted:
            return
        self.rewriter.apply(url, entry, importer)

    async def run(self, paths: Iterable[Path]) -> dict[Path, str]:
        """
        Analyze stylesheets concurrently.

        Returns:
            Final text of every selected stylesheet that could be read
        """
        paths = [Path(p) for p in paths if self.options.matches(p)]
        results = await asyncio.gather(*(self.process_stylesheet(p) for p in paths))
        return {path: code for path, code in zip(paths, results) if code is not None}
