"""
Build host collaborators.

The pipeline only talks to the host through BuildHost: URL resolution, file
reads and writes, and turning a written file back into a stylesheet reference.
FileSystemHost implements it for a source tree on disk.
"""

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import requests

from fontrange.config.paths import NODE_MODULES
from fontrange.core.identity import strip_query
from fontrange.exceptions import FontLoadError
from fontrange.utils.logging import logger

REMOTE_PREFIXES = ("http://", "https://")
DOWNLOAD_TIMEOUT = 60


@dataclass
class Alias:
    """Module-resolution alias entry."""

    find: str
    replacement: str

    def to_dict(self) -> dict[str, str]:
        return {"find": self.find, "replacement": self.replacement}


@dataclass
class Asset:
    """An emitted build output file."""

    file_name: str
    source: bytes | str
    type: str = "asset"


class BuildHost(Protocol):
    """Host build system operations consumed by the pipeline."""

    async def resolve(self, url: str, importer: Path) -> str | None: ...

    async def read_file(self, location: str | Path) -> bytes: ...

    async def write_file(self, location: str | Path, data: bytes) -> None: ...

    def reference_for(self, location: str | Path, importer: Path) -> str: ...


def is_remote(url: str) -> bool:
    return url.startswith(REMOTE_PREFIXES)


class FileSystemHost:
    """
    BuildHost over a source directory.

    Args:
        root: Source root; root-absolute URLs resolve against it
        out_dir: Where stylesheets are written, if not in place
        aliases: Alias table consulted before path resolution
    """

    def __init__(
        self,
        root: Path,
        out_dir: Path | None = None,
        aliases: list[Alias] | None = None,
    ):
        self.root = Path(root).resolve()
        self.out_dir = Path(out_dir).resolve() if out_dir is not None else None
        self.aliases = aliases if aliases is not None else []

    def _candidates(self, path: str, importer: Path) -> list[Path]:
        if path.startswith("/"):
            return [self.root / path.lstrip("/")]
        if path.startswith("~"):
            return [self.root / NODE_MODULES / path[1:]]
        candidates = [importer.parent / path]
        if not path.startswith("."):
            candidates.append(self.root / NODE_MODULES / path)
        return candidates

    async def resolve(self, url: str, importer: Path) -> str | None:
        """
        Resolve a URL to a font location.

        Returns:
            Absolute file path, the URL itself for remote fonts, or None
        """
        for alias in self.aliases:
            if alias.find == url:
                replacement = Path(alias.replacement)
                if replacement.is_absolute() and replacement.is_file():
                    return str(replacement)
                url = alias.replacement
                break

        if is_remote(url):
            return url

        path = strip_query(url)
        for candidate in self._candidates(path, Path(importer).resolve()):
            if candidate.is_file():
                return str(candidate.resolve())
        return None

    async def read_file(self, location: str | Path) -> bytes:
        location = str(location)
        if is_remote(location):
            return await asyncio.to_thread(self._download, location)
        return await asyncio.to_thread(Path(location).read_bytes)

    @staticmethod
    def _download(url: str) -> bytes:
        logger.info(f"Downloading {url}")
        try:
            response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FontLoadError(f"Failed to download {url}: {e}") from e

        size = len(response.content) / 1024
        logger.debug(f"Downloaded {url} ({size:.1f} KB)")
        return response.content

    async def write_file(self, location: str | Path, data: bytes) -> None:
        path = Path(location)
        path.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(path.write_bytes, data)

    def output_path(self, importer: Path) -> Path:
        """Where a stylesheet from the source tree ends up."""
        importer = Path(importer).resolve()
        if self.out_dir is None or not importer.is_relative_to(self.root):
            return importer
        return self.out_dir / importer.relative_to(self.root)

    def reference_for(self, location: str | Path, importer: Path) -> str:
        """Reference to a written file, relative to the stylesheet's output location."""
        stylesheet_dir = self.output_path(importer).parent
        relative = os.path.relpath(Path(location).resolve(), stylesheet_dir)
        return Path(relative).as_posix()
