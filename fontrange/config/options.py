"""
Pipeline options.

Options come from the `[tool.fontrange]` table of a pyproject.toml and can be
overridden per invocation from the command line.
"""

import re
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from fontrange.config.formats import DEFAULT_FONT_EXTENSIONS, DEFAULT_INCLUDE
from fontrange.config.paths import DEFAULT_CACHE_DIR, NODE_MODULES
from fontrange.utils.logging import logger


@dataclass(frozen=True)
class PluginOptions:
    """Stylesheet selection, font matching and output location."""

    include: re.Pattern = DEFAULT_INCLUDE
    exclude: re.Pattern | None = None
    font_extensions: re.Pattern = DEFAULT_FONT_EXTENSIONS
    cache_dir: Path = field(default=DEFAULT_CACHE_DIR)

    def matches(self, path: str | Path) -> bool:
        """
        Check whether a stylesheet should be analyzed.

        Stylesheets under node_modules are never analyzed.
        """
        path_str = Path(path).as_posix()
        if NODE_MODULES in Path(path).parts:
            return False
        if not self.include.search(path_str):
            return False
        if self.exclude is not None and self.exclude.search(path_str):
            return False
        return True

    def with_overrides(
        self,
        include: str | None = None,
        exclude: str | None = None,
        font_extensions: str | None = None,
        cache_dir: Path | None = None,
    ) -> "PluginOptions":
        """Return a copy with the given non-None values replaced."""
        changes: dict = {}
        if include is not None:
            changes["include"] = re.compile(include)
        if exclude is not None:
            changes["exclude"] = re.compile(exclude)
        if font_extensions is not None:
            changes["font_extensions"] = re.compile(font_extensions, re.IGNORECASE)
        if cache_dir is not None:
            changes["cache_dir"] = Path(cache_dir)
        return replace(self, **changes)


def load_options(pyproject: Path) -> PluginOptions:
    """
    Load options from the `[tool.fontrange]` table of a pyproject.toml.

    Args:
        pyproject: Path to pyproject.toml

    Returns:
        Options with defaults for every key the table does not set
    """
    if not pyproject.exists():
        logger.debug(f"{pyproject} not found, using default options")
        return PluginOptions()

    with open(pyproject, "rb") as file:
        data = tomllib.load(file)

    table = data.get("tool", {}).get("fontrange", {})
    if not table:
        return PluginOptions()

    # Relative cache-dir is relative to the pyproject.toml
    cache_dir = table.get("cache-dir")
    options = PluginOptions().with_overrides(
        include=table.get("include"),
        exclude=table.get("exclude"),
        font_extensions=table.get("font-extensions"),
        cache_dir=pyproject.parent / cache_dir if cache_dir else None,
    )
    logger.debug(f"Loaded options from {pyproject}")
    return options
