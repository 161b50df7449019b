"""
Reference rewriting strategies.

A rewriter is told about every accepted subset together with the URL that
referenced it, and decides how build output is changed:

  InlineRewriter  - replaces url(...) references in stylesheet text
  AliasRewriter   - adds {find, replacement} entries to an alias table
  AssetRewriter   - overwrites already-emitted font assets with subset bytes

Applying any of them twice leaves the output as after the first time.
"""

import re
from abc import ABC, abstractmethod
from pathlib import Path

from fontrange.core.host import Alias, Asset, BuildHost
from fontrange.core.identity import font_identity
from fontrange.pipeline.cache import SubsetEntry
from fontrange.utils.logging import logger

URL_REFERENCE_RE = re.compile(
    r"""url\(\s*(?P<quote>['"]?)(?P<url>[^'")]*?)(?P=quote)\s*\)""",
    re.IGNORECASE,
)


class ReferenceRewriter(ABC):
    """Applies accepted subsets to build output."""

    @abstractmethod
    def apply(self, reference: str, entry: SubsetEntry, importer: Path) -> None:
        """
        Redirect one original font reference to its subset.

        Args:
            reference: URL as written in the stylesheet
            entry: Accepted subset entry
            importer: Stylesheet containing the reference
        """

    def transform(self, code: str, importer: Path) -> str:
        """Final stylesheet text once all of its fonts are processed."""
        return code


def rewrite_references(code: str, replacements: dict[str, str]) -> str:
    """
    Replace url(...) references found in a replacement table.

    Only whole URLs inside url() are replaced, so already rewritten
    references are left alone.
    """
    if not replacements:
        return code

    def substitute(match: re.Match) -> str:
        url = match.group("url")
        replacement = replacements.get(url)
        if replacement is None:
            return match.group(0)
        quote = match.group("quote")
        return f"url({quote}{replacement}{quote})"

    return URL_REFERENCE_RE.sub(substitute, code)


class InlineRewriter(ReferenceRewriter):
    """Rewrites stylesheet text to point at subset files."""

    def __init__(self, host: BuildHost):
        self.host = host
        self.tables: dict[Path, dict[str, str]] = {}

    def apply(self, reference: str, entry: SubsetEntry, importer: Path) -> None:
        if not entry.accepted or entry.output_location is None:
            return
        table = self.tables.setdefault(Path(importer), {})
        table[reference] = self.host.reference_for(entry.output_location, importer)

    def transform(self, code: str, importer: Path) -> str:
        table = self.tables.get(Path(importer), {})
        # A replacement that is itself an original reference would be rewritten again
        table = {find: new for find, new in table.items() if new not in table}
        return rewrite_references(code, table)


class AliasRewriter(ReferenceRewriter):
    """Adds alias entries so later resolution of a URL yields the subset."""

    def __init__(self, aliases: list[Alias]):
        self.aliases = aliases

    def find(self, reference: str) -> Alias | None:
        return next((a for a in self.aliases if a.find == reference), None)

    def apply(self, reference: str, entry: SubsetEntry, importer: Path) -> None:
        if not entry.accepted or entry.output_location is None:
            return
        if self.find(reference) is not None:
            return
        self.aliases.append(Alias(find=reference, replacement=entry.output_location))
        logger.debug(f"Alias {reference} -> {entry.output_location}")


class AssetRewriter(ReferenceRewriter):
    """Overwrites emitted font assets with subset bytes in place."""

    def __init__(self, bundle: dict[str, Asset]):
        self.bundle = bundle
        self.replaced: set[str] = set()

    def apply(self, reference: str, entry: SubsetEntry, importer: Path) -> None:
        if not entry.accepted:
            return
        for file_name, asset in self.bundle.items():
            if asset.type != "asset" or font_identity(file_name) != entry.identity:
                continue
            if asset.source == entry.subset_bytes:
                continue
            asset.source = entry.subset_bytes
            self.replaced.add(file_name)
            logger.debug(f"Replaced asset {file_name} with subset of {entry.identity}")
