"""
Size reduction report collected during a build.
"""

from dataclasses import dataclass

from fontrange.core.font_io import format_size


@dataclass(frozen=True)
class ReportLine:
    """Before/after sizes of one subset font."""

    name: str
    reduction_percent: float
    before: str
    after: str

    @property
    def rate(self) -> str:
        return f"{self.reduction_percent:.0f}%".ljust(8) + f"{self.before} → {self.after}"


class ReportCollector:
    """Accumulates report lines for accepted subsets of one build."""

    def __init__(self):
        self._lines: list[ReportLine] = []

    def add(self, name: str, original_size: int, subset_size: int) -> ReportLine:
        reduction = 100 - subset_size * 100 / original_size if original_size else 0.0
        line = ReportLine(name, reduction, format_size(original_size), format_size(subset_size))
        self._lines.append(line)
        return line

    def drain(self) -> list[ReportLine]:
        """Return collected lines and clear the collector."""
        lines, self._lines = self._lines, []
        return lines

    def __len__(self) -> int:
        return len(self._lines)


def format_summary(lines: list[ReportLine]) -> list[tuple[str, str]]:
    """
    Align report lines into (padded name, rate) columns.

    Names are padded to the longest name plus 4 characters.
    """
    if not lines:
        return []
    width = max(len(line.name) for line in lines) + 4
    return [(line.name.ljust(width), f"-{line.rate}") for line in lines]
