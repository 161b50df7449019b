"""Tests for the size reduction report."""

from fontrange.core.font_io import format_size
from fontrange.pipeline.report import ReportCollector, format_summary


def test_format_size():
    assert format_size(2048) == "2.0KB"
    assert format_size(1536) == "1.5KB"


def test_add_computes_reduction():
    report = ReportCollector()
    line = report.add("inter.woff2", 10240, 4096)
    assert round(line.reduction_percent) == 60
    assert line.before == "10.0KB"
    assert line.after == "4.0KB"
    assert line.rate == "60%     10.0KB → 4.0KB"


def test_drain_clears():
    report = ReportCollector()
    report.add("a.woff2", 100, 50)
    assert len(report) == 1
    assert len(report.drain()) == 1
    assert report.drain() == []


def test_summary_alignment():
    report = ReportCollector()
    report.add("a.woff2", 1000, 500)
    report.add("longer-name.woff2", 1000, 250)

    rows = format_summary(report.drain())

    assert [len(name) for name, _ in rows] == [21, 21]
    assert rows[0][1].startswith("-50%")
    assert rows[1][1].startswith("-75%")


def test_summary_empty():
    assert format_summary([]) == []
