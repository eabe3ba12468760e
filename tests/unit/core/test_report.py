"""Unit tests for core/report.py and RunReport"""

import pytest

from guidecheck.core.models import FileResult, RunReport
from guidecheck.core.report import aggregate, summarize


@pytest.mark.parametrize("codes,expected", [
    ([],           0),
    ([0, 0, 0],    0),
    ([0, 101, 0],  101),
    ([0, 1, 101],  1),
    ([2, 0, 101],  2),
])
def test_aggregate_first_failure_wins(codes, expected):
    """The first non-zero code is the aggregate; zero only if every code is zero."""
    assert aggregate(codes) == expected


def _report(*codes):
    return RunReport(results=[FileResult(path=f"f{i}.md", version="stable", code=c) for i, c in enumerate(codes)])


def test_run_report_exit_code_and_partitions():
    """RunReport keeps every result and partitions passed/failed."""
    report = _report(0, 101, 0, 1)
    assert report.exit_code == 101
    assert [r.path for r in report.failed] == ["f1.md", "f3.md"]
    assert len(report.passed) == 2


def test_summarize_lists_every_failure():
    """The summary names each failing file, then the totals."""
    lines = summarize(_report(0, 101, 1))
    assert lines[0] == "  FAILED (101): f1.md [stable]"
    assert lines[1] == "  FAILED (1): f2.md [stable]"
    assert lines[-1] == "Checked 3 file(s) - 1 passed, 2 failed"


def test_summarize_all_passed():
    """With no failures only the totals line is produced."""
    assert summarize(_report(0, 0)) == ["Checked 2 file(s) - 2 passed, 0 failed"]
