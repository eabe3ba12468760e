"""Reduce per-file doctest results to a process exit code and a failure summary"""

from typing import Iterable


def aggregate(codes: Iterable[int]) -> int:
    """Fold exit codes: the first non-zero code wins, 0 when every code is 0."""
    status = 0
    for code in codes:
        if status == 0 and code != 0:
            status = code
    return status


def summarize(report) -> list[str]:
    """Return one line per failing file, then a totals line."""
    lines = [f"  FAILED ({r.code}): {r.path} [{r.version}]" for r in report.failed]
    lines.append(
        f"Checked {len(report.results)} file(s) - "
        f"{len(report.passed)} passed, {len(report.failed)} failed"
    )
    return lines
