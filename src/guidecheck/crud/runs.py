"""Run persistence: record a RunReport and read past results back"""

from sqlmodel import Session, select

from guidecheck.core.models import FileResult, RunReport
from guidecheck.crud.models import FileResultRow, CheckRun


def record_run(session: Session, report: RunReport) -> CheckRun:
    """Store report as a new run. Flushes but does not commit; caller controls the transaction."""
    run = CheckRun(
        exit_code=report.exit_code,
        total=len(report.results),
        failed=len(report.failed),
    )
    session.add(run)
    session.flush()
    for position, r in enumerate(report.results):
        session.add(FileResultRow(
            run_id=run.id,
            position=position,
            path=r.path,
            version=r.version,
            code=r.code,
            duration=r.duration,
        ))
    session.flush()
    return run


def get_last_run(session: Session) -> CheckRun | None:
    """Return the most recently started run, or None if nothing was recorded."""
    return session.exec(select(CheckRun).order_by(CheckRun.started_at.desc())).first()


def list_runs(session: Session, limit: int = 10) -> list[CheckRun]:
    """Return up to limit runs, newest first."""
    return list(session.exec(select(CheckRun).order_by(CheckRun.started_at.desc()).limit(limit)).all())


def get_results(session: Session, run: CheckRun, failed_only: bool = False) -> list[FileResult]:
    """Return the run's per-file results in tested order."""
    stmt = select(FileResultRow).where(FileResultRow.run_id == run.id)
    if failed_only:
        stmt = stmt.where(FileResultRow.code != 0)
    rows = session.exec(stmt.order_by(FileResultRow.position)).all()
    return [FileResult(path=r.path, version=r.version, code=r.code, duration=r.duration) for r in rows]
