"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel

from guidecheck.config import Settings, load_config
from guidecheck.core.contrib import sync_contrib
from guidecheck.core.errors import GuidecheckError
from guidecheck.core.models import RunReport
from guidecheck.core.parse import discover_guides, parse_guide, version_for_path
from guidecheck.core.pipeline import run_bootstrap, run_checks, select_versions
from guidecheck.core.report import summarize
from guidecheck.crud.database import init_db, make_engine
from guidecheck.crud.runs import get_last_run, get_results, record_run


logger = logging.getLogger(__name__)

VersionOpt = Annotated[
    Optional[list[str]],
    typer.Option("--version", help="Version tag to process; repeatable. Defaults to every configured version"),
]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _record(settings: Settings, report: RunReport) -> None:
    """Persist the report; a database problem never changes the check outcome."""
    try:
        engine = make_engine(settings.db_url)
        init_db(engine)
        with Session(engine) as session:
            record_run(session, report)
            session.commit()
    except SQLAlchemyError as e:
        logger.warning("could not record run in %s: %s", settings.db_url, e)


def check_cmd(
    file: Annotated[Optional[str], typer.Argument(help="Test only this guide file")] = None,
    versions: VersionOpt = None,
    no_record: Annotated[bool, typer.Option("--no-record", help="Do not store results in the database")] = False,
    ):
    """Bootstrap each version, doctest its guides, and exit with the first failing code."""
    settings = _settings()
    try:
        report = run_checks(settings, file=file, versions=versions, progress=typer.echo)
    except GuidecheckError as e:
        _fail(str(e))

    if settings.record_runs and not no_record:
        _record(settings, report)

    if report.failed or len(report.results) > 1:
        for line in summarize(report):
            typer.echo(line)
    raise typer.Exit(report.exit_code)


def bootstrap_cmd(versions: VersionOpt = None):
    """Create and build the dependency environment of each version (skipped when already built)."""
    settings = _settings()
    try:
        done = run_bootstrap(settings, versions)
    except GuidecheckError as e:
        _fail(str(e))
    for tag, built in done:
        typer.echo(f"  {tag}: {'built' if built else 'already built'}")


def list_cmd(versions: VersionOpt = None):
    """List guides per version with tested/total code block counts."""
    settings = _settings()
    root = Path(settings.root)
    try:
        tags = select_versions(settings, versions)
        listing = [
            (tag, discover_guides(root, settings.versions[tag].directory, settings.discovery))
            for tag in tags
        ]
    except GuidecheckError as e:
        _fail(str(e))

    total = 0
    for tag, files in listing:
        typer.echo(f"{tag}:")
        for f in files:
            try:
                guide = parse_guide(root / f, tag, settings.untagged_is_rust)
            except (ValueError, OSError) as e:
                _fail(f"Cannot parse {f}", e)
            typer.echo(f"  {f} ({len(guide.tested_blocks)}/{len(guide.blocks)} blocks tested) - {guide.title}")
        total += len(files)
    if not total:
        typer.echo("No guides found.")
        raise typer.Exit(1)


def blocks_cmd(
    file: Annotated[Path, typer.Argument(exists=True, readable=True, help="Guide file")],
    rendered: Annotated[bool, typer.Option("--rendered", help="Show blocks as rendered, without hidden lines")] = False,
    ):
    """Print a guide's code blocks as compiled (default) or as rendered."""
    settings = _settings()
    version = version_for_path(file.as_posix(), settings.versions)
    try:
        guide = parse_guide(file, version, settings.untagged_is_rust)
    except (ValueError, OSError) as e:
        _fail(f"Cannot parse {file}", e)

    if not guide.blocks:
        typer.echo("No code blocks found.")
        raise typer.Exit(0)
    for i, block in enumerate(guide.blocks, start=1):
        mode = "run" if block.run else ("compile" if block.tested else "skip")
        attrs = f" [{', '.join(block.attributes)}]" if block.attributes else ""
        typer.echo(
            f"--- block {i} (line {block.start_line}, {block.language or 'untagged'}{attrs}, {mode}, "
            f"{block.hidden_count} hidden) ---"
        )
        typer.echo(block.rendered_source if rendered else block.compiled_source)


def history_cmd(
    failed: Annotated[bool, typer.Option("--failed", help="Show only failing files")] = False,
    ):
    """Show the per-file results of the last recorded run."""
    settings = _settings()
    try:
        engine = make_engine(settings.db_url)
        init_db(engine)
        with Session(engine) as session:
            run = get_last_run(session)
            if run is None:
                typer.echo("No runs recorded.")
                raise typer.Exit(1)
            results = get_results(session, run, failed_only=failed)
            typer.echo(f"Run {run.started_at:%Y-%m-%d %H:%M:%S} - exit {run.exit_code}, {run.failed}/{run.total} failed")
    except SQLAlchemyError as e:
        _fail("Cannot read run history", e)
    for r in results:
        status = "ok" if r.passed else f"FAILED ({r.code})"
        typer.echo(f"  {status}: {r.path} [{r.version}] {r.duration:.1f}s")


def contrib_cmd(
    upstream: Annotated[Path, typer.Argument(exists=True, file_okay=False, help="Checkout of the upstream library")],
    dest: Annotated[Path, typer.Option("--dest", help="Destination guide directory")] = Path("_contrib"),
    ):
    """Import the upstream docs/ folder (and CONTRIBUTING.md) as contrib guides."""
    try:
        written = sync_contrib(upstream, dest)
    except GuidecheckError as e:
        _fail(str(e))
    for name, out_path in written:
        typer.echo(f"  {name} -> {out_path}")
    typer.echo(f"Imported {len(written)} document(s) to {dest}/")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize the results database. Use --reset to clear recorded runs."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        SQLModel.metadata.drop_all(engine)
        typer.echo("Existing data cleared.")
    init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")
