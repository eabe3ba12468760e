"""Pipeline step functions: bootstrap, discover, doctest and aggregate"""

import logging
from pathlib import Path
from typing import Callable, Optional

from guidecheck.config import Settings
from guidecheck.core.bootstrap import ensure_environment
from guidecheck.core.doctest import test_file
from guidecheck.core.errors import GuidecheckError
from guidecheck.core.models import RunReport, VersionEnv
from guidecheck.core.parse import discover_guides, version_for_path
from guidecheck.core.utils.process import Runner, run_command


logger = logging.getLogger(__name__)

Progress = Callable[[str], None]


def _noop(_: str) -> None:
    return None


def version_env(tag: str, settings: Settings, root: Optional[Path] = None) -> VersionEnv:
    """Resolve the build environment for a configured version tag."""
    root = root or Path(settings.root).resolve()
    version = settings.versions[tag]
    build_dir = Path(settings.build_dir)
    if not build_dir.is_absolute():
        build_dir = root / build_dir
    return VersionEnv(
        tag=tag,
        path=build_dir / tag,
        dependencies=list(version.dependencies),
        edition=version.edition or settings.edition,
    )


def select_versions(settings: Settings, versions: Optional[list[str]] = None) -> list[str]:
    """Return requested tags in configured order; unknown tags are an error."""
    if not versions:
        return list(settings.versions)
    unknown = [v for v in versions if v not in settings.versions]
    if unknown:
        raise GuidecheckError(
            f"Unknown version(s): {', '.join(unknown)} (configured: {', '.join(settings.versions)})"
        )
    return [tag for tag in settings.versions if tag in versions]


def _relative_to_root(file: str, root: Path) -> str:
    """Express file relative to root when it lives there, else as an absolute path."""
    path = Path(file).resolve()
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def run_bootstrap(
    settings: Settings,
    versions: Optional[list[str]] = None,
    runner: Optional[Runner] = None,
    ) -> list[tuple[str, bool]]:
    """Bootstrap each selected version. Returns (tag, built) pairs."""
    runner = runner or run_command
    root = Path(settings.root).resolve()
    done = []
    for tag in select_versions(settings, versions):
        env = version_env(tag, settings, root)
        done.append((tag, ensure_environment(env, settings.build_tool, runner, cwd=root)))
    return done


def run_checks(
    settings: Settings,
    file: Optional[str] = None,
    versions: Optional[list[str]] = None,
    runner: Optional[Runner] = None,
    progress: Progress = _noop,
    ) -> RunReport:
    """Doctest guides version by version and collect every file's result.

    With file set, only that file is tested, against the version its path
    belongs to (the first selected version if it belongs to none).
    Bootstrap failures propagate; doctest failures are recorded and the run continues.
    """
    runner = runner or run_command
    root = Path(settings.root).resolve()
    tags = select_versions(settings, versions)
    report = RunReport()

    if file is not None:
        rel = _relative_to_root(file, root)
        selected = {tag: settings.versions[tag] for tag in tags}
        tag = version_for_path(rel, selected) or (tags[0] if tags else None)
        if tag is None:
            raise GuidecheckError("No versions configured")
        env = version_env(tag, settings, root)
        ensure_environment(env, settings.build_tool, runner, cwd=root)
        progress(f"Testing: {file}")
        report.results.append(test_file(rel, env, settings.doctest_tool, runner, cwd=root))
        return report

    for tag in tags:
        env = version_env(tag, settings, root)
        ensure_environment(env, settings.build_tool, runner, cwd=root)
        files = discover_guides(root, settings.versions[tag].directory, settings.discovery, runner)
        if not files:
            logger.warning("no guides found for version '%s'", tag)
        for f in files:
            progress(f"Testing: {f}")
            report.results.append(test_file(f, env, settings.doctest_tool, runner, cwd=root))

    return report
