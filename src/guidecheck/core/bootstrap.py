"""Per-version dependency environment: create once, build, stamp, reuse"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from guidecheck.core.errors import BootstrapError
from guidecheck.core.models import VersionEnv
from guidecheck.core.utils.hashing import sha256
from guidecheck.core.utils.process import Runner, run_command


logger = logging.getLogger(__name__)

DEPENDENCIES_HEADER = "[dependencies]"


@contextmanager
def _locked(path: Path) -> Iterator[None]:
    """Hold an exclusive lock on path for the duration of the block."""
    # POSIX only.
    import fcntl

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as fh:
        fcntl.flock(fh, fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(fh, fcntl.LOCK_UN)


def _step(runner: Runner, cmd: list[str], env: VersionEnv, step: str, cwd: Optional[Path]) -> None:
    result = runner(cmd, cwd=cwd)
    if not result.ok:
        raise BootstrapError(env.tag, step, result.code)


def write_dependencies(manifest: Path, dependencies: list[str]) -> None:
    """Append dependency lines, reusing a trailing [dependencies] table if the manifest has one."""
    text = manifest.read_text(encoding="utf-8") if manifest.exists() else ""
    has_table = any(line.strip() == DEPENDENCIES_HEADER for line in text.splitlines())
    chunk = "" if not text or text.endswith("\n") else "\n"
    if not has_table:
        chunk += f"\n{DEPENDENCIES_HEADER}\n"
    chunk += "".join(f"{dep}\n" for dep in dependencies)
    with manifest.open("a", encoding="utf-8") as fh:
        fh.write(chunk)


def manifest_dependencies(manifest: Path) -> list[str]:
    """Return the entries of the manifest's [dependencies] table, stripped, comments dropped."""
    deps: list[str] = []
    in_table = False
    for line in manifest.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped.startswith("["):
            in_table = stripped == DEPENDENCIES_HEADER
            continue
        if in_table and stripped and not stripped.startswith("#"):
            deps.append(stripped)
    return deps


def dependencies_hash(dependencies: list[str]) -> str:
    return sha256("\n".join(dep.strip() for dep in dependencies))


def is_built(env: VersionEnv) -> bool:
    return env.stamp.exists()


def ensure_environment(
    env: VersionEnv,
    build_tool: str = "cargo",
    runner: Runner = run_command,
    cwd: Optional[Path] = None,
    ) -> bool:
    """Make sure env is built. Returns True if a build ran, False if the stamp was already there.

    The stamp records the hash of the dependencies the build actually used.
    Raises BootstrapError on the first failing step; nothing is retried.
    """
    with _locked(env.lock_file):
        if is_built(env):
            if env.stamp.read_text().strip() != dependencies_hash(env.dependencies):
                logger.warning(
                    "dependencies for '%s' changed since it was built; remove %s to rebuild",
                    env.tag, env.path,
                )
            logger.info("environment '%s' already built at %s", env.tag, env.path)
            return False

        if not env.manifest.exists():
            step = "init" if env.path.is_dir() else "new"
            logger.info("creating environment '%s' (%s %s)", env.tag, build_tool, step)
            _step(runner, [build_tool, step, str(env.path)], env, step, cwd)
            write_dependencies(env.manifest, env.dependencies)

        logger.info("building environment '%s'", env.tag)
        _step(runner, [build_tool, "build", "--manifest-path", str(env.manifest)], env, "build", cwd)
        env.stamp.write_text(dependencies_hash(manifest_dependencies(env.manifest)) + "\n")
        return True
