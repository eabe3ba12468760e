"""Run the documentation-test tool over one guide file"""

import logging
import time
from pathlib import Path
from typing import Optional

from guidecheck.core.models import FileResult, VersionEnv
from guidecheck.core.utils.process import Runner, run_command


logger = logging.getLogger(__name__)


def doctest_command(tool: str, edition: str, path: str, env: VersionEnv) -> list[str]:
    """Build the doctest invocation linking against env's prebuilt dependencies."""
    return [tool, "--edition", edition, "--test", path, "-L", str(env.deps_dir)]


def test_file(
    path: str,
    env: VersionEnv,
    tool: str = "rustdoc",
    runner: Runner = run_command,
    cwd: Optional[Path] = None,
    ) -> FileResult:
    """Doctest a single file. Failures are returned in the result, never raised."""
    if not ((cwd or Path.cwd()) / path).exists():
        logger.warning("%s does not exist; passing it to %s anyway", path, tool)
    start = time.perf_counter()
    result = runner(doctest_command(tool, env.edition, path, env), cwd=cwd)
    duration = time.perf_counter() - start
    if not result.ok:
        logger.info("%s failed with exit code %d", path, result.code)
    return FileResult(path=path, version=env.tag, code=result.code, duration=duration)


# Keep pytest from collecting test_file as a test when imported into test modules.
test_file.__test__ = False
