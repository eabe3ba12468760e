"""Thin subprocess wrapper shared by the bootstrapper, doctest runner and git discovery"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Exit status and (when captured) output of one external command."""
    code:   int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.code == 0


Runner = Callable[..., CommandResult]


def run_command(cmd: list[str], cwd: Optional[Path] = None, capture: bool = False) -> CommandResult:
    """Run cmd to completion. Output streams to the terminal unless capture is set.

    A missing executable is reported as exit code 127 and a signal as 128 + signum, like a shell would.
    """
    logger.debug("running: %s (cwd=%s)", " ".join(cmd), cwd or ".")
    try:
        proc = subprocess.run(cmd, cwd=cwd, text=True, capture_output=capture, check=False)
    except FileNotFoundError as e:
        logger.error("command not found: %s", cmd[0])
        return CommandResult(code=127, stderr=str(e))
    code = proc.returncode
    if code < 0:
        code = 128 - code
    return CommandResult(code=code, stdout=proc.stdout or "", stderr=proc.stderr or "")
