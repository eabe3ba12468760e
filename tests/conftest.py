"""Root test configuration: runtime artifact cleanup and a fake external-tool runner"""

import shutil
from pathlib import Path

import pytest

from guidecheck.core.utils.process import CommandResult


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["guidecheck.db", "test.db"]
_CLEANUP_DIRS = [".guidecheck"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files and build directories created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


CARGO_TEMPLATE = '[package]\nname = "{name}"\nversion = "0.1.0"\nedition = "2021"\n\n[dependencies]\n'


class FakeRunner:
    """Stands in for cargo, rustdoc and git.

    cargo new/init create a project skeleton, cargo build returns build_code,
    git ls-files lists `tracked`, and the doctest tool returns codes[path].
    """

    def __init__(self, tracked=None, codes=None, build_code=0, git_code=0):
        self.tracked = list(tracked or [])
        self.codes = dict(codes or {})
        self.build_code = build_code
        self.git_code = git_code
        self.calls: list[list[str]] = []

    def __call__(self, cmd, cwd=None, capture=False):
        self.calls.append(list(cmd))
        tool, sub = cmd[0], cmd[1] if len(cmd) > 1 else ""
        if tool == "git":
            if self.git_code:
                return CommandResult(code=self.git_code, stderr="fatal: not a git repository")
            return CommandResult(code=0, stdout="".join(f"{t}\n" for t in self.tracked))
        if tool == "cargo" and sub in ("new", "init"):
            path = Path(cmd[2])
            path.mkdir(parents=True, exist_ok=True)
            (path / "Cargo.toml").write_text(CARGO_TEMPLATE.format(name=path.name))
            return CommandResult(code=0)
        if tool == "cargo" and sub == "build":
            return CommandResult(code=self.build_code)
        if tool == "rustdoc":
            path = cmd[cmd.index("--test") + 1]
            return CommandResult(code=self.codes.get(path, 0))
        raise AssertionError(f"unexpected command: {cmd}")

    def commands(self, tool: str, sub: str = None) -> list[list[str]]:
        return [c for c in self.calls if c[0] == tool and (sub is None or c[1] == sub)]

    @property
    def tested(self) -> list[str]:
        return [c[c.index("--test") + 1] for c in self.commands("rustdoc")]


@pytest.fixture(name="fake_runner")
def fake_runner_fixture():
    return FakeRunner()


@pytest.fixture(name="runner_factory")
def runner_factory_fixture():
    return FakeRunner
