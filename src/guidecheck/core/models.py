"""Data models for guides, code blocks, version environments and run results"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

from guidecheck.core.report import aggregate


class CodeLine(BaseModel):
    """One source line of a code block; hidden lines compile but never render."""
    text:   str
    hidden: bool = False


class CodeBlock(BaseModel):
    """A fenced code block from a guide."""
    language:   Optional[str] = None        # None for untagged fences
    attributes: list[str] = []              # no_run, ignore, should_panic, compile_fail, ...
    lines:      list[CodeLine] = []
    start_line: int = 0                     # 1-based line of the opening fence
    tested:     bool = False
    run:        bool = False

    @property
    def compiled_source(self) -> str:
        return "\n".join(line.text for line in self.lines)

    @property
    def rendered_source(self) -> str:
        return "\n".join(line.text for line in self.lines if not line.hidden)

    @property
    def hidden_count(self) -> int:
        return sum(1 for line in self.lines if line.hidden)


@dataclass
class Guide:
    """A versioned markdown guide; front matter is carried for display only."""
    path:        Path
    version:     Optional[str]
    frontmatter: dict[str, Any]
    body:        str
    blocks:      list[CodeBlock] = field(default_factory=list)

    @property
    def title(self) -> str:
        return str(self.frontmatter.get("title") or self.path.stem)

    @property
    def tested_blocks(self) -> list[CodeBlock]:
        return [b for b in self.blocks if b.tested]


@dataclass
class VersionEnv:
    """Isolated dependency environment for one version tag."""
    tag:          str
    path:         Path                # build project directory
    dependencies: list[str]
    edition:      str

    @property
    def manifest(self) -> Path:
        return self.path / "Cargo.toml"

    @property
    def deps_dir(self) -> Path:
        return self.path / "target" / "debug" / "deps"

    @property
    def stamp(self) -> Path:
        return self.path / ".guidecheck-built"

    @property
    def lock_file(self) -> Path:
        return self.path.parent / f".{self.tag}.lock"


class FileResult(BaseModel):
    """Doctest outcome for one guide file."""
    path:     str
    version:  str
    code:     int
    duration: float = 0.0

    @property
    def passed(self) -> bool:
        return self.code == 0


class RunReport(BaseModel):
    """Ordered per-file results of one pipeline invocation."""
    results: list[FileResult] = []

    @property
    def exit_code(self) -> int:
        return aggregate(r.code for r in self.results)

    @property
    def failed(self) -> list[FileResult]:
        return [r for r in self.results if not r.passed]

    @property
    def passed(self) -> list[FileResult]:
        return [r for r in self.results if r.passed]
