"""Guide discovery, frontmatter extraction, and markdown-it tokenization"""

import logging
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from markdown_it import MarkdownIt

from guidecheck.config import VersionSettings
from guidecheck.core.errors import DiscoveryError
from guidecheck.core.extract.blocks import tokens_to_blocks
from guidecheck.core.models import Guide
from guidecheck.core.utils.process import Runner, run_command


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)
MD_EXTENSIONS = {'.md'}


def _make_parser() -> MarkdownIt:
    return MarkdownIt("commonmark")


def strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def tracked_files(root: Path, runner: Runner = run_command) -> list[str]:
    """Return paths tracked by git under root, relative to root."""
    result = runner(["git", "ls-files"], cwd=root, capture=True)
    if not result.ok:
        raise DiscoveryError(f"git ls-files failed in {root}: {result.stderr.strip() or result.code}")
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def walk_files(root: Path) -> list[str]:
    """Return every markdown file under root, relative to root."""
    return [p.relative_to(root).as_posix() for p in root.rglob('*') if p.is_file() and p.suffix in MD_EXTENSIONS]


def _in_directory(path: str, directory: str) -> bool:
    directory = directory.strip('/')
    return not directory or path.startswith(f"{directory}/")


def discover_guides(
    root: Path,
    directory: str,
    discovery: str = "git",
    runner: Runner = run_command,
    ) -> list[str]:
    """Return sorted, unique markdown paths under directory/ (every markdown file if directory is empty)."""
    files = tracked_files(root, runner) if discovery == "git" else walk_files(root)
    found = sorted({f for f in files if Path(f).suffix in MD_EXTENSIONS and _in_directory(f, directory)})
    logger.debug("discovered %d guide(s) under '%s'", len(found), directory or '.')
    return found


def version_for_path(path: str, versions: dict[str, VersionSettings]) -> Optional[str]:
    """Return the tag whose directory holds path; the most specific directory wins."""
    posix = Path(path).as_posix()
    matches = [
        (len(v.directory.strip('/')), tag) for tag, v in versions.items()
        if v.directory.strip('/') and _in_directory(posix, v.directory)
    ]
    if matches:
        return max(matches)[1]
    # An empty directory claims every file.
    return next((tag for tag, v in versions.items() if not v.directory.strip('/')), None)


def parse_guide(path: Path, version: Optional[str] = None, untagged_is_rust: bool = False) -> Guide:
    """Parse a guide file into front matter and code blocks."""
    raw = path.read_text(encoding='utf-8')
    frontmatter, body = strip_frontmatter(raw)
    offset = raw[:len(raw) - len(body)].count('\n')
    tokens = _make_parser().parse(body)
    return Guide(
        path=path,
        version=version,
        frontmatter=frontmatter,
        body=body,
        blocks=tokens_to_blocks(tokens, untagged_is_rust, line_offset=offset),
    )
