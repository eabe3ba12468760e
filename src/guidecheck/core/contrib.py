"""Import the upstream library's docs/ folder as Jekyll guides under _contrib/"""

import logging
import re
from pathlib import Path
from typing import Optional

import yaml

from guidecheck.core.errors import GuidecheckError


logger = logging.getLogger(__name__)

INDEX_SOURCE = "README.md"
INDEX_NAME = "index.md"
INDEX_PERMALINK = "/contrib/"
# Upstream file names that keep their case in links.
KEEP_CASE = {"MSRV"}

INLINE_LINK_RE = re.compile(r'(\]\()([^)\s]+)')
REFERENCE_LINK_RE = re.compile(r'^(\s*\[[^\]]+\]:\s*)(\S+)', re.MULTILINE)
HEADING_RE = re.compile(r'^#+\s*(.*?)\s*#*\s*$')


def normalize_filename(name: str) -> str:
    """CODE_OF_CONDUCT.md -> code-of-conduct.md"""
    return name.lower().replace("_", "-")


def to_guide(text: str, hyper_path: str, fallback_title: str, permalink: Optional[str] = None) -> str:
    """Turn a leading '# Title' line into guide front matter."""
    lines = text.splitlines(keepends=True)
    title = fallback_title
    if lines and lines[0].startswith("#"):
        title = HEADING_RE.match(lines[0].rstrip("\n")).group(1) or fallback_title
        lines = lines[1:]
    fm = {"title": title, "layout": "guide", "hyper_path": hyper_path}
    if permalink:
        fm["permalink"] = permalink
    header = yaml.safe_dump(fm, sort_keys=False, allow_unicode=True)
    return f"---\n{header}---\n{''.join(lines)}"


def _rewrite_target(target: str, renames: dict[str, str]) -> str:
    if "://" in target or target.startswith(("#", "mailto:")):
        return target
    target = target.replace("../", "./")
    for old, new in renames.items():
        target = target.replace(old, new)
    return target


def rewrite_links(body: str, stems: list[str]) -> str:
    """Point relative links at the renamed contrib files."""
    renames = {}
    for stem in sorted(stems, key=len, reverse=True):
        if stem in KEEP_CASE:
            continue
        if f"{stem}.md" == INDEX_SOURCE:
            renames[f"{stem}.md"] = INDEX_NAME
            continue
        renames[stem] = normalize_filename(stem)

    def _sub(m: re.Match) -> str:
        return m.group(1) + _rewrite_target(m.group(2), renames)

    body = INLINE_LINK_RE.sub(_sub, body)
    return REFERENCE_LINK_RE.sub(_sub, body)


def _collect_sources(upstream: Path) -> dict[str, tuple[str, str]]:
    """Map file name -> (text, hyper_path) for every doc to import."""
    docs_dir = upstream / "docs"
    if not docs_dir.is_dir():
        raise GuidecheckError(f"No docs/ directory in {upstream}")
    sources = {
        p.name: (p.read_text(encoding="utf-8"), f"docs/{p.name}")
        for p in sorted(docs_dir.glob("*.md"))
    }
    contributing = upstream / "CONTRIBUTING.md"
    if contributing.exists():
        text = contributing.read_text(encoding="utf-8").replace("./docs/", "")
        sources[contributing.name] = (text, contributing.name)
    return sources


def _split_frontmatter(doc: str) -> tuple[str, str]:
    end = doc.index("\n---\n", 4) + len("\n---\n")
    return doc[:end], doc[end:]


def sync_contrib(upstream: Path, dest: Path) -> list[tuple[str, Path]]:
    """Convert upstream docs into guides in dest. Returns (source name, written path) pairs.

    A name that normalizes onto an already written file is skipped.
    """
    sources = _collect_sources(upstream)
    stems = [Path(name).stem for name in sources]
    dest.mkdir(parents=True, exist_ok=True)

    written: list[tuple[str, Path]] = []
    taken: set[str] = set()
    for name, (text, hyper_path) in sources.items():
        is_index = name == INDEX_SOURCE
        doc = to_guide(text, hyper_path, Path(name).stem, INDEX_PERMALINK if is_index else None)
        header, body = _split_frontmatter(doc)
        doc = header + rewrite_links(body, stems)

        out_name = INDEX_NAME if is_index else normalize_filename(name)
        if out_name in taken:
            logger.warning("skipping %s: %s already written", name, out_name)
            continue
        taken.add(out_name)
        out_path = dest / out_name
        out_path.write_text(doc, encoding="utf-8")
        written.append((name, out_path))
    return written
