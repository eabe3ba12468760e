"""Fence token to CodeBlock conversion with doctest attributes and hidden lines"""

import re
from typing import Optional

from guidecheck.core.models import CodeBlock, CodeLine


DOCTEST_ATTRIBUTES = {
    "ignore", "no_run", "should_panic", "compile_fail",
    "test_harness", "standalone_crate",
}
EDITION_RE = re.compile(r'^edition\d{4}$')
INFO_SPLIT_RE = re.compile(r'[\s,]+')


def _is_attribute(token: str) -> bool:
    return token in DOCTEST_ATTRIBUTES or bool(EDITION_RE.match(token)) or token.startswith("ignore-")


def parse_info(info: str) -> tuple[Optional[str], list[str]]:
    """Split a fence info string into (language, attributes).

    Like rustdoc, any doctest attribute (e.g. ```no_run or ```foo,no_run) makes the block rust.
    """
    tokens = [t for t in INFO_SPLIT_RE.split(info.strip()) if t]
    if not tokens:
        return None, []
    attributes = [t for t in tokens if _is_attribute(t)]
    languages = [t for t in tokens if not _is_attribute(t)]
    if attributes or "rust" in languages:
        language = "rust"
    else:
        language = languages[0]
    return language, attributes


def split_line(text: str) -> CodeLine:
    """Apply the hidden-line marker: '# ' or a lone '#' hides, '##' escapes."""
    stripped = text.strip()
    if stripped.startswith("##"):
        i = text.index("##")
        return CodeLine(text=text[:i] + text[i + 1:])
    if stripped == "#":
        return CodeLine(text="", hidden=True)
    if stripped.startswith("# "):
        return CodeLine(text=stripped[2:], hidden=True)
    return CodeLine(text=text)


def is_tested(language: Optional[str], attributes: list[str], untagged_is_rust: bool = False) -> bool:
    """Rust blocks are tested unless ignored; untagged ones only when configured."""
    if "ignore" in attributes:
        return False
    if language is None:
        return untagged_is_rust
    return language == "rust"


def is_run(language: Optional[str], attributes: list[str], untagged_is_rust: bool = False) -> bool:
    """Tested blocks are executed unless they are no_run or compile_fail."""
    if not is_tested(language, attributes, untagged_is_rust):
        return False
    return "no_run" not in attributes and "compile_fail" not in attributes


def tokens_to_blocks(tokens: list, untagged_is_rust: bool = False, line_offset: int = 0) -> list[CodeBlock]:
    """Convert every fence token into a CodeBlock, in document order."""
    blocks: list[CodeBlock] = []
    for tok in tokens:
        if tok.type != 'fence':
            continue
        language, attributes = parse_info(tok.info)
        start = (tok.map[0] + 1 + line_offset) if tok.map else 0
        blocks.append(CodeBlock(
            language=language,
            attributes=attributes,
            lines=[split_line(ln) for ln in tok.content.splitlines()],
            start_line=start,
            tested=is_tested(language, attributes, untagged_is_rust),
            run=is_run(language, attributes, untagged_is_rust),
        ))
    return blocks
