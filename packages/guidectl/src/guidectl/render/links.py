from __future__ import annotations

import posixpath
import re
from pathlib import PurePosixPath
from typing import Callable, Iterator

from ..model import Block, Bundle, Guide

MD_LINK_RE = re.compile(r"(!?\[[^\]]*\]\()([^)\s]+)((?:\s+\"[^\"]*\")?\))")


def is_external(href: str) -> bool:
    return "://" in href or href.startswith(("mailto:", "tel:"))


def prose_links(blocks: tuple[Block, ...]) -> Iterator[tuple[int, str]]:
    """Yield ``(line, href)`` for markdown links in prose blocks; code is never scanned."""
    for block in blocks:
        if block.kind != "prose":
            continue
        for offset, line in enumerate(block.text.splitlines()):
            for match in MD_LINK_RE.finditer(line):
                if match.group(1).startswith("!"):
                    continue
                yield block.line + offset, match.group(2)


def guide_blocks(guide: Guide) -> Iterator[tuple[Block, ...]]:
    yield guide.intro
    for chapter in guide.chapters:
        yield chapter.blocks


def resolve_guide_link(bundle: Bundle, guide: Guide, href: str) -> tuple[Guide, str] | None:
    """Map a link found in ``guide`` to ``(target guide, fragment)`` when it points at a bundle guide."""
    if is_external(href):
        return None
    path, _, fragment = href.partition("#")
    if not path:
        return guide, fragment
    if not path.endswith(".md"):
        return None
    base = PurePosixPath(guide.source).parent
    target = posixpath.normpath((base / path).as_posix())
    other = bundle.guide(target)
    return (other, fragment) if other is not None else None


def rewrite_links(text: str, rewrite: Callable[[str], str | None]) -> str:
    """Rewrite markdown link targets in ``text``; ``rewrite`` returns None to keep a target."""

    def _sub(match: re.Match[str]) -> str:
        if match.group(1).startswith("!"):
            return match.group(0)
        new = rewrite(match.group(2))
        return match.group(0) if new is None else f"{match.group(1)}{new}{match.group(3)}"

    return MD_LINK_RE.sub(_sub, text)
