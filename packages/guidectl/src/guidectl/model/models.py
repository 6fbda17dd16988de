"""Document-level entities shared by the parser, renderers and checks.

Everything here is loaded once and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Literal

BlockKind = Literal["prose", "code", "heading"]
IssueSeverity = Literal["error", "warn"]


@dataclass(frozen=True)
class Issue:
    source: str
    line: int
    code: str
    message: str
    severity: IssueSeverity = "error"

    def __str__(self) -> str:
        return f"{self.source}:{self.line}: {self.code}: {self.message}"


@dataclass(frozen=True)
class Block:
    kind: BlockKind
    text: str
    line: int
    language: str = ""
    fence: str = ""
    level: int = 0
    anchor: str = ""

    def to_dict(self) -> dict[str, object]:
        row: dict[str, object] = {"kind": self.kind, "line": self.line, "text": self.text}
        if self.kind == "code":
            row["language"] = self.language
        if self.kind == "heading":
            row["level"] = self.level
            row["anchor"] = self.anchor
        return row


@dataclass(frozen=True)
class Chapter:
    title: str
    level: int
    anchor: str
    line: int
    blocks: tuple[Block, ...] = ()

    @property
    def headings(self) -> tuple[Block, ...]:
        return tuple(b for b in self.blocks if b.kind == "heading")

    @property
    def code_blocks(self) -> tuple[Block, ...]:
        return tuple(b for b in self.blocks if b.kind == "code")


@dataclass(frozen=True)
class Guide:
    slug: str
    title: str
    source: str
    chapters: tuple[Chapter, ...] = ()
    intro: tuple[Block, ...] = ()
    meta: dict[str, Any] = field(default_factory=dict, compare=False)
    issues: tuple[Issue, ...] = ()
    path: Path | None = field(default=None, compare=False)

    def anchors(self) -> list[str]:
        """Every anchor of the guide in document order."""
        out = [b.anchor for b in self.intro if b.kind == "heading"]
        for chapter in self.chapters:
            out.append(chapter.anchor)
            out.extend(b.anchor for b in chapter.headings)
        return out

    def headings(self) -> Iterator[tuple[int, str, str, int]]:
        """Yield ``(level, title, anchor, line)`` for every heading below the title."""
        for block in self.intro:
            if block.kind == "heading":
                yield block.level, block.text, block.anchor, block.line
        for chapter in self.chapters:
            yield chapter.level, chapter.title, chapter.anchor, chapter.line
            for block in chapter.headings:
                yield block.level, block.text, block.anchor, block.line

    def chapter(self, anchor: str) -> Chapter | None:
        for chapter in self.chapters:
            if chapter.anchor == anchor:
                return chapter
        return None


@dataclass(frozen=True)
class Bundle:
    title: str
    root: Path
    guides: tuple[Guide, ...] = ()
    orphans: tuple[str, ...] = ()

    def guide(self, key: str) -> Guide | None:
        for guide in self.guides:
            if key in (guide.slug, guide.source):
                return guide
        return None

    @property
    def issues(self) -> list[Issue]:
        return [issue for guide in self.guides for issue in guide.issues]


@dataclass(frozen=True)
class TocEntry:
    level: int
    title: str
    anchor: str
    children: tuple["TocEntry", ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "level": self.level,
            "title": self.title,
            "anchor": self.anchor,
            "children": [child.to_dict() for child in self.children],
        }
