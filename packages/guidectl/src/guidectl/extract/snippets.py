"""Pull fenced code blocks out of guides into standalone files.

Snippets are illustrative only; nothing here compiles or runs them.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..core.fs import write_json, write_text
from ..model import Block, Bundle

INTRO_ANCHOR = "intro"

EXTENSIONS = {
    "dart": "dart",
    "flutter": "dart",
    "ts": "ts",
    "typescript": "ts",
    "js": "js",
    "javascript": "js",
    "py": "py",
    "python": "py",
    "sh": "sh",
    "bash": "sh",
    "shell": "sh",
    "console": "sh",
    "yaml": "yaml",
    "yml": "yaml",
    "json": "json",
    "html": "html",
}


def snippet_language(info: str) -> str:
    return info.split()[0].lower() if info.strip() else ""


def extension_for(language: str) -> str:
    return EXTENSIONS.get(language, "txt")


@dataclass(frozen=True)
class Snippet:
    guide: str
    chapter: str
    index: int
    language: str
    text: str
    line: int = 0

    @property
    def filename(self) -> str:
        return f"{self.index:02d}-{self.chapter}.{extension_for(self.language)}"

    def to_dict(self) -> dict[str, object]:
        return {
            "guide": self.guide,
            "chapter": self.chapter,
            "index": self.index,
            "language": self.language,
            "line": self.line,
            "file": f"{self.guide}/{self.filename}",
        }


def _code(blocks: tuple[Block, ...]) -> Iterator[Block]:
    return (b for b in blocks if b.kind == "code")


def extract_code(bundle: Bundle, language: str | None = None) -> Iterator[Snippet]:
    """Yield every fenced code block in source order, numbered per guide from 1."""
    wanted = language.lower() if language else None
    for guide in bundle.guides:
        index = 0
        groups = [(INTRO_ANCHOR, guide.intro)] + [(c.anchor, c.blocks) for c in guide.chapters]
        for anchor, blocks in groups:
            for block in _code(blocks):
                lang = snippet_language(block.language)
                if wanted and lang != wanted and extension_for(lang) != wanted:
                    continue
                index += 1
                yield Snippet(guide=guide.slug, chapter=anchor, index=index, language=lang, text=block.text, line=block.line)


def write_snippets(bundle: Bundle, out_root: Path, language: str | None = None) -> dict[str, object]:
    rows: list[dict[str, object]] = []
    for snippet in extract_code(bundle, language):
        body = snippet.text + "\n" if snippet.text else ""
        write_text(out_root, Path(snippet.guide) / snippet.filename, body)
        rows.append(snippet.to_dict())
    index = {
        "schema_version": 1,
        "tool": "guidectl",
        "bundle": bundle.title,
        "language": language or "",
        "count": len(rows),
        "snippets": rows,
    }
    write_json(out_root, Path("index.json"), index)
    return index
