"""Markdown guide parser.

Splits a guide into an intro and ordered chapters at ATX headings of level
``<= chapter_level``. Deeper headings stay inside their chapter as heading
blocks. Text-processing failures are recorded as issues and skipped rather
than raised, so one malformed line never hides the rest of a guide.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from ..core.errors import ScriptError
from ..core.exit_codes import ERR_DOCS
from ..model import Block, Chapter, Guide, Issue
from .slugs import AnchorRegistry, slugify

TOC_START = "<!-- toc -->"
TOC_END = "<!-- /toc -->"

_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
_CLOSING_RE = re.compile(r"(?:^|[ \t]+)#+$")
_MALFORMED_RE = re.compile(r"^ {0,3}#{1,6}[^#\s]")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
_FENCE_CLOSE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})[ \t]*$")


def guide_slug(source: str) -> str:
    stem = source[:-3] if source.endswith(".md") else source
    return slugify(stem.replace("/", "-"))


def _title_from_slug(slug: str) -> str:
    return slug.replace("-", " ").replace("_", " ").strip().title() or "Untitled"


def _fence_open(line: str) -> re.Match[str] | None:
    fence = _FENCE_RE.match(line)
    if fence and not (fence.group(1)[0] == "`" and "`" in fence.group(2)):
        return fence
    return None


def _find_toc_end(lines: list[str], start: int) -> int | None:
    """Index of the toc end marker, looking only outside fenced code."""
    idx = start
    while idx < len(lines):
        if lines[idx].strip() == TOC_END:
            return idx
        fence = _fence_open(lines[idx])
        if fence:
            _, end = _collect_fence(lines, idx + 1, fence.group(1))
            if end is None:
                return None
            idx = end
        idx += 1
    return None


def _collect_fence(lines: list[str], start: int, marker: str) -> tuple[list[str], int | None]:
    for idx in range(start, len(lines)):
        close = _FENCE_CLOSE_RE.match(lines[idx])
        if close and close.group(1)[0] == marker[0] and len(close.group(1)) >= len(marker):
            return lines[start:idx], idx
    return lines[start:], None


def _front_matter(lines: list[str], source: str, issues: list[Issue]) -> tuple[dict[str, Any], int]:
    if not lines or lines[0].strip() != "---":
        return {}, 0
    end = None
    for idx in range(1, len(lines)):
        if lines[idx].strip() in ("---", "..."):
            end = idx
            break
    if end is None:
        return {}, 0
    raw = "\n".join(lines[1:end])
    try:
        data = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as exc:
        issues.append(Issue(source, 1, "front-matter", f"invalid YAML front matter ({exc.__class__.__name__})"))
        return {}, 0
    if not isinstance(data, dict):
        issues.append(Issue(source, 1, "front-matter", "front matter must be a mapping"))
        return {}, 0
    return data, end + 1


class _GuideParser:
    def __init__(self, source: str, chapter_level: int) -> None:
        self.source = source
        self.chapter_level = chapter_level
        self.issues: list[Issue] = []
        self.title: str | None = None
        self.intro: list[dict[str, Any]] = []
        self.chapters: list[dict[str, Any]] = []
        self._prose: list[tuple[int, str]] = []

    def _target(self) -> list[dict[str, Any]]:
        return self.chapters[-1]["blocks"] if self.chapters else self.intro

    def _issue(self, line: int, code: str, message: str) -> None:
        self.issues.append(Issue(self.source, line, code, message))

    def _flush_prose(self) -> None:
        rows, self._prose = self._prose, []
        while rows and not rows[0][1].strip():
            rows.pop(0)
        while rows and not rows[-1][1].strip():
            rows.pop()
        if rows:
            self._target().append({"kind": "prose", "line": rows[0][0], "text": "\n".join(text for _, text in rows)})

    def _heading(self, level: int, text: str, line: int) -> None:
        if level == 1 and self.title is None and not self.chapters:
            self.title = text
            return
        if level <= self.chapter_level:
            self.chapters.append({"title": text, "level": level, "line": line, "blocks": []})
            return
        self._target().append({"kind": "heading", "line": line, "text": text, "level": level})

    def feed(self, lines: list[str], offset: int) -> None:
        idx = 0
        while idx < len(lines):
            line = lines[idx]
            lineno = offset + idx + 1
            if line.strip() == TOC_START:
                end = _find_toc_end(lines, idx + 1)
                if end is None:
                    self._issue(lineno, "toc-marker", "toc start marker without matching end marker")
                    idx += 1
                    continue
                self._flush_prose()
                idx = end + 1
                continue
            fence = _fence_open(line)
            if fence:
                self._flush_prose()
                marker = fence.group(1)
                body, end = _collect_fence(lines, idx + 1, marker)
                if end is None:
                    self._issue(lineno, "unterminated-fence", f"code fence `{marker}` is never closed")
                    idx = len(lines)
                else:
                    idx = end + 1
                self._target().append(
                    {"kind": "code", "line": lineno, "text": "\n".join(body), "language": fence.group(2).strip(), "fence": marker}
                )
                continue
            heading = _HEADING_RE.match(line)
            if heading:
                self._flush_prose()
                text = _CLOSING_RE.sub("", heading.group(2) or "").strip()
                if text:
                    self._heading(len(heading.group(1)), text, lineno)
                else:
                    self._issue(lineno, "heading-empty", "empty heading skipped")
                idx += 1
                continue
            if _MALFORMED_RE.match(line):
                self._issue(lineno, "heading-format", f"missing space after `#` in `{line.strip()[:48]}`")
            self._prose.append((lineno, line))
            idx += 1
        self._flush_prose()

    def build(self, slug: str, title: str | None, meta: dict[str, Any], path: Path | None) -> Guide:
        resolved_title = title or self.title or (str(meta["title"]) if meta.get("title") else _title_from_slug(slug))
        registry = AnchorRegistry()
        registry.claim(resolved_title)
        intro = tuple(_block(row, registry) for row in self.intro)
        chapters: list[Chapter] = []
        for row in self.chapters:
            anchor = registry.claim(row["title"])
            blocks = tuple(_block(b, registry) for b in row["blocks"])
            chapters.append(Chapter(title=row["title"], level=row["level"], anchor=anchor, line=row["line"], blocks=blocks))
        return Guide(
            slug=slug,
            title=resolved_title,
            source=self.source,
            chapters=tuple(chapters),
            intro=intro,
            meta=meta,
            issues=tuple(self.issues),
            path=path,
        )


def _block(row: dict[str, Any], registry: AnchorRegistry) -> Block:
    return Block(
        kind=row["kind"],
        text=row["text"],
        line=row["line"],
        language=row.get("language", ""),
        fence=row.get("fence", ""),
        level=row.get("level", 0),
        anchor=registry.claim(row["text"]) if row["kind"] == "heading" else "",
    )


def parse_guide(
    text: str,
    source: str,
    chapter_level: int = 2,
    title: str | None = None,
    path: Path | None = None,
) -> Guide:
    if not 2 <= chapter_level <= 6:
        raise ValueError(f"chapter_level must be within 2..6, got {chapter_level}")
    lines = text.splitlines()
    parser = _GuideParser(source, chapter_level)
    meta, start = _front_matter(lines, source, parser.issues)
    parser.feed(lines[start:], start)
    return parser.build(guide_slug(source), title, meta, path)


def parse_guide_file(path: Path, source_root: Path, chapter_level: int = 2, title: str | None = None) -> Guide:
    source = path.resolve().relative_to(source_root.resolve()).as_posix()
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ScriptError(f"{source}: guide is not valid UTF-8 ({exc.reason})", ERR_DOCS, kind="guide_encoding") from exc
    return parse_guide(text, source, chapter_level=chapter_level, title=title, path=path)
