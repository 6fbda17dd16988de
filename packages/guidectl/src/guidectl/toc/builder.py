from __future__ import annotations

from typing import Any, Iterable

from ..model import Guide, TocEntry
from ..parse import TOC_END, TOC_START, plain_title


def nest(rows: Iterable[tuple[int, str, str]]) -> tuple[TocEntry, ...]:
    """Nest flat ``(level, title, anchor)`` rows under the closest shallower row."""
    root: list[dict[str, Any]] = []
    stack: list[dict[str, Any]] = []
    for level, title, anchor in rows:
        node: dict[str, Any] = {"level": level, "title": title, "anchor": anchor, "children": []}
        while stack and stack[-1]["level"] >= level:
            stack.pop()
        (stack[-1]["children"] if stack else root).append(node)
        stack.append(node)
    return tuple(_freeze(node) for node in root)


def _freeze(node: dict[str, Any]) -> TocEntry:
    return TocEntry(
        level=node["level"],
        title=node["title"],
        anchor=node["anchor"],
        children=tuple(_freeze(child) for child in node["children"]),
    )


def build_toc(guide: Guide, depth: int = 3) -> tuple[TocEntry, ...]:
    return nest((level, title, anchor) for level, title, anchor, _ in guide.headings() if level <= depth)


def flatten(entries: Iterable[TocEntry]) -> list[TocEntry]:
    out: list[TocEntry] = []
    for entry in entries:
        out.append(entry)
        out.extend(flatten(entry.children))
    return out


def _link_text(title: str) -> str:
    return plain_title(title).replace("[", "\\[").replace("]", "\\]")


def render_toc_markdown(entries: Iterable[TocEntry]) -> str:
    body: list[str] = []

    def walk(items: Iterable[TocEntry], depth: int) -> None:
        for entry in items:
            body.append(f"{'  ' * depth}- [{_link_text(entry.title)}](#{entry.anchor})")
            walk(entry.children, depth + 1)

    walk(entries, 0)
    if not body:
        return ""
    return "\n".join([TOC_START, *body, TOC_END])


def toc_payload(entries: Iterable[TocEntry]) -> list[dict[str, object]]:
    return [entry.to_dict() for entry in entries]
