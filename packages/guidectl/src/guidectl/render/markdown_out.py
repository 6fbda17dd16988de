from __future__ import annotations

from typing import Callable, Iterable

from ..core.yaml_utils import dump_yaml
from ..model import Block, Bundle, Guide
from ..parse import AnchorRegistry, slugify
from ..toc import build_toc, nest, render_toc_markdown
from .links import resolve_guide_link, rewrite_links


def _heading(level: int, text: str) -> str:
    return f"{'#' * min(max(level, 1), 6)} {text}"


def _code(block: Block) -> str:
    fence = block.fence or "```"
    body = [block.text] if block.text else []
    return "\n".join([f"{fence}{block.language}", *body, fence])


def render_blocks(
    blocks: Iterable[Block],
    level_shift: int = 0,
    prose: Callable[[str], str] | None = None,
) -> list[str]:
    parts: list[str] = []
    for block in blocks:
        if block.kind == "prose":
            parts.append(prose(block.text) if prose else block.text)
        elif block.kind == "code":
            parts.append(_code(block))
        else:
            parts.append(_heading(block.level + level_shift, block.text))
    return parts


def render_guide_markdown(guide: Guide, toc_depth: int = 3) -> str:
    """Canonical markdown for one guide; parsing the output and rendering again is a no-op."""
    parts: list[str] = []
    if guide.meta:
        parts.append(f"---\n{dump_yaml(guide.meta)}---")
    parts.append(_heading(1, guide.title))
    toc = render_toc_markdown(build_toc(guide, toc_depth))
    if toc:
        parts.append(toc)
    parts.extend(render_blocks(guide.intro))
    for chapter in guide.chapters:
        parts.append(_heading(chapter.level, chapter.title))
        parts.extend(render_blocks(chapter.blocks))
    return "\n\n".join(parts) + "\n"


def combined_anchors(bundle: Bundle) -> dict[str, dict[str, str]]:
    """Per guide slug, map guide-local anchors (and ``""`` for the guide title) to combined-document anchors."""
    registry = AnchorRegistry()
    registry.claim(bundle.title)
    mapping: dict[str, dict[str, str]] = {}
    for guide in bundle.guides:
        local: dict[str, str] = {"": registry.claim(guide.title)}
        for _, title, anchor, _ in guide.headings():
            local[anchor] = registry.claim(title)
        mapping[guide.slug] = local
    return mapping


def combined_rows(bundle: Bundle, anchors: dict[str, dict[str, str]]) -> list[tuple[int, str, str]]:
    rows: list[tuple[int, str, str]] = []
    for guide in bundle.guides:
        local = anchors[guide.slug]
        rows.append((2, guide.title, local[""]))
        for level, title, anchor, _ in guide.headings():
            rows.append((min(level + 1, 6), title, local[anchor]))
    return rows


def combined_link_rewriter(bundle: Bundle, guide: Guide, anchors: dict[str, dict[str, str]]) -> Callable[[str], str | None]:
    def rewrite(href: str) -> str | None:
        resolved = resolve_guide_link(bundle, guide, href)
        if resolved is None:
            return None
        target, fragment = resolved
        if fragment == slugify(target.title):
            fragment = ""
        anchor = anchors[target.slug].get(fragment)
        return f"#{anchor}" if anchor else None

    return rewrite


def render_bundle_markdown(bundle: Bundle, toc_depth: int = 3) -> str:
    """Every guide concatenated under one title, headings shifted one level down."""
    anchors = combined_anchors(bundle)
    rows = [row for row in combined_rows(bundle, anchors) if row[0] <= toc_depth + 1]
    parts: list[str] = [_heading(1, bundle.title)]
    toc = render_toc_markdown(nest(rows))
    if toc:
        parts.append(toc)
    for guide in bundle.guides:
        rewrite = combined_link_rewriter(bundle, guide, anchors)

        def prose(text: str, _rewrite: Callable[[str], str | None] = rewrite) -> str:
            return rewrite_links(text, _rewrite)

        parts.append(_heading(2, guide.title))
        parts.extend(render_blocks(guide.intro, 1, prose))
        for chapter in guide.chapters:
            parts.append(_heading(chapter.level + 1, chapter.title))
            parts.extend(render_blocks(chapter.blocks, 1, prose))
    return "\n\n".join(parts) + "\n"
