from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

from ..config import BundleConfig
from ..model import Bundle, Guide
from ..parse import TOC_END, TOC_START, parse_guide, plain_title, slugify
from ..render.links import guide_blocks, is_external, prose_links, resolve_guide_link
from ..render.markdown_out import combined_anchors, render_bundle_markdown, render_guide_markdown
from ..toc import build_toc, flatten

_TOC_LINK_RE = re.compile(r"\]\(#([^)\s]+)\)")
_PLACEHOLDER_RE = re.compile(r"\b(TODO|TBD|FIXME)\b", re.IGNORECASE)


def _result(errors: list[str]) -> tuple[int, list[str]]:
    return (0 if not errors else 1), errors


def _toc_links(text: str) -> list[str]:
    lines = text.splitlines()
    try:
        start = lines.index(TOC_START)
        end = lines.index(TOC_END, start)
    except ValueError:
        return []
    return [m for line in lines[start + 1 : end] for m in _TOC_LINK_RE.findall(line)]


def _guide_anchors(guide: Guide) -> set[str]:
    return {slugify(guide.title), *guide.anchors()}


def check_parse_clean(bundle: Bundle, config: BundleConfig) -> tuple[int, list[str]]:
    return _result([str(issue) for issue in bundle.issues])


def check_headings_unique(bundle: Bundle, config: BundleConfig) -> tuple[int, list[str]]:
    errors: list[str] = []
    for guide in bundle.guides:
        seen: dict[str, int] = {plain_title(guide.title).lower(): 0}
        for _, title, _, line in guide.headings():
            key = plain_title(title).lower()
            if key in seen:
                where = f"line {seen[key]}" if seen[key] else "the guide title"
                errors.append(f"{guide.source}:{line}: duplicate heading `{title}` (same as {where})")
                continue
            seen[key] = line
    return _result(errors)


def check_toc_anchors_resolve(bundle: Bundle, config: BundleConfig) -> tuple[int, list[str]]:
    errors: list[str] = []
    for guide in bundle.guides:
        anchors = set(guide.anchors())
        for entry in flatten(build_toc(guide, config.toc_depth)):
            if entry.anchor not in anchors:
                errors.append(f"{guide.source}: toc entry `{entry.title}` has no heading anchor `#{entry.anchor}`")
        rendered = render_guide_markdown(guide, config.toc_depth)
        reparsed = parse_guide(rendered, guide.source, config.chapter_level)
        rendered_anchors = set(reparsed.anchors())
        for anchor in _toc_links(rendered):
            if anchor not in rendered_anchors:
                errors.append(f"{guide.source}: rendered toc link `#{anchor}` does not resolve")
    combined = render_bundle_markdown(bundle, config.toc_depth)
    resolvable = set(parse_guide(combined, "<combined>", 2).anchors())
    for anchor in _toc_links(combined):
        if anchor not in resolvable:
            errors.append(f"<combined>: toc link `#{anchor}` does not resolve")
    return _result(errors)


def check_toc_order(bundle: Bundle, config: BundleConfig) -> tuple[int, list[str]]:
    errors: list[str] = []
    for guide in bundle.guides:
        lines = [chapter.line for chapter in guide.chapters]
        if lines != sorted(lines):
            errors.append(f"{guide.source}: chapters are not in source order")
        expected = [anchor for level, _, anchor, _ in guide.headings() if level <= config.toc_depth]
        got = [entry.anchor for entry in flatten(build_toc(guide, config.toc_depth))]
        if got != expected:
            errors.append(f"{guide.source}: toc order {got} differs from heading order {expected}")
        reparsed = parse_guide(render_guide_markdown(guide, config.toc_depth), guide.source, config.chapter_level)
        if [c.title for c in reparsed.chapters] != [c.title for c in guide.chapters]:
            errors.append(f"{guide.source}: rendered chapter order differs from source order")
    combined = parse_guide(render_bundle_markdown(bundle, config.toc_depth), "<combined>", 2)
    mapping = combined_anchors(bundle)
    expected_guides = [mapping[g.slug][""] for g in bundle.guides]
    wanted = set(expected_guides)
    if [c.anchor for c in combined.chapters if c.anchor in wanted] != expected_guides:
        errors.append("<combined>: guide order differs from bundle order")
    return _result(errors)


def _first_difference(left: str, right: str) -> int:
    a, b = left.splitlines(), right.splitlines()
    for idx, (x, y) in enumerate(zip(a, b), start=1):
        if x != y:
            return idx
    return min(len(a), len(b)) + 1


def check_render_idempotent(bundle: Bundle, config: BundleConfig) -> tuple[int, list[str]]:
    errors: list[str] = []
    for guide in bundle.guides:
        once = render_guide_markdown(guide, config.toc_depth)
        twice = render_guide_markdown(parse_guide(once, guide.source, config.chapter_level), config.toc_depth)
        if once != twice:
            errors.append(f"{guide.source}: rendering is not stable (first difference at rendered line {_first_difference(once, twice)})")
    return _result(errors)


def check_links_internal(bundle: Bundle, config: BundleConfig) -> tuple[int, list[str]]:
    errors: list[str] = []
    for guide in bundle.guides:
        base = bundle.root / PurePosixPath(guide.source).parent
        for blocks in guide_blocks(guide):
            for line, href in prose_links(blocks):
                if is_external(href):
                    continue
                resolved = resolve_guide_link(bundle, guide, href)
                if resolved is not None:
                    target, fragment = resolved
                    if fragment and fragment not in _guide_anchors(target):
                        errors.append(f"{guide.source}:{line}: broken anchor `{href}`")
                    continue
                path = href.split("#", 1)[0].split("?", 1)[0]
                if not (base / Path(path)).exists():
                    errors.append(f"{guide.source}:{line}: broken link target `{href}`")
    return _result(errors)


def check_no_orphans(bundle: Bundle, config: BundleConfig) -> tuple[int, list[str]]:
    return _result([f"orphan markdown file not listed in manifest: {rel}" for rel in bundle.orphans])


def check_chapters_non_empty(bundle: Bundle, config: BundleConfig) -> tuple[int, list[str]]:
    errors = [
        f"{guide.source}:{chapter.line}: chapter `{chapter.title}` has no content"
        for guide in bundle.guides
        for chapter in guide.chapters
        if not chapter.blocks
    ]
    return _result(errors)


def _prose_lines(guide: Guide):
    for blocks in guide_blocks(guide):
        for block in blocks:
            if block.kind != "prose":
                continue
            for offset, line in enumerate(block.text.splitlines()):
                yield block.line + offset, line


def check_line_length(bundle: Bundle, config: BundleConfig) -> tuple[int, list[str]]:
    errors: list[str] = []
    for guide in bundle.guides:
        for line_no, line in _prose_lines(guide):
            if len(line) > config.max_line_length and not line.lstrip().startswith("|"):
                errors.append(f"{guide.source}:{line_no}: line length exceeds {config.max_line_length} chars")
    return _result(errors)


def check_no_placeholders(bundle: Bundle, config: BundleConfig) -> tuple[int, list[str]]:
    errors: list[str] = []
    for guide in bundle.guides:
        for line_no, line in _prose_lines(guide):
            match = _PLACEHOLDER_RE.search(line)
            if match:
                errors.append(f"{guide.source}:{line_no}: placeholder `{match.group(1)}` in prose")
    return _result(errors)
