from __future__ import annotations

from .base import CheckDef, Severity
from .integrity import (
    check_chapters_non_empty,
    check_headings_unique,
    check_line_length,
    check_links_internal,
    check_no_orphans,
    check_no_placeholders,
    check_parse_clean,
    check_render_idempotent,
    check_toc_anchors_resolve,
    check_toc_order,
)

CHECKS: tuple[CheckDef, ...] = (
    CheckDef("parse/clean", "parse", "guides parse without heading, fence or front matter issues", 500, check_parse_clean),
    CheckDef("headings/unique", "headings", "headings are unique within a guide", 500, check_headings_unique),
    CheckDef("toc/anchors-resolve", "toc", "every toc entry resolves to a heading anchor", 1500, check_toc_anchors_resolve),
    CheckDef("toc/order", "toc", "toc and rendered chapter order match source order", 1500, check_toc_order),
    CheckDef("render/idempotent", "render", "rendering parsed output reproduces it exactly", 1500, check_render_idempotent),
    CheckDef("links/internal", "links", "anchor, guide and relative file links resolve", 1000, check_links_internal),
    CheckDef("bundle/no-orphans", "bundle", "markdown files are listed in the manifest", 200, check_no_orphans, Severity.WARN),
    CheckDef("chapters/non-empty", "chapters", "every chapter has content", 200, check_chapters_non_empty, Severity.WARN),
    CheckDef("style/line-length", "style", "prose lines stay within max_line_length", 500, check_line_length, Severity.WARN),
    CheckDef("style/no-placeholders", "style", "no TODO/TBD/FIXME markers in prose", 500, check_no_placeholders, Severity.WARN),
)


def domains() -> list[str]:
    return sorted({"all", *{c.domain for c in CHECKS}})


def check_ids() -> list[str]:
    return [c.check_id for c in CHECKS]


def select_checks(domain: str = "all", ids: list[str] | None = None) -> list[CheckDef]:
    selected = [c for c in CHECKS if domain == "all" or c.domain == domain]
    if ids:
        wanted = set(ids)
        selected = [c for c in selected if c.check_id in wanted]
    return selected
