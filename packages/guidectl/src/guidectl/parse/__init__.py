from __future__ import annotations

from .parser import TOC_END, TOC_START, guide_slug, parse_guide, parse_guide_file
from .slugs import AnchorRegistry, plain_title, slugify

__all__ = [
    "AnchorRegistry",
    "TOC_END",
    "TOC_START",
    "guide_slug",
    "parse_guide",
    "parse_guide_file",
    "plain_title",
    "slugify",
]
