"""Renderers for guide bundles: canonical markdown, static HTML and JSON."""

from __future__ import annotations

from .html_out import render_site
from .json_out import bundle_payload, guide_payload
from .markdown_out import combined_anchors, render_bundle_markdown, render_guide_markdown

__all__ = [
    "bundle_payload",
    "combined_anchors",
    "guide_payload",
    "render_bundle_markdown",
    "render_guide_markdown",
    "render_site",
]
