from __future__ import annotations

from .builder import build_toc, flatten, nest, render_toc_markdown, toc_payload

__all__ = ["build_toc", "flatten", "nest", "render_toc_markdown", "toc_payload"]
