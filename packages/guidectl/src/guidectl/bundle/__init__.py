from __future__ import annotations

from .loader import discover_guides, find_guide, load_bundle

__all__ = ["discover_guides", "find_guide", "load_bundle"]
