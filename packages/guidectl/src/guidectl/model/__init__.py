from __future__ import annotations

from .models import Block, Bundle, Chapter, Guide, Issue, TocEntry

__all__ = ["Block", "Bundle", "Chapter", "Guide", "Issue", "TocEntry"]
