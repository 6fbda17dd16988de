from __future__ import annotations

from .snippets import EXTENSIONS, Snippet, extension_for, extract_code, snippet_language, write_snippets

__all__ = ["EXTENSIONS", "Snippet", "extension_for", "extract_code", "snippet_language", "write_snippets"]
