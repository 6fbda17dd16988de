from __future__ import annotations

import re

_LINK_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_TAG_RE = re.compile(r"<[^>]+>")
_CODE_SPAN_RE = re.compile(r"(`+)(.+?)\1")
_EMPHASIS_RE = re.compile(r"(?<!\w)(_{1,2})(?=\S)(.+?)(?<=\S)\1(?!\w)")
_DROP_RE = re.compile(r"[^\w\- ]")


def _strip_emphasis(text: str) -> str:
    # underscores inside code spans are literal
    parts: list[str] = []
    pos = 0
    for match in _CODE_SPAN_RE.finditer(text):
        parts.append(_EMPHASIS_RE.sub(r"\2", text[pos : match.start()]))
        parts.append(match.group(0))
        pos = match.end()
    parts.append(_EMPHASIS_RE.sub(r"\2", text[pos:]))
    return "".join(parts)


def slugify(text: str) -> str:
    """GitHub-style heading anchor: link text kept, emphasis and punctuation dropped, spaces to hyphens."""
    plain = _LINK_RE.sub(r"\1", text)
    plain = _strip_emphasis(_TAG_RE.sub("", plain))
    slug = _DROP_RE.sub("", plain.strip().lower()).replace(" ", "-")
    return slug or "section"


class AnchorRegistry:
    """Hands out anchors unique within one document, in claim order."""

    def __init__(self) -> None:
        self._used: set[str] = set()
        self._counts: dict[str, int] = {}

    def __contains__(self, anchor: object) -> bool:
        return anchor in self._used

    def claim(self, text: str) -> str:
        base = slugify(text)
        count = self._counts.get(base, 0)
        candidate = base if count == 0 else f"{base}-{count}"
        while candidate in self._used:
            count += 1
            candidate = f"{base}-{count}"
        self._counts[base] = count + 1
        self._used.add(candidate)
        return candidate


def plain_title(text: str) -> str:
    """Heading text with links and tags reduced to their visible text."""
    return _TAG_RE.sub("", _LINK_RE.sub(r"\1", text)).strip()
