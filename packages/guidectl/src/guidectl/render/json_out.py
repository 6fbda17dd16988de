from __future__ import annotations

import json

from ..contracts.schema import validate
from ..model import Bundle, Guide
from ..toc import build_toc, toc_payload


def guide_payload(guide: Guide, toc_depth: int = 3) -> dict[str, object]:
    return {
        "slug": guide.slug,
        "title": guide.title,
        "source": guide.source,
        "meta": json.loads(json.dumps(guide.meta, default=str)),
        "intro": [block.to_dict() for block in guide.intro],
        "chapters": [
            {
                "title": chapter.title,
                "anchor": chapter.anchor,
                "level": chapter.level,
                "line": chapter.line,
                "blocks": [block.to_dict() for block in chapter.blocks],
            }
            for chapter in guide.chapters
        ],
        "toc": toc_payload(build_toc(guide, toc_depth)),
        "issues": [
            {"line": issue.line, "code": issue.code, "message": issue.message, "severity": issue.severity}
            for issue in guide.issues
        ],
    }


def bundle_payload(bundle: Bundle, toc_depth: int = 3) -> dict[str, object]:
    payload: dict[str, object] = {
        "schema_name": "guidectl.bundle.v1",
        "schema_version": 1,
        "tool": "guidectl",
        "title": bundle.title,
        "guides": [guide_payload(guide, toc_depth) for guide in bundle.guides],
        "orphans": list(bundle.orphans),
    }
    validate("guidectl.bundle.v1", payload)
    return payload
