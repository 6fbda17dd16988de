from __future__ import annotations

import argparse

from ..core.context import RunContext
from ..core.serialize import dumps_json
from ._shared import load_workspace, wants_json


def configure_list_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("list", help="list guides in bundle order")
    p.add_argument("--json", action="store_true", help="emit JSON output")


def run_list_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    _, bundle = load_workspace(ctx)
    rows = [
        {
            "slug": guide.slug,
            "title": guide.title,
            "source": guide.source,
            "chapters": len(guide.chapters),
            "code_blocks": sum(b.kind == "code" for b in guide.intro) + sum(len(c.code_blocks) for c in guide.chapters),
            "issues": len(guide.issues),
        }
        for guide in bundle.guides
    ]
    if wants_json(ctx, ns):
        payload = {
            "schema_version": 1,
            "tool": "guidectl",
            "status": "ok",
            "run_id": ctx.run_id,
            "title": bundle.title,
            "guides": rows,
            "orphans": list(bundle.orphans),
        }
        print(dumps_json(payload))
        return 0
    print(bundle.title)
    for row in rows:
        print(f"  {row['slug']:<20} {row['chapters']:>3} chapters  {row['source']}  {row['title']}")
    for rel in bundle.orphans:
        print(f"  orphan: {rel}")
    return 0
