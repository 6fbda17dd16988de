from __future__ import annotations

import argparse

from ..bundle import find_guide
from ..core.context import RunContext
from ..core.serialize import dumps_json
from ..toc import build_toc, render_toc_markdown, toc_payload
from ._shared import load_workspace, wants_json


def configure_toc_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("toc", help="print the table of contents of one guide")
    p.add_argument("guide", help="guide slug or source path")
    p.add_argument("--depth", type=int, choices=range(1, 7), metavar="1-6", help="override toc_depth")
    p.add_argument("--json", action="store_true", help="emit JSON output")


def run_toc_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    config, bundle = load_workspace(ctx)
    guide = find_guide(bundle, ns.guide)
    entries = build_toc(guide, ns.depth or config.toc_depth)
    if wants_json(ctx, ns):
        print(
            dumps_json(
                {
                    "schema_version": 1,
                    "tool": "guidectl",
                    "status": "ok",
                    "run_id": ctx.run_id,
                    "guide": guide.slug,
                    "title": guide.title,
                    "toc": toc_payload(entries),
                }
            )
        )
        return 0
    print(render_toc_markdown(entries))
    return 0
