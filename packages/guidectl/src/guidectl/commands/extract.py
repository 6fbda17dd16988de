from __future__ import annotations

import argparse

from ..core.context import RunContext
from ..core.logging import log_event
from ..core.serialize import dumps_json
from ..extract import write_snippets
from ._shared import load_workspace, wants_json


def configure_extract_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("extract-code", help="write fenced code blocks to standalone files")
    p.add_argument("--lang", help="only extract blocks of this language (e.g. dart, ts)")
    p.add_argument("--json", action="store_true", help="emit JSON output")


def run_extract_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    config, bundle = load_workspace(ctx)
    out_root = config.out_dir / "snippets"
    index = write_snippets(bundle, out_root, ns.lang)
    log_event(ctx, "info", "extract", "written", count=index["count"], out_dir=out_root)
    if wants_json(ctx, ns):
        print(dumps_json({"status": "ok", "run_id": ctx.run_id, "out_dir": str(out_root), **index}))
    else:
        print(f"extract-code: wrote {index['count']} snippets to {out_root}")
    return 0
