from __future__ import annotations

import argparse
import difflib

from ..core.context import RunContext
from ..core.fs import write_text
from ..core.logging import log_event
from ..core.serialize import dumps_json
from ..render import render_guide_markdown
from ._shared import load_workspace, wants_json


def configure_fmt_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("fmt", help="report (or rewrite) guides that differ from canonical markdown")
    p.add_argument("--write", action="store_true", help="rewrite guide sources in place")
    p.add_argument("--diff", action="store_true", help="print a unified diff for each changed guide")
    p.add_argument("--json", action="store_true", help="emit JSON output")


def run_fmt_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    config, bundle = load_workspace(ctx)
    changed: list[str] = []
    skipped: list[str] = []
    reasons: dict[str, str] = {}
    rewritten: list[str] = []
    for guide in bundle.guides:
        if guide.path is None:
            skipped.append(guide.source)
            reasons[guide.source] = "no source file"
            log_event(ctx, "warn", "fmt", "skipped", source=guide.source, reason="no source file")
            continue
        current = guide.path.read_text(encoding="utf-8-sig")
        canonical = render_guide_markdown(guide, config.toc_depth)
        if current == canonical:
            continue
        if guide.issues:
            # Rewriting would drop or reshape the lines the parser complained about.
            skipped.append(guide.source)
            log_event(ctx, "warn", "fmt", "skipped", source=guide.source, issues=len(guide.issues))
            continue
        changed.append(guide.source)
        if ns.diff and not wants_json(ctx, ns):
            diff = difflib.unified_diff(
                current.splitlines(keepends=True),
                canonical.splitlines(keepends=True),
                fromfile=f"a/{guide.source}",
                tofile=f"b/{guide.source}",
            )
            print("".join(diff), end="")
        if ns.write:
            write_text(config.source_dir, guide.path, canonical)
            rewritten.append(guide.source)
            log_event(ctx, "info", "fmt", "rewritten", source=guide.source)

    pending = [src for src in changed if src not in rewritten]
    status = "ok" if not pending and not skipped else "fail"
    if wants_json(ctx, ns):
        print(
            dumps_json(
                {
                    "schema_version": 1,
                    "tool": "guidectl",
                    "status": status,
                    "run_id": ctx.run_id,
                    "changed": changed,
                    "rewritten": rewritten,
                    "skipped": skipped,
                }
            )
        )
    else:
        for src in pending:
            print(f"would reformat {src}")
        for src in rewritten:
            print(f"reformatted {src}")
        for src in skipped:
            reason = reasons.get(src, "parse issues; run `guidectl check --select parse/clean`")
            print(f"skipped {src} ({reason})")
        if status == "ok" and not rewritten:
            print(f"fmt: {len(bundle.guides)} guides already canonical")
    return 0 if status == "ok" else 1
