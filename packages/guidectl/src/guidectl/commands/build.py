from __future__ import annotations

import argparse
from pathlib import Path

from ..core.context import RunContext
from ..core.fs import write_json, write_text
from ..core.logging import log_event
from ..core.serialize import dumps_json
from ..render import bundle_payload, render_bundle_markdown, render_guide_markdown, render_site
from ._shared import load_workspace, wants_json

TARGETS = ("markdown", "html", "json")


def configure_build_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("build", help="render the bundle into the output directory")
    p.add_argument("--target", choices=[*TARGETS, "all"], default="all", help="output to produce")
    p.add_argument("--json", action="store_true", help="emit JSON output")


def run_build_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    config, bundle = load_workspace(ctx)
    out_root = config.out_dir
    targets = TARGETS if ns.target == "all" else (ns.target,)
    written: list[str] = []
    if "markdown" in targets:
        for guide in bundle.guides:
            written.append(write_text(out_root, Path("markdown/guides") / f"{guide.slug}.md", render_guide_markdown(guide, config.toc_depth)))
        written.append(write_text(out_root, Path("markdown/all.md"), render_bundle_markdown(bundle, config.toc_depth)))
    if "html" in targets:
        for rel, page in render_site(bundle, config.toc_depth).items():
            written.append(write_text(out_root, Path("html") / rel, page))
    if "json" in targets:
        written.append(write_json(out_root, Path("bundle.json"), bundle_payload(bundle, config.toc_depth)))
    files = sorted(path.relative_to(out_root).as_posix() for path in written)
    log_event(ctx, "info", "build", "written", targets=",".join(targets), files=len(files), out_dir=out_root)
    if wants_json(ctx, ns):
        print(
            dumps_json(
                {
                    "schema_version": 1,
                    "tool": "guidectl",
                    "status": "ok",
                    "run_id": ctx.run_id,
                    "targets": list(targets),
                    "out_dir": str(out_root),
                    "files": files,
                }
            )
        )
    else:
        print(f"build: wrote {len(files)} files to {out_root}")
    return 0
