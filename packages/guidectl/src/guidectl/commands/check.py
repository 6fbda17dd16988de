from __future__ import annotations

import argparse
from pathlib import Path

from ..checks import CHECKS, domains, run_checks, select_checks
from ..contracts.schema import validate
from ..core.context import RunContext
from ..core.errors import ScriptError
from ..core.exit_codes import ERR_USAGE
from ..core.fs import write_json
from ..core.logging import log_event
from ..core.serialize import dumps_json
from ._shared import load_workspace, print_errors, wants_json


def configure_check_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("check", help="run documentation integrity checks")
    p.add_argument("--select", action="append", default=[], metavar="ID", help="run only this check id (repeatable)")
    p.add_argument("--domain", choices=domains(), default="all", help="run only checks of one domain")
    p.add_argument("--list", action="store_true", help="list registered checks and exit")
    p.add_argument("--fail-fast", action="store_true", help="stop at the first failing check")
    p.add_argument("--out-file", help="write the JSON report under the output directory")
    p.add_argument("--json", action="store_true", help="emit JSON output")


def _list_checks(as_json: bool) -> int:
    rows = [
        {"id": c.check_id, "domain": c.domain, "severity": c.severity.value, "budget_ms": c.budget_ms, "description": c.description}
        for c in CHECKS
    ]
    if as_json:
        print(dumps_json({"schema_version": 1, "tool": "guidectl", "status": "ok", "checks": rows}))
        return 0
    for row in rows:
        print(f"{row['id']:<24} {row['severity']:<5} {row['description']}")
    return 0


def run_check_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    as_json = wants_json(ctx, ns)
    if ns.list:
        return _list_checks(as_json)
    known = {c.check_id for c in CHECKS}
    unknown = sorted(set(ns.select) - known)
    if unknown:
        raise ScriptError(f"unknown check id: {', '.join(unknown)}", ERR_USAGE, kind="unknown_check")
    selected = select_checks(ns.domain, ns.select)
    if not selected:
        raise ScriptError("selection matched no checks", ERR_USAGE, kind="empty_selection")

    config, bundle = load_workspace(ctx)
    code, payload = run_checks(bundle, config, selected, fail_fast=ns.fail_fast, ctx=ctx)
    payload["run_id"] = ctx.run_id
    validate("guidectl.check-report.v1", payload)
    if ns.out_file:
        out = write_json(config.out_dir, Path(ns.out_file), payload)
        log_event(ctx, "info", "check", "report", path=out)
    log_event(ctx, "info", "check", "done", status=payload["status"], failed=payload["failed_count"], warned=payload["warn_count"])

    if as_json:
        print(dumps_json(payload))
        return code
    for row in payload["checks"]:
        print(f"{row['status'].upper():<4} {row['id']} ({row['duration_ms']}ms)")
        print_errors(row["errors"])
    print(
        f"check: {payload['status']} ({payload['failed_count']} failed, "
        f"{payload['warn_count']} warned, {payload['total_count']} run)"
    )
    return code
