from __future__ import annotations

import argparse
import json
import sys

from .. import __version__
from ..commands.build import configure_build_parser, run_build_command
from ..commands.check import configure_check_parser, run_check_command
from ..commands.config import configure_config_parser, run_config_command
from ..commands.extract import configure_extract_parser, run_extract_command
from ..commands.fmt import configure_fmt_parser, run_fmt_command
from ..commands.listing import configure_list_parser, run_list_command
from ..commands.toc import configure_toc_parser, run_toc_command
from ..contracts.schema import load_catalog, validate_file
from ..core.context import RunContext
from ..core.errors import ScriptError
from ..core.exit_codes import ERR_INTERNAL, ERR_USAGE, ERR_VALIDATION
from ..core.logging import log_event
from .output import build_base_payload, emit, render_error, resolve_output_format

COMMANDS = {
    "build": run_build_command,
    "check": run_check_command,
    "config": run_config_command,
    "extract-code": run_extract_command,
    "fmt": run_fmt_command,
    "list": run_list_command,
    "toc": run_toc_command,
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="guidectl", description="aggregate, render and check documentation guide bundles")
    p.add_argument("--version", action="version", version=f"guidectl {__version__}")
    p.add_argument("--root", help="bundle root (default: nearest directory holding guidectl.yml)")
    p.add_argument("--config", help="manifest path relative to the bundle root")
    p.add_argument("--run-id", help="run identifier for logs and reports")
    p.add_argument("--out-dir", help="output directory (overrides the manifest)")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--log-json", action="store_true", help="write log events as JSON lines")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable debug log events")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    version_p = sub.add_parser("version", help="print version information")
    version_p.add_argument("--json", action="store_true", help="emit JSON output")
    configure_config_parser(sub)
    configure_list_parser(sub)
    configure_toc_parser(sub)
    configure_build_parser(sub)
    configure_check_parser(sub)
    configure_fmt_parser(sub)
    configure_extract_parser(sub)

    val_p = sub.add_parser("validate-output", help="validate a JSON file against a packaged schema")
    val_p.add_argument("--schema", required=True, choices=sorted(load_catalog()))
    val_p.add_argument("--file", required=True)
    val_p.add_argument("--json", action="store_true", help="emit JSON output")
    return p


def _validate_output(ctx: RunContext, ns: argparse.Namespace, as_json: bool) -> int:
    try:
        validate_file(ns.schema, ns.file)
    except FileNotFoundError as exc:
        raise ScriptError(f"file not found: {ns.file}", ERR_VALIDATION, kind="file_missing") from exc
    except json.JSONDecodeError as exc:
        raise ScriptError(f"{ns.file}: invalid JSON ({exc.msg} at line {exc.lineno})", ERR_VALIDATION, kind="invalid_json") from exc
    payload = {**build_base_payload(ctx), "schema": ns.schema, "file": ns.file}
    if as_json:
        emit(payload, True)
    else:
        print(f"validate-output: {ns.file} matches {ns.schema}")
    return 0


def main(argv: list[str] | None = None) -> int:
    raw_argv = argv if argv is not None else sys.argv[1:]
    p = build_parser()
    ns = p.parse_args(raw_argv)
    cli_json = "--json" in raw_argv
    if ns.format and cli_json and ns.format != "json":
        print(render_error(as_json=False, message="conflicting output flags: use either --format json or --json", code=ERR_USAGE), file=sys.stderr)
        return ERR_USAGE
    fmt = resolve_output_format(cli_json=cli_json, cli_format=ns.format)
    ctx = RunContext.from_args(
        ns.run_id,
        ns.root,
        ns.config,
        ns.out_dir,
        fmt,
        ns.verbose,
        ns.quiet,
        ns.log_json,
    )
    as_json = ctx.output_format == "json" or bool(getattr(ns, "json", False))
    try:
        log_event(ctx, "debug", "cli", "start", cmd=ns.cmd, fmt=ctx.output_format, root=ctx.bundle_root)
        if ns.cmd == "version":
            if as_json:
                emit({**build_base_payload(ctx), "guidectl_version": __version__}, True)
            else:
                print(f"guidectl {__version__}")
            return 0
        if ns.cmd == "validate-output":
            return _validate_output(ctx, ns, as_json)
        return COMMANDS[ns.cmd](ctx, ns)
    except ScriptError as exc:
        print(render_error(as_json=as_json, message=str(exc), code=exc.code, kind=exc.kind), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        log_event(ctx, "error", "cli", "crash", cmd=ns.cmd, error=exc.__class__.__name__)
        print(render_error(as_json=as_json, message=f"internal error: {exc}", code=ERR_INTERNAL, kind="internal"), file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
