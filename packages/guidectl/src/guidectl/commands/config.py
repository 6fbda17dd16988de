from __future__ import annotations

import argparse

from ..config import config_payload, load_config
from ..core.context import RunContext
from ..core.serialize import dumps_json
from ..core.yaml_utils import dump_yaml
from ._shared import wants_json


def configure_config_parser(sub: argparse._SubParsersAction) -> None:
    p = sub.add_parser("config", help="inspect the bundle manifest")
    config_sub = p.add_subparsers(dest="config_cmd", required=True)
    dump = config_sub.add_parser("dump", help="print the resolved configuration")
    dump.add_argument("--json", action="store_true", help="emit JSON output")
    check = config_sub.add_parser("validate", help="validate guidectl.yml against its schema")
    check.add_argument("--json", action="store_true", help="emit JSON output")


def run_config_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    config = load_config(ctx)
    as_json = wants_json(ctx, ns)
    if ns.config_cmd == "dump":
        payload = config_payload(config)
        print(dumps_json(payload, pretty=True) if as_json else dump_yaml(payload), end="\n" if as_json else "")
        return 0
    manifest = str(config.manifest_path) if config.manifest_path else "<defaults>"
    if as_json:
        print(dumps_json({"schema_version": 1, "tool": "guidectl", "status": "ok", "run_id": ctx.run_id, "manifest": manifest}))
    else:
        print(f"config: ok ({manifest})")
    return 0
