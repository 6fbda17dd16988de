"""CLI payload output helpers."""

from __future__ import annotations

from ..core.context import RunContext
from ..core.serialize import dumps_json


def emit(payload: dict[str, object], as_json: bool) -> None:
    print(dumps_json(payload, pretty=not as_json))


def build_base_payload(ctx: RunContext, status: str = "ok") -> dict[str, object]:
    return {
        "schema_version": 1,
        "tool": "guidectl",
        "status": status,
        "run_id": ctx.run_id,
        "bundle_root": str(ctx.bundle_root),
        "config": str(ctx.config_path),
        "format": ctx.output_format,
    }


def resolve_output_format(*, cli_json: bool, cli_format: str | None) -> str:
    if cli_json:
        return "json"
    return cli_format or "text"


def render_error(*, as_json: bool, message: str, code: int, kind: str = "generic_error") -> str:
    if as_json:
        return dumps_json(
            {
                "schema_name": "guidectl.error.v1",
                "schema_version": 1,
                "tool": "guidectl",
                "status": "error",
                "errors": [{"code": code, "message": message, "kind": kind}],
            },
            pretty=False,
        )
    return f"guidectl: error: {message}"
