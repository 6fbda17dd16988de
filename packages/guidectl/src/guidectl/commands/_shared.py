from __future__ import annotations

from ..bundle import load_bundle
from ..config import BundleConfig, load_config
from ..core.context import RunContext
from ..model import Bundle


def wants_json(ctx: RunContext, ns) -> bool:
    return ctx.output_format == "json" or bool(getattr(ns, "json", False))


def load_workspace(ctx: RunContext) -> tuple[BundleConfig, Bundle]:
    config = load_config(ctx)
    return config, load_bundle(config, ctx)


def print_errors(errors: list[str], prefix: str = "  - ") -> None:
    for err in errors:
        print(f"{prefix}{err}")
