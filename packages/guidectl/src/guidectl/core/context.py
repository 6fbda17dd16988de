from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from .paths import MANIFEST_NAME, find_bundle_root, resolve_under

OutputFormat = Literal["text", "json"]


@dataclass(frozen=True)
class RunContext:
    run_id: str
    bundle_root: Path
    config_path: Path
    out_dir: str | None
    output_format: OutputFormat
    verbose: bool
    quiet: bool
    log_json: bool
    config_explicit: bool = False

    @classmethod
    def from_args(
        cls,
        run_id: str | None,
        root: str | None,
        config: str | None = None,
        out_dir: str | None = None,
        output_format: OutputFormat = "text",
        verbose: bool = False,
        quiet: bool = False,
        log_json: bool = False,
    ) -> "RunContext":
        bundle_root = Path(root).resolve() if root else find_bundle_root()
        default_run = f"guidectl-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}"
        resolved_run_id = run_id or os.environ.get("RUN_ID", default_run)
        config_raw = config or os.environ.get("GUIDECTL_CONFIG") or MANIFEST_NAME
        return cls(
            run_id=resolved_run_id,
            bundle_root=bundle_root,
            config_path=resolve_under(bundle_root, config_raw),
            out_dir=out_dir or os.environ.get("GUIDECTL_OUT_DIR"),
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            log_json=log_json,
            config_explicit=bool(config or os.environ.get("GUIDECTL_CONFIG")),
        )
