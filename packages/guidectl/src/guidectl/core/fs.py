from __future__ import annotations

import json
from pathlib import Path

from .errors import ScriptError
from .exit_codes import ERR_ARTIFACT
from .paths import is_within


def ensure_output_path(out_root: Path, path: Path) -> Path:
    resolved = path.resolve() if path.is_absolute() else (out_root / path).resolve()
    if not is_within(resolved, out_root):
        raise ScriptError(f"forbidden write path outside output root: {resolved}", ERR_ARTIFACT, kind="forbidden_write_path")
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved


def write_text(out_root: Path, path: Path, content: str) -> Path:
    out = ensure_output_path(out_root, path)
    with out.open("w", encoding="utf-8", newline="\n") as handle:
        handle.write(content)
    return out


def write_json(out_root: Path, path: Path, payload: object) -> Path:
    return write_text(out_root, path, json.dumps(payload, indent=2, sort_keys=True) + "\n")
