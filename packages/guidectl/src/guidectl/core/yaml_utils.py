from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .errors import ScriptError
from .exit_codes import ERR_CONFIG


def load_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ScriptError(f"{path}: invalid YAML: {exc}", ERR_CONFIG, kind="config_parse") from exc


def load_yaml_text(text: str) -> Any:
    return yaml.safe_load(text)


def dump_yaml(payload: Any) -> str:
    return yaml.safe_dump(payload, sort_keys=True, allow_unicode=True, default_flow_style=False)
