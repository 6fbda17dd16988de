from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..contracts.schema import validate
from ..core.context import RunContext
from ..core.errors import ScriptError
from ..core.exit_codes import ERR_CONFIG
from ..core.paths import resolve_under
from ..core.yaml_utils import load_yaml

DEFAULT_OUT_DIR = "artifacts/guidectl"
DEFAULT_CHAPTER_LEVEL = 2
DEFAULT_TOC_DEPTH = 3
DEFAULT_MAX_LINE_LENGTH = 160


@dataclass(frozen=True)
class GuideEntry:
    path: str
    title: str | None = None


@dataclass(frozen=True)
class BundleConfig:
    title: str
    root: Path
    source_dir: Path
    out_dir: Path
    manifest_path: Path | None = None
    chapter_level: int = DEFAULT_CHAPTER_LEVEL
    toc_depth: int = DEFAULT_TOC_DEPTH
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    guides: tuple[GuideEntry, ...] = ()
    exclude: tuple[str, ...] = field(default_factory=tuple)

    @property
    def explicit_guides(self) -> bool:
        return bool(self.guides)


def _read_manifest(ctx: RunContext) -> dict[str, Any]:
    path = ctx.config_path
    if not path.is_file():
        if ctx.config_explicit:
            raise ScriptError(f"config file not found: {path}", ERR_CONFIG, kind="config_missing")
        return {}
    data = load_yaml(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ScriptError(f"{path}: root must be a mapping", ERR_CONFIG, kind="config_invalid")
    try:
        validate("guidectl.config.v1", data)
    except ScriptError as exc:
        raise ScriptError(f"{path}: {exc}", ERR_CONFIG, kind="config_invalid") from exc
    return data


def _guide_entries(raw: list[Any]) -> tuple[GuideEntry, ...]:
    entries: list[GuideEntry] = []
    seen: set[str] = set()
    for row in raw:
        entry = GuideEntry(path=row) if isinstance(row, str) else GuideEntry(path=row["path"], title=row.get("title"))
        norm = Path(entry.path).as_posix()
        if norm in seen:
            raise ScriptError(f"guide listed twice in manifest: {norm}", ERR_CONFIG, kind="config_invalid")
        seen.add(norm)
        entries.append(entry)
    return tuple(entries)


def load_config(ctx: RunContext) -> BundleConfig:
    data = _read_manifest(ctx)
    root = ctx.bundle_root
    source_dir = resolve_under(root, data.get("source_dir", "."))
    if not source_dir.is_dir():
        raise ScriptError(f"source directory not found: {source_dir}", ERR_CONFIG, kind="config_invalid")
    return BundleConfig(
        title=str(data.get("title") or "Guides"),
        root=root,
        source_dir=source_dir,
        out_dir=resolve_under(root, ctx.out_dir or data.get("out_dir", DEFAULT_OUT_DIR)),
        manifest_path=ctx.config_path if ctx.config_path.is_file() else None,
        chapter_level=int(data.get("chapter_level", DEFAULT_CHAPTER_LEVEL)),
        toc_depth=int(data.get("toc_depth", DEFAULT_TOC_DEPTH)),
        max_line_length=int(data.get("max_line_length", DEFAULT_MAX_LINE_LENGTH)),
        guides=_guide_entries(list(data.get("guides", []))),
        exclude=tuple(data.get("exclude", [])),
    )


def config_payload(config: BundleConfig) -> dict[str, object]:
    return {
        "title": config.title,
        "root": str(config.root),
        "source_dir": str(config.source_dir),
        "out_dir": str(config.out_dir),
        "manifest": str(config.manifest_path) if config.manifest_path else None,
        "chapter_level": config.chapter_level,
        "toc_depth": config.toc_depth,
        "max_line_length": config.max_line_length,
        "guides": [{"path": g.path, "title": g.title} for g in config.guides],
        "exclude": list(config.exclude),
    }
