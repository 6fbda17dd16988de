from __future__ import annotations

from fnmatch import fnmatch
from pathlib import Path

from ..config import BundleConfig
from ..core.context import RunContext
from ..core.errors import ScriptError
from ..core.exit_codes import ERR_CONFIG, ERR_DOCS
from ..core.logging import log_event
from ..core.paths import is_within
from ..model import Bundle, Guide
from ..parse import parse_guide_file

ORPHAN_ALLOW = frozenset({"README.md", "CHANGELOG.md"})


def _excluded(rel: str, path: Path, config: BundleConfig) -> bool:
    if any(part.startswith(".") for part in Path(rel).parts):
        return True
    if is_within(path, config.out_dir):
        return True
    return any(fnmatch(rel, pattern) for pattern in config.exclude)


def discover_guides(config: BundleConfig) -> list[str]:
    """Markdown files under the source directory, sorted by relative path."""
    found: list[str] = []
    for path in sorted(config.source_dir.rglob("*.md")):
        if not path.is_file():
            continue
        rel = path.relative_to(config.source_dir).as_posix()
        if _excluded(rel, path, config):
            continue
        found.append(rel)
    return found


def _manifest_sources(config: BundleConfig) -> list[tuple[str, str | None]]:
    rows: list[tuple[str, str | None]] = []
    for entry in config.guides:
        path = (config.source_dir / entry.path).resolve()
        if not is_within(path, config.source_dir):
            raise ScriptError(f"guide path escapes source directory: {entry.path}", ERR_CONFIG, kind="config_invalid")
        if not path.is_file():
            raise ScriptError(f"guide listed in manifest not found: {entry.path}", ERR_DOCS, kind="guide_missing")
        rows.append((path.relative_to(config.source_dir.resolve()).as_posix(), entry.title))
    return rows


def load_bundle(config: BundleConfig, ctx: RunContext | None = None) -> Bundle:
    discovered = discover_guides(config)
    if config.explicit_guides:
        sources = _manifest_sources(config)
        listed = {rel for rel, _ in sources}
        orphans = tuple(rel for rel in discovered if rel not in listed and Path(rel).name not in ORPHAN_ALLOW)
    else:
        sources = [(rel, None) for rel in discovered]
        orphans = ()

    guides: list[Guide] = []
    seen: dict[str, str] = {}
    for rel, title in sources:
        guide = parse_guide_file(config.source_dir / rel, config.source_dir, config.chapter_level, title)
        if guide.slug in seen:
            raise ScriptError(
                f"guides `{seen[guide.slug]}` and `{rel}` map to the same slug `{guide.slug}`",
                ERR_CONFIG,
                kind="duplicate_slug",
            )
        seen[guide.slug] = rel
        guides.append(guide)
        if ctx is not None:
            for issue in guide.issues:
                log_event(ctx, "warn", "parse", "issue", source=issue.source, line=issue.line, code=issue.code)

    bundle = Bundle(title=config.title, root=config.source_dir, guides=tuple(guides), orphans=orphans)
    if ctx is not None:
        log_event(ctx, "debug", "bundle", "loaded", guides=len(bundle.guides), orphans=len(orphans))
    return bundle


def find_guide(bundle: Bundle, key: str) -> Guide:
    guide = bundle.guide(key) or bundle.guide(key if key.endswith(".md") else f"{key}.md")
    if guide is None:
        known = ", ".join(g.slug for g in bundle.guides) or "<none>"
        raise ScriptError(f"unknown guide `{key}` (known: {known})", ERR_DOCS, kind="guide_missing")
    return guide
