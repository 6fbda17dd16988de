from __future__ import annotations

from pathlib import Path

MANIFEST_NAME = "guidectl.yml"


def find_bundle_root(start: Path | None = None) -> Path:
    cur = (start or Path.cwd()).resolve()
    if cur.is_file():
        cur = cur.parent
    probe = cur
    while True:
        if (probe / MANIFEST_NAME).is_file():
            return probe
        if probe.parent == probe:
            return cur
        probe = probe.parent


def resolve_under(root: Path, configured: str | Path) -> Path:
    raw = Path(configured)
    return (root / raw).resolve() if not raw.is_absolute() else raw.resolve()


def is_within(path: Path, root: Path) -> bool:
    resolved = path.resolve()
    base = root.resolve()
    return resolved == base or base in resolved.parents
