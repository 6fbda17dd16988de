from __future__ import annotations

import socket
from pathlib import Path

import pytest
import yaml
from hypothesis import settings
from hypothesis.database import DirectoryBasedExampleDatabase
from tests.helpers import BundleFactory

_ALLOWED_MARKERS = {"unit", "integration", "slow"}

_ROOT = Path(__file__).resolve().parents[3]
_HYPOTHESIS_DB = _ROOT / "artifacts/guidectl/.hypothesis/examples"
_HYPOTHESIS_DB.parent.mkdir(parents=True, exist_ok=True)
settings.register_profile("guidectl", database=DirectoryBasedExampleDatabase(_HYPOTHESIS_DB))
settings.load_profile("guidectl")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    def _blocked_connect(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked_connect)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("RUN_ID", "GUIDECTL_OUT_DIR", "GUIDECTL_CONFIG"):
        monkeypatch.delenv(name, raising=False)



@pytest.fixture
def make_bundle(tmp_path: Path) -> BundleFactory:
    """Write guide files (and optionally a manifest) into a fresh bundle root."""

    def _make(files: dict[str, str], manifest: dict[str, object] | None = None, name: str = "bundle") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        if manifest is not None:
            (root / "guidectl.yml").write_text(yaml.safe_dump(manifest, sort_keys=False), encoding="utf-8")
        return root

    return _make
