from __future__ import annotations

import json

import pytest
from guidectl.contracts.schema import load_catalog, schema_path, validate
from guidectl.core.errors import ScriptError
from guidectl.core.exit_codes import ERR_VALIDATION
from jsonschema import Draft202012Validator


def test_catalog_entries_point_at_valid_schemas() -> None:
    catalog = load_catalog()
    assert set(catalog) == {"guidectl.config.v1", "guidectl.bundle.v1", "guidectl.check-report.v1", "guidectl.error.v1"}
    for name in catalog:
        schema = json.loads(schema_path(name).read_text(encoding="utf-8"))
        Draft202012Validator.check_schema(schema)


def test_unknown_schema_is_a_validation_error() -> None:
    with pytest.raises(ScriptError) as err:
        validate("guidectl.nope.v1", {})
    assert err.value.code == ERR_VALIDATION
    assert err.value.kind == "unknown_schema"


def test_error_payload_requires_kind() -> None:
    payload = {
        "schema_name": "guidectl.error.v1",
        "schema_version": 1,
        "tool": "guidectl",
        "status": "error",
        "errors": [{"code": 12, "message": "unknown guide"}],
    }
    with pytest.raises(ScriptError) as err:
        validate("guidectl.error.v1", payload)
    assert "errors/0" in str(err.value)


def test_config_schema_accepts_mixed_guide_entries() -> None:
    validate("guidectl.config.v1", {"title": "X", "guides": ["a.md", {"path": "b.md", "title": "B"}]})
