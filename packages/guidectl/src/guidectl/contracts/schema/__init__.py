from __future__ import annotations

from .validate import load_catalog, schema_path, validate, validate_file

__all__ = ["load_catalog", "schema_path", "validate", "validate_file"]
