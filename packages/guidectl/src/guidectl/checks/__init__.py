from __future__ import annotations

from .base import CheckDef, Severity
from .registry import CHECKS, check_ids, domains, select_checks
from .runner import run_checks

__all__ = ["CHECKS", "CheckDef", "Severity", "check_ids", "domains", "run_checks", "select_checks"]
