from __future__ import annotations

import time

from ..config import BundleConfig
from ..core.context import RunContext
from ..core.logging import log_event
from ..model import Bundle
from .base import CheckDef, Severity


def run_checks(
    bundle: Bundle,
    config: BundleConfig,
    checks: list[CheckDef],
    fail_fast: bool = False,
    ctx: RunContext | None = None,
) -> tuple[int, dict[str, object]]:
    rows: list[dict[str, object]] = []
    failed = 0
    warned = 0
    for chk in checks:
        start = time.perf_counter()
        code, errors = chk.fn(bundle, config)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        if code == 0:
            status = "pass"
        elif chk.severity is Severity.WARN:
            status = "warn"
            warned += 1
        else:
            status = "fail"
            failed += 1
        rows.append(
            {
                "id": chk.check_id,
                "domain": chk.domain,
                "severity": chk.severity.value,
                "status": status,
                "duration_ms": elapsed_ms,
                "budget_ms": chk.budget_ms,
                "budget_status": "pass" if elapsed_ms <= chk.budget_ms else "warn",
                "errors": errors,
            }
        )
        if ctx is not None:
            log_event(ctx, "debug", "checks", "ran", check=chk.check_id, status=status, duration_ms=elapsed_ms)
        if fail_fast and status == "fail":
            break
    payload = {
        "schema_name": "guidectl.check-report.v1",
        "schema_version": 1,
        "tool": "guidectl",
        "kind": "checks-runner",
        "status": "pass" if failed == 0 else "fail",
        "failed_count": failed,
        "warn_count": warned,
        "total_count": len(rows),
        "checks": rows,
    }
    return (0 if failed == 0 else 1), payload
