from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ..config import BundleConfig
from ..model import Bundle

CheckFunc = Callable[[Bundle, BundleConfig], tuple[int, list[str]]]


class Severity(str, Enum):
    ERROR = "error"
    WARN = "warn"


@dataclass(frozen=True)
class CheckDef:
    check_id: str
    domain: str
    description: str
    budget_ms: int
    fn: CheckFunc
    severity: Severity = Severity.ERROR
