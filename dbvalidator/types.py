from dataclasses import dataclass, field
from typing import Any, Dict, Optional


# =====================
# Tracing / Observability
# =====================


@dataclass(frozen=True)
class ValidationTrace:
    validator: str
    duration_ms: float
    notes: Optional[Dict[str, Any]] = None


# =====================
# Validator-level contract
# =====================


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a single validator call.
    Adapters (CLI/HTTP) should serialize this to dict/JSON at the boundary.
    """

    ok: bool
    value: Any = None

    # message key -> rendered message; empty when ok
    messages: Dict[str, str] = field(default_factory=dict)

    trace: Optional[ValidationTrace] = None
