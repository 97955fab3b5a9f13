"""
=============================================================================
MODULE NAME: calc_types.py
=============================================================================

INPUT FILES:
- None (value types only).

OUTPUT FILES:
- None; instances are serialized to JSON by the client and the web layer.

NOTES:
- Operators travel on the wire by name ("add", "subtract", ...); the enum
  values are those names so they can be sent as-is.
- A CalculationResult is either a value or a classified failure, never both.
=============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class OperatorKind(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> "OperatorKind":
        """Map a keyboard symbol ('+', '-', '*', '/') to its operator."""
        for op, sym in _SYMBOLS.items():
            if sym == symbol:
                return op
        raise ValueError(f"Unknown operator symbol: {symbol!r}")


_SYMBOLS = {
    OperatorKind.ADD: "+",
    OperatorKind.SUBTRACT: "-",
    OperatorKind.MULTIPLY: "*",
    OperatorKind.DIVIDE: "/",
}


class FailureKind(str, Enum):
    """Why a remote calculation did not produce a value."""

    COMPUTATION_REJECTED = "computation_rejected"
    SERVICE_UNAVAILABLE = "service_unavailable"
    TRANSPORT_ERROR = "transport_error"


@dataclass(slots=True, frozen=True)
class CalculationRequest:
    a: float
    b: float
    operator: OperatorKind

    def to_payload(self) -> Dict[str, object]:
        return {"a": self.a, "b": self.b, "operation": self.operator.value}


@dataclass(slots=True, frozen=True)
class CalculationResult:
    """Outcome of one remote calculation."""

    value: Optional[float] = None
    failure_kind: Optional[FailureKind] = None
    message: str = ""

    @classmethod
    def success(cls, value: float) -> "CalculationResult":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: FailureKind, message: str) -> "CalculationResult":
        return cls(failure_kind=kind, message=message)

    @property
    def ok(self) -> bool:
        return self.failure_kind is None


@dataclass(slots=True, frozen=True)
class ConnectivityStatus:
    """Connectivity indicator shown next to the display."""

    ok: bool
    message: str


__all__ = [
    "OperatorKind",
    "FailureKind",
    "CalculationRequest",
    "CalculationResult",
    "ConnectivityStatus",
]
