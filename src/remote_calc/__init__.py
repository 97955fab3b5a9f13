"""Calculator UI state machine backed by a remote calculation service."""

from .calc_types import (
    CalculationRequest,
    CalculationResult,
    ConnectivityStatus,
    FailureKind,
    OperatorKind,
)
from .client import CalculationClient
from .state_machine import CalculatorState, InputStateMachine

__all__ = [
    "CalculationClient",
    "CalculationRequest",
    "CalculationResult",
    "CalculatorState",
    "ConnectivityStatus",
    "FailureKind",
    "InputStateMachine",
    "OperatorKind",
]
