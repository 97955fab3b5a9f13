"""
Calculator input state machine.

Turns a stream of button and keyboard events into display state:
- Digit and decimal point entry
- Operator selection with eager evaluation of chained operations
- Equals, clear, and keyboard mapping
- Recovery to a usable state when the remote calculation fails

Arithmetic is never done here; it is delegated to a CalculationClient.
Remote calls are not serialized: if two overlap, whichever response arrives
last writes the state.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .calc_types import CalculationResult, ConnectivityStatus, OperatorKind
from .client import CalculationClient

logger = logging.getLogger(__name__)

ERROR_TEXT = "Error"

OPERATOR_KEYS = {"+", "-", "*", "/"}
EVALUATE_KEYS = {"Enter", "="}
CLEAR_KEYS = {"Escape", "c", "C"}


@dataclass(slots=True)
class CalculatorState:
    """Interaction state; pending_operator being None means idle."""

    current_entry: str = "0"
    pending_operand: Optional[float] = None
    pending_operator: Optional[OperatorKind] = None
    awaiting_fresh_entry: bool = False

    def reset(self):
        self.current_entry = "0"
        self.pending_operand = None
        self.pending_operator = None
        self.awaiting_fresh_entry = False


class InputStateMachine:
    """Calculator controller managing state and remote operations."""

    def __init__(
        self,
        client: CalculationClient,
        state: Optional[CalculatorState] = None,
        on_display: Optional[Callable[[str], None]] = None,
    ):
        self.client = client
        self.state = state if state is not None else CalculatorState()
        self.status = ConnectivityStatus(True, "")
        self._on_display = on_display

    @property
    def display(self) -> str:
        return self.state.current_entry

    def input_digit(self, digit: str):
        """
        Add a digit to the current entry.

        Args:
            digit: Single digit character (0-9)

        Raises:
            ValueError: If digit is not a single decimal digit
        """
        if not isinstance(digit, str) or len(digit) != 1 or digit not in "0123456789":
            raise ValueError(f"Not a digit: {digit!r}")

        state = self.state
        if state.awaiting_fresh_entry or state.current_entry in ("0", ERROR_TEXT):
            state.current_entry = digit
            state.awaiting_fresh_entry = False
        else:
            state.current_entry += digit

        self._refresh_display()

    def input_decimal_point(self):
        """Add a decimal point to the current entry; a second one is ignored."""
        state = self.state
        if state.awaiting_fresh_entry or state.current_entry == ERROR_TEXT:
            state.current_entry = "0."
            state.awaiting_fresh_entry = False
        elif "." not in state.current_entry:
            state.current_entry += "."

        self._refresh_display()

    async def choose_operator(self, op: OperatorKind):
        """
        Set the pending operation.

        If an operation is already pending, it is evaluated first with the
        current entry as its right-hand operand and the result becomes the new
        left-hand operand.

        Args:
            op: Operator to apply to the next operand
        """
        op = OperatorKind(op)
        state = self.state
        if state.current_entry == ERROR_TEXT:
            return

        input_value = float(state.current_entry)

        if state.pending_operand is None:
            state.pending_operand = input_value
        elif state.pending_operator is not None:
            result = await self.client.compute(state.pending_operand, input_value, state.pending_operator)
            if not result.ok:
                self._fail(result)
                return
            state.current_entry = format_number(result.value)
            state.pending_operand = result.value

        state.pending_operator = op
        state.awaiting_fresh_entry = True
        self._refresh_display()

    async def evaluate(self):
        """Perform the pending operation and show its result."""
        state = self.state
        if state.pending_operand is None or state.pending_operator is None:
            return
        if state.current_entry == ERROR_TEXT:
            return

        input_value = float(state.current_entry)
        result = await self.client.compute(state.pending_operand, input_value, state.pending_operator)
        if not result.ok:
            self._fail(result)
            return

        state.current_entry = format_number(result.value)
        state.pending_operand = None
        state.pending_operator = None
        state.awaiting_fresh_entry = True
        self._refresh_display()

    def clear(self):
        """Reset calculator to initial state."""
        self.state.reset()
        self._refresh_display()

    async def handle_key(self, key: str) -> bool:
        """
        Dispatch a keyboard key.

        Args:
            key: Key name as reported by the UI ("7", "+", "Enter", "Escape", ...)

        Returns:
            True if the UI should suppress the key's default action
        """
        if len(key) == 1 and key in "0123456789":
            self.input_digit(key)
        elif key == ".":
            self.input_decimal_point()
        elif key in OPERATOR_KEYS:
            await self.choose_operator(OperatorKind.from_symbol(key))
            # Browsers open quick-find on "/".
            return key == "/"
        elif key in EVALUATE_KEYS:
            await self.evaluate()
        elif key in CLEAR_KEYS:
            self.clear()
        return False

    async def press(self, action: str, value: Optional[str] = None):
        """
        Dispatch a button press.

        Args:
            action: One of 'digit', 'decimal', 'operator', 'equals', 'clear'
            value: Digit character or operator name/symbol, depending on action

        Raises:
            ValueError: If the action or its value is not recognized
        """
        if action == "digit":
            self.input_digit(value or "")
        elif action == "decimal":
            self.input_decimal_point()
        elif action == "operator":
            await self.choose_operator(parse_operator(value or ""))
        elif action == "equals":
            await self.evaluate()
        elif action == "clear":
            self.clear()
        else:
            raise ValueError(f"Unknown action: {action}")

    async def refresh_status(self) -> ConnectivityStatus:
        """Re-check backend health and update the connectivity indicator."""
        self.status = await self.client.check_health()
        return self.status

    def snapshot(self) -> Dict[str, object]:
        state = self.state
        return {
            "display": state.current_entry,
            "pending_operand": state.pending_operand,
            "pending_operator": state.pending_operator.value if state.pending_operator else None,
            "awaiting_fresh_entry": state.awaiting_fresh_entry,
            "status": {"ok": self.status.ok, "message": self.status.message},
        }

    def _fail(self, result: CalculationResult):
        # Pending fields are dropped so no stale chain survives the error.
        logger.info("Calculation failed (%s): %s", result.failure_kind.value, result.message)
        state = self.state
        state.current_entry = ERROR_TEXT
        state.pending_operand = None
        state.pending_operator = None
        state.awaiting_fresh_entry = True
        self.status = ConnectivityStatus(False, result.message or "Calculation failed")
        self._refresh_display()

    def _refresh_display(self):
        if self._on_display is not None:
            self._on_display(self.state.current_entry)


def parse_operator(value: str) -> OperatorKind:
    """Accept an operator by wire name ("add") or symbol ("+")."""
    try:
        return OperatorKind(value)
    except ValueError:
        return OperatorKind.from_symbol(value)


def format_number(num: float) -> str:
    """Format a result for display: 5.0 -> "5", 2.5 -> "2.5"."""
    if math.isfinite(num) and num.is_integer() and abs(num) < 1e16:
        return str(int(num))
    return repr(num)
