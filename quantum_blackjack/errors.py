"""Error taxonomy and the result type returned by every game intent."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Categories of recoverable game errors."""

    INVALID_STATE_TRANSITION = "invalid_state_transition"
    INSUFFICIENT_RESOURCE = "insufficient_resource"
    INELIGIBLE_CARD_OPERATION = "ineligible_card_operation"
    DECK_EXHAUSTED = "deck_exhausted"
    INVALID_BET = "invalid_bet"


class QuantumGameError(Exception):
    """Base class for recoverable game errors."""

    kind: ErrorKind

    def __init__(self, reason: str, message: str | None = None) -> None:
        self.reason = reason
        self.message = message or reason.replace("_", " ")
        super().__init__(self.message)


class InvalidStateTransition(QuantumGameError):
    """Raised when an action is attempted outside its legal round state."""

    kind = ErrorKind.INVALID_STATE_TRANSITION


class InsufficientResource(QuantumGameError):
    """Raised when the chip count or bankroll is too low."""

    kind = ErrorKind.INSUFFICIENT_RESOURCE


class IneligibleCardOperation(QuantumGameError):
    """Raised when a quantum operation does not apply to the selected card."""

    kind = ErrorKind.INELIGIBLE_CARD_OPERATION


class InvalidBet(QuantumGameError):
    """Raised when a bet is outside the table limits."""

    kind = ErrorKind.INVALID_BET


class DeckExhausted(QuantumGameError, IndexError):
    """Raised when drawing from an empty deck."""

    kind = ErrorKind.DECK_EXHAUSTED

    def __init__(self, message: str = "Cannot draw from an empty deck") -> None:
        super().__init__("deck_exhausted", message)


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of a game intent.

    Intents never raise for game-rule violations; they return a failed
    result carrying the error kind and a reason code for the UI instead.
    """

    ok: bool
    error: ErrorKind | None = None
    reason: str = ""
    message: str = ""
    value: Any = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "ActionResult":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(
        cls,
        error: ErrorKind,
        reason: str,
        message: str = "",
    ) -> "ActionResult":
        return cls(ok=False, error=error, reason=reason, message=message or reason.replace("_", " "))

    @classmethod
    def from_error(cls, exc: QuantumGameError) -> "ActionResult":
        return cls.failure(exc.kind, exc.reason, exc.message)
