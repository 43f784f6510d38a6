"""Round engine and state management."""

from quantum_blackjack.game.events import EventEmitter, EventType, GameEvent
from quantum_blackjack.game.state import RoundState
from quantum_blackjack.game.engine import QuantumBlackjackGame, RoundOutcome, RoundResult

__all__ = [
    "EventEmitter",
    "EventType",
    "GameEvent",
    "RoundState",
    "QuantumBlackjackGame",
    "RoundOutcome",
    "RoundResult",
]
