"""Round state enumeration."""

from enum import Enum, auto


class RoundState(Enum):
    """
    Round state machine states.

    Flow: IDLE → BETTING → PLAYER_TURN → DEALER_TURN → RESOLVING → GAME_OVER
    """

    # Table open, no round played yet
    IDLE = auto()

    # Bet accepted, cards being dealt
    BETTING = auto()

    # Player hits, stands or spends chips
    PLAYER_TURN = auto()

    # Dealer reveals and draws
    DEALER_TURN = auto()

    # Determining the winner
    RESOLVING = auto()

    # Round finished; a new bet starts the next one
    GAME_OVER = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


# Valid state transitions
VALID_TRANSITIONS: dict[RoundState, list[RoundState]] = {
    RoundState.IDLE: [RoundState.BETTING],
    RoundState.BETTING: [RoundState.PLAYER_TURN, RoundState.RESOLVING],  # RESOLVING on a natural
    RoundState.PLAYER_TURN: [RoundState.DEALER_TURN, RoundState.RESOLVING],
    RoundState.DEALER_TURN: [RoundState.RESOLVING],
    RoundState.RESOLVING: [RoundState.GAME_OVER],
    RoundState.GAME_OVER: [RoundState.BETTING],
}


def is_valid_transition(from_state: RoundState, to_state: RoundState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])
