"""Table rule variations."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from quantum_blackjack.chips import DEFAULT_CHIP_PRICES, DEFAULT_STARTING_CHIPS, ChipKind

if TYPE_CHECKING:
    from quantum_blackjack.config import GameConfig


@dataclass(frozen=True)
class TableRules:
    """
    Quantum blackjack table configuration.

    Payouts are quoted as profit on the bet: a natural blackjack at 1.5
    returns 2.5 times the stake.
    """

    # Deck configuration
    num_decks: int = 1
    reshuffle_threshold: int = 10  # Reshuffle before a round if fewer faces remain

    # Betting limits
    min_bet: int = 10
    max_bet: int = 1000
    initial_bankroll: Decimal = Decimal("1000")

    # Payouts
    blackjack_payout: float = 1.5
    win_payout: float = 1.0

    # Dealer draws while the minimum total is below this
    dealer_stands_on: int = 17

    # Quantum chips
    starting_chips: dict[ChipKind, int] = field(
        default_factory=lambda: dict(DEFAULT_STARTING_CHIPS)
    )
    chip_prices: dict[ChipKind, int] = field(
        default_factory=lambda: dict(DEFAULT_CHIP_PRICES)
    )

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.num_decks < 1 or self.num_decks > 8:
            raise ValueError("num_decks must be between 1 and 8")
        if self.min_bet < 1 or self.max_bet < self.min_bet:
            raise ValueError("Bet limits must satisfy 1 <= min_bet <= max_bet")
        if self.blackjack_payout < 1.0:
            raise ValueError("blackjack_payout must be at least 1.0")
        if self.reshuffle_threshold < 2:
            raise ValueError("reshuffle_threshold must leave room for one card")
        if any(count < 0 for count in self.starting_chips.values()):
            raise ValueError("starting chip counts cannot be negative")

    @classmethod
    def classic(cls) -> "TableRules":
        """The standard table: single deck, 3:2 blackjack."""
        return cls()

    @classmethod
    def high_roller(cls) -> "TableRules":
        """Bigger limits and a deeper chip stack."""
        return cls(
            num_decks=2,
            min_bet=100,
            max_bet=10000,
            initial_bankroll=Decimal("10000"),
            starting_chips={
                ChipKind.SUPERPOSE: 5,
                ChipKind.COLLAPSE: 4,
                ChipKind.ENTANGLE: 3,
            },
        )

    @classmethod
    def from_config(cls, game_config: "GameConfig") -> "TableRules":
        return cls(
            num_decks=game_config.num_decks,
            reshuffle_threshold=game_config.reshuffle_threshold,
            min_bet=game_config.min_bet,
            max_bet=game_config.max_bet,
            initial_bankroll=Decimal(str(game_config.initial_bankroll)),
        )
