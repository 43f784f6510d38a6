"""Card faces and the deck that supplies them."""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Iterator

from quantum_blackjack.errors import DeckExhausted

logger = logging.getLogger(__name__)


class Color(Enum):
    """Suit colors."""

    RED = "red"
    BLACK = "black"

    def __str__(self) -> str:
        return self.value


class Suit(Enum):
    """Card suits."""

    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()
    SPADES = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]

    @property
    def color(self) -> Color:
        """Hearts and diamonds are red, clubs and spades black."""
        if self in (Suit.HEARTS, Suit.DIAMONDS):
            return Color.RED
        return Color.BLACK


class Rank(Enum):
    """Card ranks with blackjack values."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self.value <= 10:
            return self.value
        if self == Rank.ACE:
            return 11
        return 10

    @property
    def is_ace(self) -> bool:
        return self == Rank.ACE


_RANK_CODES = {
    "2": Rank.TWO,
    "3": Rank.THREE,
    "4": Rank.FOUR,
    "5": Rank.FIVE,
    "6": Rank.SIX,
    "7": Rank.SEVEN,
    "8": Rank.EIGHT,
    "9": Rank.NINE,
    "10": Rank.TEN,
    "T": Rank.TEN,
    "J": Rank.JACK,
    "Q": Rank.QUEEN,
    "K": Rank.KING,
    "A": Rank.ACE,
}

_SUIT_CODES = {
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
}


@dataclass(frozen=True, slots=True)
class CardFace:
    """One concrete rank and suit a quantum card can show."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"CardFace({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    blackjack_value = value

    @property
    def color(self) -> Color:
        return self.suit.color

    @property
    def is_red(self) -> bool:
        return self.color is Color.RED

    @property
    def is_ace(self) -> bool:
        return self.rank.is_ace

    @property
    def long_name(self) -> str:
        """Name as shown in notifications, e.g. 'Queen of Hearts'."""
        names = {
            Rank.JACK: "Jack",
            Rank.QUEEN: "Queen",
            Rank.KING: "King",
            Rank.ACE: "Ace",
        }
        rank_name = names.get(self.rank, str(self.rank.value))
        return f"{rank_name} of {self.suit.name.title()}"

    @classmethod
    def from_string(cls, s: str) -> "CardFace":
        """Create a face from a string like '2♣', 'AS', 'Kh'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str not in _RANK_CODES:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUIT_CODES:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANK_CODES[rank_str], _SUIT_CODES[suit_str])


class Deck:
    """
    Shuffled supply of card faces.

    Every quantum card takes two distinct faces from the deck, one for each
    candidate state.
    """

    def __init__(self, num_decks: int = 1, rng: Random | None = None) -> None:
        """
        Initialize a deck.

        Args:
            num_decks: Number of standard 52-face decks combined
            rng: Random number generator for shuffling
        """
        if num_decks < 1:
            raise ValueError("Deck must have at least 1 standard deck")

        self._num_decks = num_decks
        self._rng = rng or Random()
        self._faces: list[CardFace] = []
        self.reset()

    def reset(self) -> None:
        """Reset to all faces in order."""
        self._faces = [
            CardFace(rank, suit)
            for _ in range(self._num_decks)
            for suit in Suit
            for rank in Rank
        ]

    def shuffle(self) -> None:
        """Refill and shuffle the deck."""
        self.reset()
        self._rng.shuffle(self._faces)
        logger.debug("Deck shuffled (%d faces)", len(self._faces))

    def draw(self) -> CardFace:
        """Draw a face from the top of the deck."""
        if not self._faces:
            raise DeckExhausted("Cannot draw from an empty deck")
        return self._faces.pop()

    def draw_pair(self) -> tuple[CardFace, CardFace]:
        """
        Draw the two candidate faces for one quantum card.

        A second face identical to the first is returned to the bottom of
        the deck and the draw is repeated.

        Raises:
            DeckExhausted: If the deck runs out before two distinct faces
                are found
        """
        first = self.draw()
        rejected: list[CardFace] = []
        try:
            while True:
                second = self.draw()
                if second != first:
                    return first, second
                rejected.append(second)
        finally:
            for face in rejected:
                self._faces.insert(0, face)

    def stack(self, faces: list[CardFace]) -> None:
        """Place faces on top of the deck so they are drawn in the given order."""
        self._faces.extend(reversed(faces))

    @property
    def cards_remaining(self) -> int:
        """Return the number of faces remaining."""
        return len(self._faces)

    @property
    def total_cards(self) -> int:
        return self._num_decks * 52

    @property
    def num_decks(self) -> int:
        return self._num_decks

    def __len__(self) -> int:
        return len(self._faces)

    def __iter__(self) -> Iterator[CardFace]:
        return iter(self._faces)
