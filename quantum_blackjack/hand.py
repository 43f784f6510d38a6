"""Hand valuation over cards that may not have a definite face yet."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Literal, NamedTuple

from quantum_blackjack.quantum import QuantumCard

Owner = Literal["player", "dealer"]

BLACKJACK = 21


class ValueRange(NamedTuple):
    """Lowest and highest hand total the current cards allow."""

    min: int
    max: int

    @property
    def is_certain(self) -> bool:
        return self.min == self.max

    @property
    def is_bust(self) -> bool:
        """True if even the best case exceeds 21."""
        return self.min > BLACKJACK


def _soften(total: int, aces: int) -> int:
    while total > BLACKJACK and aces > 0:
        total -= 10
        aces -= 1
    return total


def hand_value_range(cards: Iterable[QuantumCard]) -> ValueRange:
    """
    Calculate the [min, max] total of a set of cards.

    Per-card ranges are summed component-wise, then each bound is softened
    on its own: while it exceeds 21 and an ace-eligible card remains, 10 is
    taken off. A superposed card counts as ace-eligible if either candidate
    is an Ace.

    This treats the two bounds independently rather than enumerating every
    joint face/ace assignment, so with several uncertain aces the reported
    range can differ from the exact achievable range. Bounds are not
    clamped: a minimum above 21 is a guaranteed bust.
    """
    low = high = aces = 0
    for card in cards:
        card_min, card_max = card.value_range()
        low += card_min
        high += card_max
        if card.is_ace_eligible:
            aces += 1
    return ValueRange(_soften(low, aces), _soften(high, aces))


def format_value_range(value_range: ValueRange, uncertain: bool = False) -> str:
    """Display string, e.g. '17', '6-9 (uncertain)'."""
    if value_range.is_certain:
        text = str(value_range.min)
    else:
        text = f"{value_range.min}-{value_range.max}"
    if uncertain:
        text = f"{text} (uncertain)"
    return text


@dataclass
class Hand:
    """The quantum cards held by one participant."""

    owner: Owner = "player"
    cards: list[QuantumCard] = field(default_factory=list)

    def add_card(self, card: QuantumCard) -> None:
        if any(c is card for c in self.cards):
            raise ValueError(f"Card #{card.card_id} is already in this hand")
        self.cards.append(card)

    def clear(self) -> None:
        self.cards.clear()

    def find(self, card_id: int) -> QuantumCard | None:
        for card in self.cards:
            if card.card_id == card_id:
                return card
        return None

    def value_range(self) -> ValueRange:
        return hand_value_range(self.cards)

    def visible_value_range(self) -> ValueRange:
        """Value range of the face-up cards only."""
        return hand_value_range(c for c in self.cards if c.face_up)

    @property
    def superposed_cards(self) -> list[QuantumCard]:
        return [c for c in self.cards if c.is_superposed]

    @property
    def is_uncertain(self) -> bool:
        """True if any card is still superposed."""
        return any(c.is_superposed for c in self.cards)

    @property
    def is_fully_collapsed(self) -> bool:
        return not self.is_uncertain

    @property
    def is_busted(self) -> bool:
        return self.value_range().is_bust

    @property
    def is_blackjack(self) -> bool:
        """
        Natural 21 with two collapsed cards.

        Superposed two-card hands are never treated as blackjack.
        """
        return (
            len(self.cards) == 2
            and self.is_fully_collapsed
            and self.value_range().min == BLACKJACK
        )

    @property
    def display_value(self) -> str:
        return format_value_range(self.value_range(), self.is_uncertain)

    @property
    def entangled_pairs(self) -> int:
        return sum(1 for c in self.cards if c.is_entangled) // 2

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[QuantumCard]:
        return iter(self.cards)

    def __contains__(self, card: object) -> bool:
        return any(c is card for c in self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(
            str(c.resolved_face) if c.is_collapsed else f"{c.face_a}|{c.face_b}"
            for c in self.cards
        )
        value_str = f"({self.display_value})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        elif self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"


def evaluate_hands(player_hand: Hand, dealer_hand: Hand) -> int:
    """
    Compare two collapsed hands by their minimum totals.

    Returns:
        1 if player wins
        -1 if dealer wins
        0 if push (tie)
    """
    player_value = player_hand.value_range().min
    dealer_value = dealer_hand.value_range().min

    # Player busts always loses
    if player_value > BLACKJACK:
        return -1
    if dealer_value > BLACKJACK:
        return 1

    if player_value > dealer_value:
        return 1
    if dealer_value > player_value:
        return -1
    return 0
