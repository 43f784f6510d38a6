"""Pydantic schemas for table views and saved sessions."""

from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from quantum_blackjack.cards import CardFace
from quantum_blackjack.hand import Hand, format_value_range

if TYPE_CHECKING:
    from quantum_blackjack.quantum import QuantumCard


class CardFaceView(BaseModel):
    """Card face representation."""

    model_config = ConfigDict(frozen=True)

    rank: str
    suit: str
    value: int
    color: Literal["red", "black"]
    label: str

    @classmethod
    def from_face(cls, face: CardFace) -> "CardFaceView":
        return cls(
            rank=str(face.rank),
            suit=face.suit.name.lower(),
            value=face.value,
            color=face.color.value,
            label=str(face),
        )


class QuantumCardView(BaseModel):
    """Quantum card representation; faces are withheld while face down."""

    card_id: int
    face_up: bool
    mode: Literal["collapsed", "superposed"]
    face_a: CardFaceView | None = None
    face_b: CardFaceView | None = None
    resolved_face: CardFaceView | None = None
    probability_a: float | None = None
    probability_b: float | None = None
    entangled_with: int | None = None
    value_min: int | None = None
    value_max: int | None = None

    @classmethod
    def from_card(cls, card: "QuantumCard") -> "QuantumCardView":
        if not card.face_up:
            return cls(card_id=card.card_id, face_up=False, mode=str(card.mode))
        partner = card.entangled_with
        low, high = card.value_range()
        return cls(
            card_id=card.card_id,
            face_up=True,
            mode=str(card.mode),
            face_a=CardFaceView.from_face(card.face_a),
            face_b=CardFaceView.from_face(card.face_b),
            resolved_face=(
                CardFaceView.from_face(card.resolved_face) if card.resolved_face else None
            ),
            probability_a=card.probability(card.face_a),
            probability_b=card.probability(card.face_b),
            entangled_with=partner.card_id if partner is not None else None,
            value_min=low,
            value_max=high,
        )


class HandView(BaseModel):
    """Hand representation using the visible cards' value range."""

    owner: Literal["player", "dealer"]
    cards: list[QuantumCardView]
    min_value: int
    max_value: int
    uncertain: bool
    display: str

    @classmethod
    def from_hand(cls, hand: Hand) -> "HandView":
        visible = [c for c in hand.cards if c.face_up]
        value_range = hand.visible_value_range()
        uncertain = any(c.is_superposed for c in visible)
        return cls(
            owner=hand.owner,
            cards=[QuantumCardView.from_card(c) for c in hand.cards],
            min_value=value_range.min,
            max_value=value_range.max,
            uncertain=uncertain,
            display=format_value_range(value_range, uncertain),
        )


class TableView(BaseModel):
    """Snapshot of the table for a renderer."""

    state: str
    bet: int
    bankroll: Decimal
    chips: dict[str, int]
    player_hand: HandView
    dealer_hand: HandView
    pending_entanglement: int | None = None
    can_hit: bool
    can_stand: bool
    can_bet: bool
    can_use_chip: bool
    cards_remaining: int


class SessionSnapshot(BaseModel):
    """Bankroll and chips carried between sessions."""

    version: Literal[1] = 1
    bankroll: Decimal = Field(..., ge=0)
    chips: dict[str, Annotated[int, Field(ge=0)]] = Field(default_factory=dict)
