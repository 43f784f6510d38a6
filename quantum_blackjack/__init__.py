"""Quantum blackjack engine - 100% UI-agnostic."""

from quantum_blackjack.cards import CardFace, Color, Deck, Rank, Suit
from quantum_blackjack.chips import ChipInventory, ChipKind
from quantum_blackjack.errors import ActionResult, ErrorKind
from quantum_blackjack.hand import Hand, ValueRange, hand_value_range
from quantum_blackjack.quantum import CardMode, EntanglementRegistry, QuantumCard
from quantum_blackjack.rules import TableRules

__all__ = [
    "ActionResult",
    "CardFace",
    "CardMode",
    "ChipInventory",
    "ChipKind",
    "Color",
    "Deck",
    "EntanglementRegistry",
    "ErrorKind",
    "Hand",
    "QuantumCard",
    "Rank",
    "Suit",
    "TableRules",
    "ValueRange",
    "hand_value_range",
]
