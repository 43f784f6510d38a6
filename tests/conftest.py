"""Pytest fixtures for quantum blackjack tests."""

import pytest
from decimal import Decimal
from random import Random

from quantum_blackjack.cards import CardFace, Deck, Rank, Suit
from quantum_blackjack.chips import ChipInventory
from quantum_blackjack.game import QuantumBlackjackGame
from quantum_blackjack.hand import Hand
from quantum_blackjack.quantum import EntanglementRegistry, QuantumCard
from quantum_blackjack.rules import TableRules
from quantum_blackjack.session import PlayerSession


def face(code: str) -> CardFace:
    """Shorthand: face('AS'), face('10D')."""
    return CardFace.from_string(code)


def qcard(code_a: str, code_b: str, rng=None, registry=None) -> QuantumCard:
    """A quantum card from two face codes; shows the first one."""
    return QuantumCard(face(code_a), face(code_b), rng=rng, registry=registry)


def stack_round(game: QuantumBlackjackGame, *cards: str) -> None:
    """
    Stack the deck so the next cards dealt are the given ones.

    Each entry is 'A/B' naming the two candidate faces of one card, or a
    single code, in which case the second face is filled with a card that
    does not otherwise appear.
    """
    faces = []
    filler = iter(["2C", "3C", "4C", "5C", "6C", "7C", "8C", "9C", "2S", "3S", "4S", "5S"])
    used = {c for entry in cards for c in entry.split("/")}
    for entry in cards:
        if "/" in entry:
            code_a, code_b = entry.split("/")
        else:
            code_a = entry
            code_b = next(c for c in filler if c not in used and c != entry)
        faces.extend([face(code_a), face(code_b)])
    game.deck.stack(faces)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck(rng):
    """A shuffled deck."""
    d = Deck(rng=rng)
    d.shuffle()
    return d


@pytest.fixture
def registry():
    """A private entanglement registry."""
    return EntanglementRegistry()


@pytest.fixture
def make_card(rng, registry):
    """Factory for quantum cards sharing one registry."""

    def _make(code_a: str, code_b: str) -> QuantumCard:
        return qcard(code_a, code_b, rng=rng, registry=registry)

    return _make


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def chips():
    """Default starting chips."""
    return ChipInventory()


@pytest.fixture
def rules():
    """Default table rules."""
    return TableRules()


@pytest.fixture
def session():
    """A fresh session with 1000 in the bankroll."""
    return PlayerSession(bankroll=Decimal("1000"))


@pytest.fixture
def game(rng):
    """A new table."""
    return QuantumBlackjackGame(rng=rng)


@pytest.fixture
def player_turn_game(game):
    """A table in the player's turn with a hard 16 against a dealer 10."""
    stack_round(game, "10S/6D", "10H", "6H/9C", "7D")
    game.place_bet(100)
    return game
