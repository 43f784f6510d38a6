"""Tests for renderer views."""

import pytest

from conftest import face
from quantum_blackjack.schemas import CardFaceView, HandView, QuantumCardView
from quantum_blackjack.hand import Hand


def test_card_face_view():
    view = CardFaceView.from_face(face("QH"))
    assert view.rank == "Q"
    assert view.suit == "hearts"
    assert view.value == 10
    assert view.color == "red"
    assert view.label == "Q♥"


def test_superposed_card_view(make_card):
    card = make_card("6D", "9C")
    card.superpose()

    view = QuantumCardView.from_card(card)

    assert view.mode == "superposed"
    assert view.resolved_face is None
    assert view.probability_a == pytest.approx(0.5)
    assert (view.value_min, view.value_max) == (6, 9)


def test_entangled_card_view_names_partner(make_card):
    card_a = make_card("6D", "9C")
    card_b = make_card("2S", "KH")
    card_a.superpose()
    card_b.superpose()
    card_a.entangle_with(card_b)

    assert QuantumCardView.from_card(card_a).entangled_with == card_b.card_id


def test_face_down_card_view_hides_faces(make_card):
    card = make_card("AS", "KD")
    card.face_up = False

    view = QuantumCardView.from_card(card)

    assert view.face_a is None
    assert view.face_b is None
    assert view.value_min is None


def test_hand_view(make_card):
    hand = Hand(owner="dealer")
    hand.add_card(make_card("10H", "2C"))
    hole = make_card("7D", "3C")
    hole.face_up = False
    hand.add_card(hole)

    view = HandView.from_hand(hand)

    assert view.owner == "dealer"
    assert len(view.cards) == 2
    assert view.display == "10"
    assert not view.uncertain
