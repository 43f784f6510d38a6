"""Tests for CardFace and Deck classes."""

import pytest
from random import Random

from quantum_blackjack.cards import CardFace, Color, Deck, Rank, Suit
from quantum_blackjack.errors import DeckExhausted


class TestCardFace:
    """Tests for the CardFace class."""

    def test_face_creation(self):
        """Test creating a face."""
        face = CardFace(Rank.ACE, Suit.SPADES)
        assert face.rank == Rank.ACE
        assert face.suit == Suit.SPADES

    def test_face_immutability(self):
        """Test that faces are immutable."""
        face = CardFace(Rank.ACE, Suit.SPADES)
        with pytest.raises(AttributeError):
            face.rank = Rank.KING

    def test_face_value(self):
        """Test blackjack values."""
        assert CardFace(Rank.TWO, Suit.HEARTS).value == 2
        assert CardFace(Rank.TEN, Suit.HEARTS).value == 10
        assert CardFace(Rank.JACK, Suit.HEARTS).value == 10
        assert CardFace(Rank.QUEEN, Suit.HEARTS).value == 10
        assert CardFace(Rank.KING, Suit.HEARTS).value == 10
        assert CardFace(Rank.ACE, Suit.HEARTS).value == 11

    def test_blackjack_value_alias(self):
        face = CardFace(Rank.SEVEN, Suit.CLUBS)
        assert face.blackjack_value == face.value == 7

    def test_face_color(self):
        """Hearts and diamonds are red, clubs and spades black."""
        assert CardFace(Rank.TWO, Suit.HEARTS).color is Color.RED
        assert CardFace(Rank.TWO, Suit.DIAMONDS).color is Color.RED
        assert CardFace(Rank.TWO, Suit.CLUBS).color is Color.BLACK
        assert CardFace(Rank.TWO, Suit.SPADES).color is Color.BLACK
        assert CardFace(Rank.TWO, Suit.HEARTS).is_red
        assert not CardFace(Rank.TWO, Suit.SPADES).is_red

    def test_face_is_ace(self):
        assert CardFace(Rank.ACE, Suit.SPADES).is_ace
        assert not CardFace(Rank.KING, Suit.SPADES).is_ace

    def test_face_from_string(self):
        """Test creating faces from strings."""
        assert CardFace.from_string("AS") == CardFace(Rank.ACE, Suit.SPADES)
        assert CardFace.from_string("2H") == CardFace(Rank.TWO, Suit.HEARTS)
        assert CardFace.from_string("10D") == CardFace(Rank.TEN, Suit.DIAMONDS)
        assert CardFace.from_string("kc") == CardFace(Rank.KING, Suit.CLUBS)

    def test_face_from_string_with_symbols(self):
        assert CardFace.from_string("A♠") == CardFace(Rank.ACE, Suit.SPADES)
        assert CardFace.from_string("6♦") == CardFace(Rank.SIX, Suit.DIAMONDS)

    @pytest.mark.parametrize("bad", ["", "A", "1S", "AX", "11H"])
    def test_face_from_string_invalid(self, bad):
        with pytest.raises(ValueError):
            CardFace.from_string(bad)

    def test_face_str(self):
        assert str(CardFace(Rank.ACE, Suit.SPADES)) == "A♠"
        assert str(CardFace(Rank.TEN, Suit.HEARTS)) == "10♥"

    def test_long_name(self):
        assert CardFace(Rank.QUEEN, Suit.HEARTS).long_name == "Queen of Hearts"
        assert CardFace(Rank.SEVEN, Suit.CLUBS).long_name == "7 of Clubs"

    def test_face_equality_and_hash(self):
        face1 = CardFace(Rank.ACE, Suit.SPADES)
        face2 = CardFace(Rank.ACE, Suit.SPADES)
        face3 = CardFace(Rank.ACE, Suit.HEARTS)
        assert face1 == face2
        assert face1 != face3
        assert len({face1, face2, face3}) == 2


class TestDeck:
    """Tests for the Deck class."""

    def test_deck_has_52_faces(self):
        deck = Deck()
        assert len(deck) == 52
        assert len(set(deck)) == 52

    def test_multi_deck(self):
        deck = Deck(num_decks=2)
        assert deck.cards_remaining == 104
        assert deck.total_cards == 104

    def test_invalid_num_decks(self):
        with pytest.raises(ValueError):
            Deck(num_decks=0)

    def test_shuffle_is_seeded(self):
        deck1 = Deck(rng=Random(7))
        deck2 = Deck(rng=Random(7))
        deck1.shuffle()
        deck2.shuffle()
        assert list(deck1) == list(deck2)

    def test_shuffle_refills(self, deck):
        for _ in range(10):
            deck.draw()
        deck.shuffle()
        assert deck.cards_remaining == 52

    def test_draw_removes_face(self, deck):
        face = deck.draw()
        assert deck.cards_remaining == 51
        assert face not in list(deck)

    def test_draw_empty_raises(self, deck):
        for _ in range(52):
            deck.draw()
        with pytest.raises(DeckExhausted):
            deck.draw()

    def test_deck_exhausted_is_index_error(self):
        assert issubclass(DeckExhausted, IndexError)

    def test_draw_pair_distinct(self, deck):
        for _ in range(26):
            first, second = deck.draw_pair()
            assert first != second
        assert deck.cards_remaining == 0

    def test_draw_pair_rejects_duplicate(self):
        deck = Deck()
        ace = CardFace(Rank.ACE, Suit.SPADES)
        king = CardFace(Rank.KING, Suit.HEARTS)
        deck.stack([ace, ace, king])
        before = deck.cards_remaining

        first, second = deck.draw_pair()

        assert (first, second) == (ace, king)
        # The rejected duplicate goes back to the bottom
        assert deck.cards_remaining == before - 2
        assert list(deck)[0] == ace

    def test_stack_draws_in_order(self):
        deck = Deck()
        faces = [CardFace.from_string(c) for c in ("AS", "2H", "3D")]
        deck.stack(faces)
        assert [deck.draw() for _ in range(3)] == faces
