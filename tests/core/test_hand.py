"""Tests for hand valuation over quantum cards."""

import pytest

from conftest import face
from quantum_blackjack.hand import (
    Hand,
    ValueRange,
    evaluate_hands,
    format_value_range,
    hand_value_range,
)


def make_hand(make_card, *pairs, owner="player"):
    """Build a hand from 'A/B' codes; a plain code gets an unrelated second face."""
    hand = Hand(owner=owner)
    for pair in pairs:
        if "/" in pair:
            code_a, code_b = pair.split("/")
        else:
            code_a, code_b = pair, ("2C" if pair != "2C" else "3C")
        hand.add_card(make_card(code_a, code_b))
    return hand


class TestValueRange:
    """Tests for the value range tuple."""

    def test_certain(self):
        assert ValueRange(17, 17).is_certain
        assert not ValueRange(6, 9).is_certain

    def test_bust_only_when_min_exceeds_21(self):
        assert ValueRange(22, 25).is_bust
        assert not ValueRange(18, 25).is_bust

    def test_format(self):
        assert format_value_range(ValueRange(17, 17)) == "17"
        assert format_value_range(ValueRange(6, 9), uncertain=True) == "6-9 (uncertain)"
        assert format_value_range(ValueRange(9, 9), uncertain=True) == "9 (uncertain)"


class TestHandValue:
    """Tests for hand value calculation."""

    def test_empty_hand(self, empty_hand):
        assert empty_hand.value_range() == (0, 0)
        assert hand_value_range([]) == (0, 0)

    def test_simple_hand(self, make_card):
        hand = make_hand(make_card, "10H", "7S")
        assert hand.value_range() == (17, 17)
        assert hand.display_value == "17"

    def test_face_cards(self, make_card):
        hand = make_hand(make_card, "KH", "QS")
        assert hand.value_range() == (20, 20)

    def test_soft_ace(self, make_card):
        hand = make_hand(make_card, "AH", "6S")
        assert hand.value_range() == (17, 17)

    def test_ace_softened_when_over_21(self, make_card):
        hand = make_hand(make_card, "AH", "6S", "9D")
        assert hand.value_range() == (16, 16)

    def test_two_aces(self, make_card):
        hand = make_hand(make_card, "AH", "AS")
        assert hand.value_range() == (12, 12)

    def test_three_aces_and_nine(self, make_card):
        hand = make_hand(make_card, "AH", "AS", "AD", "9C")
        assert hand.value_range() == (12, 12)

    def test_hard_bust(self, make_card):
        hand = make_hand(make_card, "10H", "QS", "5D")
        assert hand.value_range() == (25, 25)
        assert hand.is_busted
        assert str(hand).endswith("(BUST)")

    def test_superposed_card_widens_range(self, make_card):
        """A superposed 6♦/9♣ next to nothing else reads 6-9."""
        hand = Hand()
        card = make_card("6D", "9C")
        hand.add_card(card)
        card.superpose()

        assert hand.value_range() == (6, 9)
        assert hand.is_uncertain
        assert hand.display_value == "6-9 (uncertain)"

    def test_superposed_ten_plus_two_faces(self, make_card):
        hand = make_hand(make_card, "10S", "5H/8D")
        hand.cards[1].superpose()
        assert hand.value_range() == (15, 18)

    def test_superposed_equal_values_still_uncertain(self, make_card):
        hand = make_hand(make_card, "KS/QH")
        hand.cards[0].superpose()
        assert hand.value_range() == (10, 10)
        assert hand.display_value == "10 (uncertain)"

    def test_superposed_ace_is_softened_per_bound(self, make_card):
        """An ace candidate lets both bounds drop by 10 when over 21."""
        hand = make_hand(make_card, "KS", "5H", "AD/9C")
        hand.cards[2].superpose()
        # low: 10 + 5 + 9 = 24 -> 14; high: 10 + 5 + 11 = 26 -> 16
        assert hand.value_range() == (14, 16)
        assert not hand.is_busted

    def test_range_bust_needs_minimum_over_21(self, make_card):
        hand = make_hand(make_card, "KS", "9H", "2D/5C")
        hand.cards[2].superpose()
        assert hand.value_range() == (21, 24)
        assert not hand.is_busted

    def test_collapse_narrows_range(self, make_card):
        hand = make_hand(make_card, "10S", "6D/9C")
        card = hand.cards[1]
        card.superpose()
        card.collapse(face("9C"))
        assert hand.value_range() == (19, 19)
        assert hand.is_fully_collapsed
        assert hand.display_value == "19"

    def test_visible_value_range_skips_face_down(self, make_card):
        hand = make_hand(make_card, "10H", "7D", owner="dealer")
        hand.cards[1].face_up = False
        assert hand.visible_value_range() == (10, 10)
        assert hand.value_range() == (17, 17)


class TestHandMembership:
    """Tests for adding and finding cards."""

    def test_add_duplicate_rejected(self, make_card):
        hand = Hand()
        card = make_card("10H", "7D")
        hand.add_card(card)
        with pytest.raises(ValueError):
            hand.add_card(card)

    def test_find_and_contains(self, make_card):
        hand = make_hand(make_card, "10H", "7D")
        card = hand.cards[1]
        assert hand.find(card.card_id) is card
        assert hand.find(-1) is None
        assert card in hand
        assert make_card("2H", "3H") not in hand
        assert len(hand) == 2

    def test_clear(self, make_card):
        hand = make_hand(make_card, "10H", "7D")
        hand.clear()
        assert len(hand) == 0

    def test_entangled_pairs(self, make_card):
        hand = make_hand(make_card, "10H/2S", "7D/KC")
        for card in hand:
            card.superpose()
        hand.cards[0].entangle_with(hand.cards[1])
        assert hand.entangled_pairs == 1


class TestBlackjack:
    """Tests for natural detection."""

    def test_ace_king_is_blackjack(self, make_card):
        hand = make_hand(make_card, "AS", "KD")
        assert hand.is_blackjack
        assert str(hand).endswith("(BLACKJACK)")

    def test_three_card_21_is_not_blackjack(self, make_card):
        hand = make_hand(make_card, "7S", "7D", "7H")
        assert hand.value_range() == (21, 21)
        assert not hand.is_blackjack

    def test_superposed_hand_is_not_blackjack(self, make_card):
        hand = make_hand(make_card, "AS/AH", "KD")
        hand.cards[0].superpose()
        assert not hand.is_blackjack


class TestEvaluateHands:
    """Tests for comparing settled hands."""

    def test_player_higher_wins(self, make_card):
        player = make_hand(make_card, "10H", "9S")
        dealer = make_hand(make_card, "10D", "7C", owner="dealer")
        assert evaluate_hands(player, dealer) == 1

    def test_dealer_higher_wins(self, make_card):
        player = make_hand(make_card, "10H", "6S")
        dealer = make_hand(make_card, "10D", "7C", owner="dealer")
        assert evaluate_hands(player, dealer) == -1

    def test_push(self, make_card):
        player = make_hand(make_card, "10H", "8S")
        dealer = make_hand(make_card, "QD", "8C", owner="dealer")
        assert evaluate_hands(player, dealer) == 0

    def test_dealer_bust(self, make_card):
        player = make_hand(make_card, "10H", "2S")
        dealer = make_hand(make_card, "10D", "6C", "8H", owner="dealer")
        assert evaluate_hands(player, dealer) == 1

    def test_player_bust_loses_even_if_dealer_busts(self, make_card):
        player = make_hand(make_card, "10H", "QS", "5D")
        dealer = make_hand(make_card, "10D", "6C", "8H", owner="dealer")
        assert evaluate_hands(player, dealer) == -1
