"""Quantum blackjack round engine with state machine."""

import functools
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from random import Random
from typing import Callable, Iterator

from transitions import Machine, MachineError

from quantum_blackjack.cards import CardFace, Deck
from quantum_blackjack.chips import ChipInventory, ChipKind
from quantum_blackjack.config import AppConfig, config as default_config
from quantum_blackjack.errors import (
    ActionResult,
    DeckExhausted,
    IneligibleCardOperation,
    InsufficientResource,
    InvalidBet,
    InvalidStateTransition,
    QuantumGameError,
)
from quantum_blackjack.game.events import DEFAULT_BUFFER_SIZE, EventEmitter, EventType, GameEvent
from quantum_blackjack.game.state import RoundState
from quantum_blackjack.hand import BLACKJACK, Hand, evaluate_hands, format_value_range
from quantum_blackjack.quantum import EntanglementRegistry, QuantumCard
from quantum_blackjack.rules import TableRules
from quantum_blackjack.schemas import HandView, TableView
from quantum_blackjack.session import PlayerSession

logger = logging.getLogger(__name__)

CardRef = QuantumCard | int

# User-facing text for eligibility reason codes
REASON_MESSAGES = {
    "already_superposed": "Card is already in superposition.",
    "entangled": "Cannot put an entangled card in superposition.",
    "already_collapsed": "Card is not in superposition. Cannot collapse a definite state.",
    "not_superposed": "Cannot entangle a card that is not in superposition.",
    "partner_not_superposed": "Second card must also be in superposition.",
    "already_entangled": "Card is already entangled with another card.",
    "partner_already_entangled": "The other card is already entangled.",
    "same_card": "Cannot entangle a card with itself.",
    "different_registry": "Cards are not on the same table.",
    "card_not_on_table": "That card is not on the table.",
    "card_face_down": "Cannot use a chip on a face-down card.",
}


class RoundOutcome(Enum):
    """How a round ended for the player."""

    WIN = "win"
    LOSE = "lose"
    PUSH = "push"
    BLACKJACK = "blackjack"


@dataclass(frozen=True)
class RoundResult:
    """Settled round."""

    outcome: RoundOutcome
    payout: Decimal
    player_total: int
    dealer_total: int


def _intent(method: Callable[..., ActionResult]) -> Callable[..., ActionResult]:
    """
    Run a public intent serialized and total.

    A call made while another intent (or a presentation lock) is active is
    rejected. Game errors are turned into failed results.
    """

    @functools.wraps(method)
    def wrapper(self: "QuantumBlackjackGame", *args, **kwargs) -> ActionResult:
        if self._busy:
            return self._reject(
                InvalidStateTransition(
                    "action_in_progress",
                    "Another action is still in progress",
                )
            )
        self._busy = True
        try:
            return method(self, *args, **kwargs)
        except QuantumGameError as exc:
            return self._reject(exc)
        except MachineError as exc:
            return self._reject(InvalidStateTransition("invalid_transition", exc.value))
        finally:
            self._busy = False

    return wrapper


class QuantumBlackjackGame:
    """
    Quantum blackjack round engine using a state machine.

    The engine is UI-agnostic: intents come in as method calls that return
    an ActionResult, and everything a renderer needs goes out as events.
    """

    # State machine states
    STATES = [s.name.lower() for s in RoundState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "begin_betting", "source": ["idle", "game_over"], "dest": "betting"},
        {"trigger": "deal_complete", "source": "betting", "dest": "player_turn"},
        {"trigger": "natural_blackjack", "source": "betting", "dest": "resolving"},
        {"trigger": "player_busts", "source": "player_turn", "dest": "resolving"},
        {"trigger": "player_stands", "source": "player_turn", "dest": "dealer_turn"},
        {"trigger": "dealer_done", "source": "dealer_turn", "dest": "resolving"},
        {"trigger": "settle", "source": "resolving", "dest": "game_over"},
    ]

    def __init__(
        self,
        rules: TableRules | None = None,
        session: PlayerSession | None = None,
        rng: Random | None = None,
        event_buffer: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        """
        Initialize a new table.

        Args:
            rules: Table rules (uses defaults if not provided)
            session: Bankroll and chips carried in from a previous session
            rng: Random number generator for shuffles and measurements
            event_buffer: Most undrained events and history entries kept
        """
        self.rules = rules or TableRules()
        self.session = session or PlayerSession.new(self.rules)
        self._rng = rng or Random()

        self.deck = Deck(num_decks=self.rules.num_decks, rng=self._rng)
        self.deck.shuffle()

        self.player_hand = Hand(owner="player")
        self.dealer_hand = Hand(owner="dealer")
        self.bet = 0
        self.last_result: RoundResult | None = None
        self.events = EventEmitter(max_pending=event_buffer, max_history=event_buffer)

        self._registry = EntanglementRegistry()
        self._pending_entanglement: QuantumCard | None = None
        self._natural = False
        self._player_busted = False
        self._busy = False

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            model_attribute="_machine_state",
            after_state_change="_on_state_changed",
        )

    @classmethod
    def from_config(
        cls,
        app_config: AppConfig | None = None,
        session: PlayerSession | None = None,
    ) -> "QuantumBlackjackGame":
        """Build a table from the environment-driven application config."""
        app_config = app_config or default_config
        return cls(
            rules=TableRules.from_config(app_config.game),
            session=session,
            rng=Random(app_config.game.seed),
            event_buffer=app_config.game.event_buffer,
        )

    @property
    def state(self) -> RoundState:
        """Get current round state as enum."""
        return RoundState[self._machine_state.upper()]  # type: ignore

    @property
    def bankroll(self) -> Decimal:
        return self.session.bankroll

    @property
    def chips(self) -> ChipInventory:
        return self.session.chips

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def pending_entanglement(self) -> QuantumCard | None:
        return self._pending_entanglement

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def drain_events(self, limit: int | None = None) -> list[GameEvent]:
        """Take pending presentation events in order."""
        return self.events.drain_pending(limit)

    @contextmanager
    def presentation_lock(self) -> Iterator[None]:
        """
        Hold the table while an animation plays.

        Intents submitted inside the block are rejected as in progress.
        """
        previous = self._busy
        self._busy = True
        try:
            yield
        finally:
            self._busy = previous

    # ------------------------------------------------------------------
    # Inbound intents
    # ------------------------------------------------------------------

    @_intent
    def place_bet(self, amount: int) -> ActionResult:
        """
        Place a bet and deal a new round.

        Args:
            amount: Bet amount

        Returns:
            Success once the cards are dealt (the round may already be
            settled on a natural blackjack)
        """
        if self.state not in (RoundState.IDLE, RoundState.BETTING, RoundState.GAME_OVER):
            raise InvalidStateTransition("round_in_progress", "Cannot bet in current state")

        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise InvalidBet("bet_not_positive", "Bet must be a positive whole amount")
        if amount < self.rules.min_bet or amount > self.rules.max_bet:
            raise InvalidBet(
                "bet_out_of_range",
                f"Bet must be between {self.rules.min_bet} and {self.rules.max_bet}",
            )

        self.session.debit(Decimal(amount))
        self.bet = amount
        self.events.emit_new(EventType.BET_PLACED, amount=amount)
        self._emit_bankroll()

        self._reset_table()
        if self.state != RoundState.BETTING:
            self.begin_betting()

        self._deal_initial_cards()
        return ActionResult.success(self.state)

    @_intent
    def start_new_round(self) -> ActionResult:
        """Clear the table and wait for a bet."""
        if self.state != RoundState.GAME_OVER:
            raise InvalidStateTransition("round_not_over", "The current round is not over")
        self._reset_table()
        self.begin_betting()
        return ActionResult.success(self.state)

    @_intent
    def hit(self) -> ActionResult:
        """Player takes another card."""
        self._require_player_turn()

        card = self._deal_card(self.player_hand)
        if self.player_hand.value_range().is_bust:
            self._bust("Bust! Your hand exceeds 21.")
        return ActionResult.success(card)

    @_intent
    def stand(self) -> ActionResult:
        """Player stands: measure every superposed card, then the dealer plays."""
        self._require_player_turn()

        self._collapse_all(self.player_hand)
        if self.player_hand.value_range().is_bust:
            self._player_busted = True
            self.events.emit_new(EventType.NOTIFICATION, message="Bust! Your hand exceeds 21.")

        self.player_stands()
        self._play_dealer()
        return ActionResult.success(self.last_result)

    @_intent
    def use_chip(self, kind: ChipKind | str, card: CardRef) -> ActionResult:
        """
        Spend a chip on a card.

        Superpose and collapse act immediately. An entangle chip selects
        the first card of a pair; choosing a second card completes the
        entanglement and choosing the same card again cancels it.
        """
        chip = self._parse_chip(kind)
        self._require_player_turn()
        target = self._find_card(card)
        self._require_chip(chip)

        if chip is ChipKind.SUPERPOSE:
            return self._superpose(target)
        if chip is ChipKind.COLLAPSE:
            return self._measure(target)
        return self._select_for_entanglement(target)

    @_intent
    def entangle_selection(self, card_a: CardRef, card_b: CardRef) -> ActionResult:
        """Entangle two superposed cards with one entangle chip."""
        self._require_player_turn()
        first = self._find_card(card_a)
        second = self._find_card(card_b)
        self._require_chip(ChipKind.ENTANGLE)
        return self._entangle(first, second)

    @_intent
    def cancel_entanglement(self) -> ActionResult:
        """Drop a half-finished entanglement selection."""
        if self._pending_entanglement is None:
            raise InvalidStateTransition("no_pending_entanglement", "No entanglement to cancel")
        card = self._pending_entanglement
        self._pending_entanglement = None
        self.events.emit_new(EventType.ENTANGLEMENT_CANCELLED, card_id=card.card_id)
        self.events.emit_new(EventType.NOTIFICATION, message="Entanglement cancelled.")
        return ActionResult.success(card)

    @_intent
    def buy_chip(self, kind: ChipKind | str) -> ActionResult:
        """Buy one chip from the bankroll."""
        chip = self._parse_chip(kind)
        remaining = self.chips.purchase(chip, self.session.bankroll)
        if remaining is None:
            raise InsufficientResource(
                "insufficient_bankroll",
                "Not enough money to buy this chip.",
            )
        self.session.bankroll = remaining
        self._emit_chips()
        self._emit_bankroll()
        self.events.emit_new(
            EventType.NOTIFICATION,
            message=f"Purchased a {chip.display_name} chip!",
        )
        return ActionResult.success(self.chips.count(chip))

    # ------------------------------------------------------------------
    # Quantum operations
    # ------------------------------------------------------------------

    def _superpose(self, card: QuantumCard) -> ActionResult:
        blocker = card.superpose_blocker()
        if blocker is not None:
            raise IneligibleCardOperation(blocker, REASON_MESSAGES[blocker])

        card.superpose()
        self.chips.use(ChipKind.SUPERPOSE)
        self.events.emit_new(
            EventType.CARD_SUPERPOSED,
            card_id=card.card_id,
            owner=self._owner_of(card).owner,
            faces=(str(card.face_a), str(card.face_b)),
        )
        self._emit_chips()
        self._emit_hand_value(self._owner_of(card))
        self.events.emit_new(
            EventType.NOTIFICATION,
            message="Card is now in superposition! It exists in both states until measured.",
        )
        return ActionResult.success(card)

    def _measure(self, card: QuantumCard) -> ActionResult:
        if not card.is_superposed:
            raise IneligibleCardOperation("already_collapsed", REASON_MESSAGES["already_collapsed"])

        face = self._collapse(card)
        self.chips.use(ChipKind.COLLAPSE)
        self._emit_chips()
        self.events.emit_new(
            EventType.NOTIFICATION,
            message=f"Card collapsed to {face.long_name}! Measurement forces a definite state.",
        )
        if self.player_hand.value_range().is_bust:
            self._bust("Bust! Your hand exceeds 21.")
        return ActionResult.success(face)

    def _select_for_entanglement(self, card: QuantumCard) -> ActionResult:
        pending = self._pending_entanglement
        if pending is card:
            self._pending_entanglement = None
            self.events.emit_new(EventType.ENTANGLEMENT_CANCELLED, card_id=card.card_id)
            return ActionResult.success(None, message="Entanglement cancelled.")
        if pending is not None:
            return self._entangle(pending, card)

        if not card.is_superposed:
            raise IneligibleCardOperation("not_superposed", REASON_MESSAGES["not_superposed"])
        if card.is_entangled:
            raise IneligibleCardOperation("already_entangled", REASON_MESSAGES["already_entangled"])

        self._pending_entanglement = card
        self.events.emit_new(EventType.ENTANGLEMENT_PENDING, card_id=card.card_id)
        self.events.emit_new(
            EventType.NOTIFICATION,
            message="Select another superposed card to entangle with this one.",
        )
        return ActionResult.success(None, message="Select a second card.")

    def _entangle(self, first: QuantumCard, second: QuantumCard) -> ActionResult:
        blocker = first.entangle_blocker(second)
        if blocker is not None:
            raise IneligibleCardOperation(blocker, REASON_MESSAGES[blocker])

        first.entangle_with(second)
        self.chips.use(ChipKind.ENTANGLE)
        pending = self._pending_entanglement
        self._pending_entanglement = None
        if pending is not None and pending is not first and pending is not second:
            self.events.emit_new(EventType.ENTANGLEMENT_CANCELLED, card_id=pending.card_id)
        self.events.emit_new(
            EventType.CARDS_ENTANGLED,
            card_a=first.card_id,
            card_b=second.card_id,
        )
        self._emit_chips()
        self.events.emit_new(
            EventType.NOTIFICATION,
            message="Cards are now entangled! They will collapse to the same color.",
        )
        return ActionResult.success((first, second))

    def _collapse(self, card: QuantumCard) -> CardFace:
        """Measure a card and report it and any entangled partner."""
        partner = card.entangled_with
        face = card.collapse()
        self._emit_collapsed(card, forced=False)
        touched = [self._owner_of(card)]

        if partner is not None and partner.is_collapsed:
            self._emit_collapsed(partner, forced=True)
            touched.append(self._owner_of(partner))

        if self._pending_entanglement is not None and self._pending_entanglement.is_collapsed:
            self._pending_entanglement = None

        for hand in {id(h): h for h in touched}.values():
            self._emit_hand_value(hand)
        return face

    def _collapse_all(self, hand: Hand) -> None:
        for card in list(hand.superposed_cards):
            # An earlier collapse may already have resolved this card's partner.
            if card.is_superposed:
                self._collapse(card)

    # ------------------------------------------------------------------
    # Round flow
    # ------------------------------------------------------------------

    def _reset_table(self) -> None:
        self.player_hand.clear()
        self.dealer_hand.clear()
        self._registry = EntanglementRegistry()
        self._pending_entanglement = None
        self._natural = False
        self._player_busted = False
        self.last_result = None

        if self.deck.cards_remaining < self.rules.reshuffle_threshold:
            self.deck.shuffle()
            self.events.emit_new(EventType.DECK_SHUFFLED, reason="low")

    def _deal_initial_cards(self) -> None:
        """Deal player, dealer, player, dealer (face down)."""
        self._deal_card(self.player_hand)
        self._deal_card(self.dealer_hand)
        self._deal_card(self.player_hand)
        self._deal_card(self.dealer_hand, face_up=False)

        if self.player_hand.is_blackjack:
            self._natural = True
            self.events.emit_new(EventType.NOTIFICATION, message="Blackjack!")
            self.natural_blackjack()
            self._resolve_round()
            return

        self.deal_complete()

    def _draw_faces(self) -> tuple[CardFace, CardFace]:
        try:
            return self.deck.draw_pair()
        except DeckExhausted:
            logger.warning("Deck exhausted mid-round; reshuffling")
            self.deck.shuffle()
            self.events.emit_new(EventType.DECK_SHUFFLED, reason="exhausted")
            return self.deck.draw_pair()

    def _deal_card(self, hand: Hand, face_up: bool = True) -> QuantumCard:
        """Deal a new quantum card to a hand."""
        face_a, face_b = self._draw_faces()
        card = QuantumCard(face_a, face_b, rng=self._rng, registry=self._registry)
        card.face_up = face_up
        hand.add_card(card)

        self.events.emit_new(
            EventType.CARD_DEALT,
            card_id=card.card_id,
            owner=hand.owner,
            face_up=face_up,
            card=str(card.resolved_face) if face_up else "??",
        )
        self._emit_hand_value(hand)
        return card

    def _bust(self, message: str) -> None:
        self._player_busted = True
        self.events.emit_new(EventType.NOTIFICATION, message=message)
        self.player_busts()
        self._resolve_round()

    def _reveal_hole_card(self) -> None:
        for card in self.dealer_hand:
            if not card.face_up:
                card.face_up = True
                self.events.emit_new(
                    EventType.DEALER_REVEALS,
                    card_id=card.card_id,
                    card=str(card.resolved_face) if card.is_collapsed else f"{card.face_a}|{card.face_b}",
                )
                self._emit_hand_value(self.dealer_hand)

    def _play_dealer(self) -> None:
        """Dealer reveals, measures any superposed card, then draws to 17."""
        self._reveal_hole_card()
        self._collapse_all(self.dealer_hand)

        if not self._player_busted:
            while self.dealer_hand.value_range().min < self.rules.dealer_stands_on:
                self._deal_card(self.dealer_hand)

        self.dealer_done()
        self._resolve_round()

    def _resolve_round(self) -> None:
        """Measure everything left, compare minimum totals and pay out."""
        self._reveal_hole_card()
        self._collapse_all(self.player_hand)
        self._collapse_all(self.dealer_hand)

        player_total = self.player_hand.value_range().min
        dealer_total = self.dealer_hand.value_range().min
        stake = Decimal(self.bet)

        if self._natural:
            if len(self.dealer_hand) == 2 and dealer_total == BLACKJACK:
                outcome, payout = RoundOutcome.PUSH, stake
                message = "Push! Both you and the dealer have Blackjack."
            else:
                outcome = RoundOutcome.BLACKJACK
                payout = stake * (1 + Decimal(str(self.rules.blackjack_payout)))
                message = "Blackjack! You win 3:2."
        elif self._player_busted or player_total > BLACKJACK:
            outcome, payout = RoundOutcome.LOSE, Decimal("0")
            message = "Dealer wins! You went over 21."
        else:
            comparison = evaluate_hands(self.player_hand, self.dealer_hand)
            if comparison > 0:
                outcome = RoundOutcome.WIN
                payout = stake * (1 + Decimal(str(self.rules.win_payout)))
                if dealer_total > BLACKJACK:
                    message = "You win! Dealer went over 21."
                else:
                    message = f"You win! Your {player_total} beats dealer's {dealer_total}."
            elif comparison < 0:
                outcome, payout = RoundOutcome.LOSE, Decimal("0")
                message = f"Dealer wins with {dealer_total} against your {player_total}."
            else:
                outcome, payout = RoundOutcome.PUSH, stake
                message = f"Push! Both you and the dealer have {player_total}."

        self.session.credit(payout)
        self.last_result = RoundResult(outcome, payout, player_total, dealer_total)
        logger.info(
            "Round settled: %s (player %d, dealer %d), payout %s, bankroll %s",
            outcome.value,
            player_total,
            dealer_total,
            payout,
            self.session.bankroll,
        )

        self.events.emit_new(
            EventType.ROUND_RESULT,
            outcome=outcome.value,
            payout=payout,
            player_total=player_total,
            dealer_total=dealer_total,
            bankroll=self.session.bankroll,
        )
        self.events.emit_new(EventType.NOTIFICATION, message=message)
        self._emit_bankroll()

        self.settle()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _on_state_changed(self) -> None:
        logger.debug("Round state -> %s", self.state.name)
        self.events.emit_new(EventType.ROUND_STATE_CHANGED, state=self.state.name)

    def _reject(self, exc: QuantumGameError) -> ActionResult:
        logger.debug("Rejected intent: %s (%s)", exc.reason, exc.message)
        self.events.emit_new(
            EventType.INVALID_ACTION,
            error=exc.kind.value,
            reason=exc.reason,
            message=exc.message,
            state=self.state.name,
        )
        return ActionResult.from_error(exc)

    def _require_player_turn(self) -> None:
        if self.state != RoundState.PLAYER_TURN:
            raise InvalidStateTransition(
                "not_player_turn",
                f"Not allowed during {self.state}",
            )

    def _require_chip(self, kind: ChipKind) -> None:
        if not self.chips.has(kind):
            raise InsufficientResource(
                f"no_{kind.value}_chips",
                f"No {kind.display_name} chips left.",
            )

    @staticmethod
    def _parse_chip(kind: ChipKind | str) -> ChipKind:
        try:
            return ChipKind.parse(kind)
        except (ValueError, AttributeError):
            raise IneligibleCardOperation(
                "unknown_chip_kind", f"Unknown chip kind: {kind!r}"
            ) from None

    def _find_card(self, ref: CardRef) -> QuantumCard:
        for hand in (self.player_hand, self.dealer_hand):
            for card in hand:
                if card is ref or (isinstance(ref, int) and card.card_id == ref):
                    if not card.face_up:
                        raise IneligibleCardOperation("card_face_down", REASON_MESSAGES["card_face_down"])
                    return card
        raise IneligibleCardOperation("card_not_on_table", REASON_MESSAGES["card_not_on_table"])

    def _owner_of(self, card: QuantumCard) -> Hand:
        return self.dealer_hand if card in self.dealer_hand else self.player_hand

    def _emit_collapsed(self, card: QuantumCard, forced: bool) -> None:
        self.events.emit_new(
            EventType.CARD_COLLAPSED,
            card_id=card.card_id,
            owner=self._owner_of(card).owner,
            face=str(card.resolved_face),
            color=card.resolved_face.color.value,
            forced=forced,
        )

    def _emit_hand_value(self, hand: Hand) -> None:
        value_range = hand.visible_value_range()
        uncertain = any(c.is_superposed for c in hand if c.face_up)
        self.events.emit_new(
            EventType.HAND_VALUE_CHANGED,
            owner=hand.owner,
            min=value_range.min,
            max=value_range.max,
            uncertain=uncertain,
            display=format_value_range(value_range, uncertain),
        )

    def _emit_chips(self) -> None:
        self.events.emit_new(EventType.CHIP_COUNT_CHANGED, chips=self.chips.as_dict())

    def _emit_bankroll(self) -> None:
        self.events.emit_new(EventType.BANKROLL_CHANGED, bankroll=self.session.bankroll)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def can_bet(self) -> bool:
        return self.state in (RoundState.IDLE, RoundState.BETTING, RoundState.GAME_OVER)

    @property
    def can_hit(self) -> bool:
        """Check if hitting is allowed."""
        return self.state == RoundState.PLAYER_TURN and not self.player_hand.is_busted

    @property
    def can_stand(self) -> bool:
        """Check if standing is allowed."""
        return self.state == RoundState.PLAYER_TURN

    def can_use_chip(self, kind: ChipKind | None = None) -> bool:
        """Check if a chip (of a kind, or any) could be spent now."""
        if self.state != RoundState.PLAYER_TURN:
            return False
        if kind is None:
            return any(self.chips.has(k) for k in ChipKind)
        return self.chips.has(kind)

    def view(self) -> TableView:
        """Snapshot of the table for a renderer."""
        pending = self._pending_entanglement
        return TableView(
            state=self.state.name,
            bet=self.bet,
            bankroll=self.session.bankroll,
            chips=self.chips.as_dict(),
            player_hand=HandView.from_hand(self.player_hand),
            dealer_hand=HandView.from_hand(self.dealer_hand),
            pending_entanglement=pending.card_id if pending is not None else None,
            can_hit=self.can_hit,
            can_stand=self.can_stand,
            can_bet=self.can_bet,
            can_use_chip=self.can_use_chip(),
            cards_remaining=self.deck.cards_remaining,
        )
