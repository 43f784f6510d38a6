"""Player session state: bankroll and chips, with explicit save and load."""

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal

from pydantic import ValidationError

from quantum_blackjack.chips import ChipInventory
from quantum_blackjack.errors import InsufficientResource
from quantum_blackjack.rules import TableRules
from quantum_blackjack.schemas import SessionSnapshot

logger = logging.getLogger(__name__)


@dataclass
class PlayerSession:
    """Resources the player carries from round to round."""

    bankroll: Decimal = Decimal("1000")
    chips: ChipInventory = field(default_factory=ChipInventory)

    @classmethod
    def new(cls, rules: TableRules) -> "PlayerSession":
        """Fresh session with the table's starting bankroll and chips."""
        return cls(
            bankroll=rules.initial_bankroll,
            chips=ChipInventory(rules.starting_chips, rules.chip_prices),
        )

    def debit(self, amount: Decimal) -> None:
        """
        Take money from the bankroll.

        Raises:
            InsufficientResource: If the bankroll cannot cover the amount
        """
        if amount > self.bankroll:
            raise InsufficientResource(
                "insufficient_bankroll",
                f"Need {amount}, only {self.bankroll} available",
            )
        self.bankroll -= amount

    def credit(self, amount: Decimal) -> None:
        self.bankroll += amount

    def to_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(bankroll=self.bankroll, chips=self.chips.as_dict())

    @classmethod
    def from_snapshot(
        cls,
        snapshot: SessionSnapshot,
        rules: TableRules | None = None,
    ) -> "PlayerSession":
        prices = rules.chip_prices if rules is not None else None
        return cls(
            bankroll=snapshot.bankroll,
            chips=ChipInventory.from_dict(snapshot.chips, prices),
        )


class SessionStore:
    """JSON file persistence for a player session."""

    def __init__(self, path: str | None = None) -> None:
        if path is None:
            from quantum_blackjack.config import config

            path = config.session_path
        self.path = path

    def load(self, rules: TableRules | None = None) -> PlayerSession | None:
        """Load the saved session, or None if there is no usable file."""
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                snapshot = SessionSnapshot.model_validate_json(f.read())
            return PlayerSession.from_snapshot(snapshot, rules)
        except (OSError, ValidationError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return None

    def save(self, session: PlayerSession) -> None:
        """Write the session to disk."""
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(session.to_snapshot().model_dump_json(indent=2))
        logger.info("Saved session to %s", self.path)

    def delete(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
