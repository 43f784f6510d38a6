"""Consumable quantum chips that gate card operations."""

import logging
from decimal import Decimal
from enum import Enum
from typing import Mapping

logger = logging.getLogger(__name__)


class ChipKind(Enum):
    """Chip types and the operation each one pays for."""

    SUPERPOSE = "superpose"
    COLLAPSE = "collapse"
    ENTANGLE = "entangle"

    def __str__(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        """Name printed on the chip."""
        return {
            ChipKind.SUPERPOSE: "Hadamard",
            ChipKind.COLLAPSE: "Schrödinger",
            ChipKind.ENTANGLE: "Entanglement",
        }[self]

    @classmethod
    def parse(cls, value: "str | ChipKind") -> "ChipKind":
        """Accept a ChipKind, its value, or its display name."""
        if isinstance(value, ChipKind):
            return value
        key = value.strip().lower()
        for kind in cls:
            if key in (kind.value, kind.display_name.lower(), kind.name.lower()):
                return kind
        if key == "schrodinger":
            return cls.COLLAPSE
        raise ValueError(f"Unknown chip kind: {value}")


DEFAULT_STARTING_CHIPS: dict[ChipKind, int] = {
    ChipKind.SUPERPOSE: 3,
    ChipKind.COLLAPSE: 2,
    ChipKind.ENTANGLE: 2,
}

DEFAULT_CHIP_PRICES: dict[ChipKind, int] = {
    ChipKind.SUPERPOSE: 100,
    ChipKind.COLLAPSE: 100,
    ChipKind.ENTANGLE: 150,
}


class ChipInventory:
    """Counts of each chip kind the player holds."""

    def __init__(
        self,
        counts: Mapping[ChipKind, int] | None = None,
        prices: Mapping[ChipKind, int] | None = None,
    ) -> None:
        self._counts = {kind: 0 for kind in ChipKind}
        self._prices = dict(DEFAULT_CHIP_PRICES)
        if prices:
            self._prices.update(prices)
        source = DEFAULT_STARTING_CHIPS if counts is None else counts
        for kind, count in source.items():
            self.add(kind, count)

    def count(self, kind: ChipKind) -> int:
        return self._counts[kind]

    def price(self, kind: ChipKind) -> int:
        return self._prices[kind]

    def has(self, kind: ChipKind) -> bool:
        return self._counts[kind] > 0

    def add(self, kind: ChipKind, amount: int = 1) -> None:
        if amount < 0:
            raise ValueError("Cannot add a negative number of chips")
        self._counts[kind] += amount

    def use(self, kind: ChipKind) -> bool:
        """Spend one chip; False if none are left."""
        if self._counts[kind] == 0:
            return False
        self._counts[kind] -= 1
        return True

    def refund(self, kind: ChipKind) -> None:
        self._counts[kind] += 1

    def purchase(self, kind: ChipKind, bankroll: Decimal) -> Decimal | None:
        """
        Buy one chip.

        Args:
            kind: Chip to buy
            bankroll: Funds available

        Returns:
            The bankroll left after paying, or None if it cannot cover the price
        """
        price = Decimal(self._prices[kind])
        if bankroll < price:
            return None
        self._counts[kind] += 1
        logger.info("Bought %s chip for %s", kind.display_name, price)
        return bankroll - price

    def as_dict(self) -> dict[str, int]:
        return {kind.value: count for kind, count in self._counts.items()}

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, int],
        prices: Mapping[ChipKind, int] | None = None,
    ) -> "ChipInventory":
        return cls({ChipKind.parse(k): v for k, v in data.items()}, prices)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChipInventory):
            return NotImplemented
        return self._counts == other._counts

    def __repr__(self) -> str:
        return f"ChipInventory({self.as_dict()})"
