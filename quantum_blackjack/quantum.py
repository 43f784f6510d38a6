"""Quantum cards: two candidate faces, superposition, entanglement and collapse."""

import itertools
import logging
import math
import weakref
from enum import Enum, auto
from random import Random
from typing import Optional

from quantum_blackjack.cards import CardFace, Color

logger = logging.getLogger(__name__)

_card_ids = itertools.count(1)

EQUAL_AMPLITUDE = complex(1 / math.sqrt(2), 0)


class CardMode(Enum):
    """Whether a card shows one face or holds both candidates."""

    COLLAPSED = auto()
    SUPERPOSED = auto()

    def __str__(self) -> str:
        return self.name.lower()


class EntanglementRegistry:
    """
    Symmetric card-id to partner-id relation.

    Links are stored in both directions and always added or removed as a
    pair, so a one-sided link cannot exist. Cards are held weakly; a
    registry never keeps a discarded card alive.
    """

    def __init__(self) -> None:
        self._partners: dict[int, int] = {}
        self._cards: "weakref.WeakValueDictionary[int, QuantumCard]" = (
            weakref.WeakValueDictionary()
        )

    def register(self, card: "QuantumCard") -> None:
        self._cards[card.card_id] = card

    def link(self, card_a: "QuantumCard", card_b: "QuantumCard") -> None:
        if card_a.card_id == card_b.card_id:
            raise ValueError("A card cannot be entangled with itself")
        if card_a.card_id in self._partners or card_b.card_id in self._partners:
            raise ValueError("Card is already entangled")
        self.register(card_a)
        self.register(card_b)
        self._partners[card_a.card_id] = card_b.card_id
        self._partners[card_b.card_id] = card_a.card_id

    def unlink(self, card: "QuantumCard") -> Optional["QuantumCard"]:
        """Remove the link on both sides; return the former partner."""
        partner_id = self._partners.pop(card.card_id, None)
        if partner_id is None:
            return None
        self._partners.pop(partner_id, None)
        return self._cards.get(partner_id)

    def partner_of(self, card: "QuantumCard") -> Optional["QuantumCard"]:
        partner_id = self._partners.get(card.card_id)
        if partner_id is None:
            return None
        return self._cards.get(partner_id)

    def is_linked(self, card: "QuantumCard") -> bool:
        return card.card_id in self._partners

    def pairs(self) -> list[tuple[int, int]]:
        """Each entangled pair once, lower id first."""
        return sorted({tuple(sorted(p)) for p in self._partners.items()})

    def clear(self) -> None:
        self._partners.clear()
        self._cards.clear()

    def __len__(self) -> int:
        return len(self._partners) // 2


# Used by cards created without an explicit registry.
default_registry = EntanglementRegistry()


class QuantumCard:
    """
    A card with two candidate faces.

    Cards start collapsed on ``face_a``. While superposed the card holds
    both faces with complex amplitudes; measuring it picks one face with
    probability ``|amplitude|**2`` and, if it was entangled, forces the
    partner to a face of the same color.
    """

    def __init__(
        self,
        face_a: CardFace,
        face_b: CardFace,
        rng: Random | None = None,
        registry: EntanglementRegistry | None = None,
    ) -> None:
        if face_a == face_b:
            raise ValueError(f"Candidate faces must differ, got {face_a} twice")

        self.card_id = next(_card_ids)
        self.face_a = face_a
        self.face_b = face_b
        self.mode = CardMode.COLLAPSED
        self.resolved_face: CardFace | None = face_a
        self.amplitude_a = complex(1, 0)
        self.amplitude_b = complex(0, 0)
        self.face_up = True

        self._rng = rng or Random()
        self._registry = registry if registry is not None else default_registry
        self._registry.register(self)

    def __repr__(self) -> str:
        if self.mode is CardMode.COLLAPSED:
            return f"QuantumCard(#{self.card_id}, {self.resolved_face})"
        return f"QuantumCard(#{self.card_id}, {self.face_a}|{self.face_b})"

    @property
    def registry(self) -> EntanglementRegistry:
        return self._registry

    @property
    def is_superposed(self) -> bool:
        return self.mode is CardMode.SUPERPOSED

    @property
    def is_collapsed(self) -> bool:
        return self.mode is CardMode.COLLAPSED

    @property
    def entangled_with(self) -> Optional["QuantumCard"]:
        return self._registry.partner_of(self)

    @property
    def is_entangled(self) -> bool:
        return self._registry.is_linked(self)

    @property
    def faces(self) -> tuple[CardFace, CardFace]:
        return self.face_a, self.face_b

    @property
    def is_ace_eligible(self) -> bool:
        """True if the card's value could be an 11."""
        if self.is_collapsed:
            return self.resolved_face.is_ace
        return self.face_a.is_ace or self.face_b.is_ace

    def probability(self, face: CardFace) -> float:
        """Probability of measuring ``face``."""
        if self.is_collapsed:
            return 1.0 if face == self.resolved_face else 0.0
        if face == self.face_a:
            return abs(self.amplitude_a) ** 2
        if face == self.face_b:
            return abs(self.amplitude_b) ** 2
        return 0.0

    def possible_values(self) -> list[int]:
        if self.is_collapsed:
            return [self.resolved_face.value]
        return [self.face_a.value, self.face_b.value]

    def value_range(self) -> tuple[int, int]:
        """
        Best and worst case blackjack value of this card.

        Amplitudes do not narrow the range; they only affect the eventual
        measurement.
        """
        values = self.possible_values()
        return min(values), max(values)

    def face_matching(self, color: Color) -> CardFace | None:
        """First candidate face of the given color, preferring ``face_a``."""
        for face in self.faces:
            if face.color is color:
                return face
        return None

    def superpose_blocker(self) -> str | None:
        if self.is_superposed:
            return "already_superposed"
        if self.is_entangled:
            return "entangled"
        return None

    def superpose(self) -> bool:
        """Put the card into an equal superposition of its two faces."""
        if self.superpose_blocker() is not None:
            return False
        self.mode = CardMode.SUPERPOSED
        self.resolved_face = None
        self.amplitude_a = EQUAL_AMPLITUDE
        self.amplitude_b = EQUAL_AMPLITUDE
        logger.debug("Card #%d superposed: %s | %s", self.card_id, self.face_a, self.face_b)
        return True

    def entangle_blocker(self, other: "QuantumCard") -> str | None:
        if other is self:
            return "same_card"
        if not self.is_superposed:
            return "not_superposed"
        if not other.is_superposed:
            return "partner_not_superposed"
        if self.is_entangled:
            return "already_entangled"
        if other.is_entangled:
            return "partner_already_entangled"
        if other.registry is not self._registry:
            return "different_registry"
        return None

    def entangle_with(self, other: "QuantumCard") -> bool:
        """Link two superposed, unentangled cards."""
        if self.entangle_blocker(other) is not None:
            return False
        self._registry.link(self, other)
        logger.debug("Cards #%d and #%d entangled", self.card_id, other.card_id)
        return True

    def collapse(self, forced_face: CardFace | None = None) -> CardFace | None:
        """
        Measure the card.

        Args:
            forced_face: Resolve to this candidate instead of drawing

        Returns:
            The resolved face, or None if the card was not superposed
        """
        if not self.is_superposed:
            return None
        if forced_face is not None and forced_face not in self.faces:
            raise ValueError(f"{forced_face} is not a candidate face of card #{self.card_id}")

        face = forced_face if forced_face is not None else self._measure()
        partner = self._registry.unlink(self)
        self._resolve(face)

        # Partner's link is already gone, so this stops after one hop.
        if partner is not None and partner.is_superposed:
            target = partner.face_matching(face.color)
            if target is None:
                logger.warning(
                    "Card #%d has no %s face to match card #%d; measuring it freely",
                    partner.card_id,
                    face.color,
                    self.card_id,
                )
                target = partner._measure()
            partner._resolve(target)

        return face

    def _measure(self) -> CardFace:
        if self._rng.random() < abs(self.amplitude_a) ** 2:
            return self.face_a
        return self.face_b

    def _resolve(self, face: CardFace) -> None:
        self.mode = CardMode.COLLAPSED
        self.resolved_face = face
        if face == self.face_a:
            self.amplitude_a, self.amplitude_b = complex(1, 0), complex(0, 0)
        else:
            self.amplitude_a, self.amplitude_b = complex(0, 0), complex(1, 0)
        logger.debug("Card #%d collapsed to %s", self.card_id, face)
