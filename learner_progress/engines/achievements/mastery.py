"""
Card mastery collaborator.

The spaced-repetition store owns review intervals; this engine only consumes
a per-card, per-direction mastered flag.
"""

from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from pydantic import BaseModel

ENGLISH_TO_CATALAN = "english-to-catalan"
CATALAN_TO_ENGLISH = "catalan-to-english"
DIRECTIONS: Tuple[str, str] = (ENGLISH_TO_CATALAN, CATALAN_TO_ENGLISH)

MASTERY_INTERVAL_DAYS = 21


class MasteryCard(BaseModel):
    """A flashcard as seen by the achievement rules."""

    id: str
    category: Optional[str] = None


class CardMasterySource(Protocol):
    def cards(self) -> Sequence[MasteryCard]:
        ...

    def is_mastered(self, card_id: str, direction: str) -> bool:
        ...


class IntervalMasterySource:
    """
    CardMasterySource built from review intervals keyed by (card_id, direction).
    A direction with no interval recorded is not mastered.
    """

    def __init__(
        self,
        cards: Sequence[MasteryCard],
        intervals: Optional[Mapping[Tuple[str, str], int]] = None,
        threshold_days: int = MASTERY_INTERVAL_DAYS,
    ):
        self._cards: List[MasteryCard] = list(cards)
        self._intervals: Dict[Tuple[str, str], int] = dict(intervals or {})
        self.threshold_days = threshold_days

    def cards(self) -> Sequence[MasteryCard]:
        return list(self._cards)

    def is_mastered(self, card_id: str, direction: str) -> bool:
        return self._intervals.get((card_id, direction), 0) >= self.threshold_days

    def set_interval(self, card_id: str, direction: str, days: int) -> None:
        self._intervals[(card_id, direction)] = days


class EmptyMasterySource:
    """No cards at all."""

    def cards(self) -> Sequence[MasteryCard]:
        return []

    def is_mastered(self, card_id: str, direction: str) -> bool:
        return False


def count_mastered_cards(source: CardMasterySource) -> int:
    """Cards mastered in at least one direction."""
    return sum(
        1
        for card in source.cards()
        if any(source.is_mastered(card.id, direction) for direction in DIRECTIONS)
    )


def category_mastery(source: CardMasterySource, category: str) -> Tuple[int, int]:
    """(cards mastered in both directions, cards in category)."""
    in_category = [card for card in source.cards() if card.category == category]
    mastered = sum(
        1
        for card in in_category
        if all(source.is_mastered(card.id, direction) for direction in DIRECTIONS)
    )
    return mastered, len(in_category)
