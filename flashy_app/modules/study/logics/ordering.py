"""
Working-list preparation for a study run: filter, then order.
Pure functions over card variants.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar

from ..cards import StudyCard
from ..options import ORDER_LINEAR, StudyOptions

C = TypeVar('C', bound=StudyCard)


def filter_cards(cards: Sequence[C], options: StudyOptions) -> List[C]:
    """Drop ignored cards, then keep only favorites, as the options ask."""
    result = list(cards)
    if options.exclude_ignored:
        result = [c for c in result if not c.ignored]
    if options.favorites_only:
        result = [c for c in result if c.favorite]
    return result


def order_cards(cards: Sequence[C], options: StudyOptions, rng: Optional[random.Random] = None) -> List[C]:
    if options.order == ORDER_LINEAR:
        # sorted() is stable, so equal positions keep their input order
        return sorted(cards, key=lambda c: c.position or 0)
    return reshuffle(cards, rng)


def reshuffle(cards: Sequence[C], rng: Optional[random.Random] = None) -> List[C]:
    shuffled = list(cards)
    (rng or random).shuffle(shuffled)
    return shuffled


def prepare_working_list(
    cards: Sequence[C],
    options: StudyOptions,
    rng: Optional[random.Random] = None,
) -> List[C]:
    return order_cards(filter_cards(cards, options), options, rng)
