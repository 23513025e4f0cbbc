"""
Level table - fixed XP thresholds and the xp -> level lookup.
"""

from typing import List

from pydantic import BaseModel


class Level(BaseModel):
    """One learner level and the XP needed to reach it."""

    level: int
    title: str
    title_catalan: str
    xp_required: int


LEVELS: List[Level] = [
    Level(level=1, title="Beginner", title_catalan="Principiant", xp_required=0),
    Level(level=2, title="Apprentice", title_catalan="Aprenent", xp_required=100),
    Level(level=3, title="Student", title_catalan="Estudiant", xp_required=300),
    Level(level=4, title="Scholar", title_catalan="Erudit", xp_required=600),
    Level(level=5, title="Linguist", title_catalan="Lingüista", xp_required=1000),
    Level(level=6, title="Expert", title_catalan="Expert", xp_required=1500),
    Level(level=7, title="Master", title_catalan="Mestre", xp_required=2200),
    Level(level=8, title="Sage", title_catalan="Savi", xp_required=3000),
    Level(level=9, title="Virtuoso", title_catalan="Virtuós", xp_required=4000),
    Level(level=10, title="Polyglot", title_catalan="Poliglot", xp_required=5500),
    Level(level=11, title="Ambassador", title_catalan="Ambaixador", xp_required=7500),
    Level(level=12, title="Catalan Champion", title_catalan="Campió Català", xp_required=10000),
]


def get_level_for_xp(xp: int) -> Level:
    """Return the highest level whose threshold is <= xp."""
    for level in reversed(LEVELS):
        if xp >= level.xp_required:
            return level
    return LEVELS[0]


def level_for_xp(xp: int) -> int:
    """Level number for an XP total. Monotone in xp."""
    return get_level_for_xp(xp).level
