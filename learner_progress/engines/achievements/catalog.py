"""
Default achievement catalog.
"""

from typing import Dict, List

from learner_progress.schemas.catalog import (
    Achievement,
    AchievementCategory,
    AchievementRarity,
    CardsMasteredRequirement,
    CardsReviewedRequirement,
    CategoryMasteredRequirement,
    FirstActionRequirement,
    LevelRequirement,
    PerfectStreakRequirement,
    StreakRequirement,
)

_C = AchievementCategory
_R = AchievementRarity

ACHIEVEMENTS: List[Achievement] = [
    # First actions
    Achievement(id="first_card", name="First Steps", description="Review your first card", icon="🐣",
                category=_C.SPECIAL, requirement=FirstActionRequirement(action="review"),
                xp_reward=10, rarity=_R.COMMON),
    Achievement(id="first_import", name="Collector", description="Import your first flashcard set", icon="📚",
                category=_C.SPECIAL, requirement=FirstActionRequirement(action="import"),
                xp_reward=15, rarity=_R.COMMON),

    # Streaks
    Achievement(id="streak_3", name="Getting Started", description="3-day study streak", icon="✨",
                category=_C.STREAK, requirement=StreakRequirement(days=3), xp_reward=25, rarity=_R.COMMON),
    Achievement(id="streak_7", name="Week Warrior", description="7-day study streak", icon="🔥",
                category=_C.STREAK, requirement=StreakRequirement(days=7), xp_reward=50, rarity=_R.UNCOMMON),
    Achievement(id="streak_14", name="Fortnight Fighter", description="14-day study streak", icon="💪",
                category=_C.STREAK, requirement=StreakRequirement(days=14), xp_reward=100, rarity=_R.RARE),
    Achievement(id="streak_30", name="Monthly Master", description="30-day study streak", icon="💎",
                category=_C.STREAK, requirement=StreakRequirement(days=30), xp_reward=200, rarity=_R.EPIC),
    Achievement(id="streak_100", name="Century Champion", description="100-day study streak", icon="👑",
                category=_C.STREAK, requirement=StreakRequirement(days=100), xp_reward=500, rarity=_R.LEGENDARY),

    # Cards reviewed
    Achievement(id="cards_10", name="Warm Up", description="Review 10 cards", icon="📝",
                category=_C.DEDICATION, requirement=CardsReviewedRequirement(count=10), xp_reward=15, rarity=_R.COMMON),
    Achievement(id="cards_50", name="Getting Serious", description="Review 50 cards", icon="📖",
                category=_C.DEDICATION, requirement=CardsReviewedRequirement(count=50), xp_reward=30, rarity=_R.COMMON),
    Achievement(id="cards_100", name="Century", description="Review 100 cards", icon="💯",
                category=_C.DEDICATION, requirement=CardsReviewedRequirement(count=100), xp_reward=50, rarity=_R.UNCOMMON),
    Achievement(id="cards_500", name="Half Thousand", description="Review 500 cards", icon="🎯",
                category=_C.DEDICATION, requirement=CardsReviewedRequirement(count=500), xp_reward=100, rarity=_R.RARE),
    Achievement(id="cards_1000", name="Millennium", description="Review 1000 cards", icon="🏆",
                category=_C.DEDICATION, requirement=CardsReviewedRequirement(count=1000), xp_reward=250, rarity=_R.EPIC),

    # Cards mastered
    Achievement(id="master_10", name="Apprentice", description="Master 10 cards", icon="🌱",
                category=_C.MASTERY, requirement=CardsMasteredRequirement(count=10), xp_reward=40, rarity=_R.COMMON),
    Achievement(id="master_25", name="Rising Star", description="Master 25 cards", icon="⭐",
                category=_C.MASTERY, requirement=CardsMasteredRequirement(count=25), xp_reward=75, rarity=_R.UNCOMMON),
    Achievement(id="master_50", name="Knowledge Keeper", description="Master 50 cards", icon="🧠",
                category=_C.MASTERY, requirement=CardsMasteredRequirement(count=50), xp_reward=150, rarity=_R.RARE),
    Achievement(id="master_100", name="Sage", description="Master 100 cards", icon="🦉",
                category=_C.MASTERY, requirement=CardsMasteredRequirement(count=100), xp_reward=300, rarity=_R.EPIC),

    # Perfect answers in a row
    Achievement(id="perfect_5", name="Sharp Mind", description="5 perfect answers in a row", icon="✅",
                category=_C.SPEED, requirement=PerfectStreakRequirement(count=5), xp_reward=25, rarity=_R.COMMON),
    Achievement(id="perfect_10", name="Flawless", description="10 perfect answers in a row", icon="💫",
                category=_C.SPEED, requirement=PerfectStreakRequirement(count=10), xp_reward=50, rarity=_R.UNCOMMON),
    Achievement(id="perfect_20", name="Untouchable", description="20 perfect answers in a row", icon="🌟",
                category=_C.SPEED, requirement=PerfectStreakRequirement(count=20), xp_reward=100, rarity=_R.RARE),

    # Levels
    Achievement(id="level_5", name="Linguist", description="Reach level 5", icon="📈",
                category=_C.MASTERY, requirement=LevelRequirement(level=5), xp_reward=75, rarity=_R.UNCOMMON),
    Achievement(id="level_10", name="Polyglot", description="Reach level 10", icon="🗣️",
                category=_C.MASTERY, requirement=LevelRequirement(level=10), xp_reward=200, rarity=_R.EPIC),

    # Special
    Achievement(id="verbs_master", name="Verb Virtuoso", description="Master all verb cards", icon="⚡",
                category=_C.SPECIAL, requirement=CategoryMasteredRequirement(category="Verbs"),
                xp_reward=150, rarity=_R.RARE),
]


def achievements_by_id(catalog: List[Achievement] = ACHIEVEMENTS) -> Dict[str, Achievement]:
    return {achievement.id: achievement for achievement in catalog}
