"""
Achievement Catalog - the list of achievements and their unlock rules.

Pure Python: rules read attributes of a stats object (normally
``UserAchievementStats``) and never touch the database.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

CATEGORY_GETTING_STARTED = 'getting-started'
CATEGORY_STREAKS = 'study-streaks'
CATEGORY_MASTERY = 'study-mastery'
CATEGORY_DECK_CREATION = 'deck-creation'
CATEGORY_COMMUNITY = 'community'
CATEGORY_HIDDEN = 'hidden'

DIFFICULTY_FLAGS = {
    'beginner': 'completed_beginner_deck',
    'intermediate': 'completed_intermediate_deck',
    'advanced': 'completed_advanced_deck',
    'expert': 'completed_expert_deck',
}

CARD_TYPE_FLAGS = {
    'classic-flip': 'created_classic_flip_card',
    'multiple-choice': 'created_multiple_choice_card',
    'type-answer': 'created_type_answer_card',
}


@dataclass(frozen=True)
class Achievement:
    id: str
    icon: str
    title: str
    description: str
    category: str
    rule: Optional[Callable[[Any], bool]] = None
    # Meta achievements unlock from the number of other unlocked achievements
    meta_threshold: int = 0

    @property
    def meta(self) -> bool:
        return self.rule is None

    def to_dict(self) -> Dict[str, str]:
        return {
            'id': self.id,
            'icon': self.icon,
            'title': self.title,
            'description': self.description,
            'category': self.category,
        }


def _at_least(attr: str, value: int) -> Callable[[Any], bool]:
    return lambda stats: (getattr(stats, attr, 0) or 0) >= value


def _flag(name: str) -> Callable[[Any], bool]:
    return lambda stats: bool((getattr(stats, 'flags', None) or {}).get(name))


def _all_flags(names: Iterable[str]) -> Callable[[Any], bool]:
    names = tuple(names)
    return lambda stats: all(_flag(name)(stats) for name in names)


def _accuracy_expert(stats) -> bool:
    return (stats.cards_reviewed or 0) >= 100 and (stats.average_accuracy or 0) >= 90


ACHIEVEMENTS: List[Achievement] = [
    # Getting started
    Achievement('first-deck', '🎉', 'First Deck', 'Create your first deck',
                CATEGORY_GETTING_STARTED, _at_least('decks_created', 1)),
    Achievement('first-study', '📖', 'First Study Session', 'Complete your first study session',
                CATEGORY_GETTING_STARTED, _at_least('total_study_sessions', 1)),
    Achievement('memory-spark', '✨', 'Memory Spark', 'Review your first 10 cards',
                CATEGORY_GETTING_STARTED, _at_least('cards_reviewed', 10)),
    Achievement('personalized', '🎨', 'Personalized', "Customize your first deck's emoji and color",
                CATEGORY_GETTING_STARTED, _flag('customized_deck_theme')),

    # Streaks and time of day
    Achievement('on-a-roll', '🔥', 'On a Roll', 'Study 3 days in a row',
                CATEGORY_STREAKS, _at_least('study_streak', 3)),
    Achievement('week-warrior', '⚡', 'Week Warrior', 'Study 7 days in a row',
                CATEGORY_STREAKS, _at_least('study_streak', 7)),
    Achievement('unstoppable', '💪', 'Unstoppable', 'Maintain a 14-day study streak',
                CATEGORY_STREAKS, _at_least('study_streak', 14)),
    Achievement('dedication', '📅', 'Dedication', 'Maintain a 30-day study streak',
                CATEGORY_STREAKS, _at_least('study_streak', 30)),
    Achievement('legendary-streak', '🏆', 'Legendary Streak', 'Study every day for 100 days',
                CATEGORY_STREAKS, _at_least('study_streak', 100)),
    Achievement('early-bird', '🌅', 'Early Bird', 'Study before 8 AM',
                CATEGORY_STREAKS, _flag('studied_before_eight_am')),
    Achievement('night-owl', '🦉', 'Night Owl', 'Study between midnight and 3 AM',
                CATEGORY_STREAKS, _flag('studied_after_midnight')),

    # Mastery
    Achievement('perfect-score', '💯', 'Perfect Score', 'Get every card correct in a study session',
                CATEGORY_MASTERY, _at_least('perfect_scores', 1)),
    Achievement('ace-student', '🎓', 'Ace Student', 'Achieve 5 perfect scores',
                CATEGORY_MASTERY, _at_least('perfect_scores', 5)),
    Achievement('quick-learner', '💡', 'Quick Learner', 'Get 20 cards correct in a row',
                CATEGORY_MASTERY, _at_least('correct_answers_in_row', 20)),
    Achievement('unstoppable-genius', '🧠', 'Unstoppable Genius', 'Get 50 cards correct in a row',
                CATEGORY_MASTERY, _at_least('correct_answers_in_row', 50)),
    Achievement('hundred-cards', '🎯', 'Century Reviewer', 'Review 100 cards total',
                CATEGORY_MASTERY, _at_least('cards_reviewed', 100)),
    Achievement('five-hundred-cards', '🏅', 'Knowledge Seeker', 'Review 500 cards total',
                CATEGORY_MASTERY, _at_least('cards_reviewed', 500)),
    Achievement('thousand-cards', '🌟', 'Master Learner', 'Review 1,000 cards total',
                CATEGORY_MASTERY, _at_least('cards_reviewed', 1000)),
    Achievement('accuracy-expert', '🎖️', 'Accuracy Expert', 'Maintain 90%+ accuracy over 100 cards',
                CATEGORY_MASTERY, _accuracy_expert),
    Achievement('marathon-session', '🏃', 'Marathon Session', 'Study for 60+ minutes without stopping',
                CATEGORY_MASTERY, _flag('studied_sixty_minutes_nonstop')),
    Achievement('ultra-marathon', '🚀', 'Ultra Marathon', 'Study for 3+ hours in one day',
                CATEGORY_MASTERY, _flag('studied_three_hours_in_one_day')),
    Achievement('beginner-master', '🟢', 'Beginner Master', 'Complete a beginner difficulty deck',
                CATEGORY_MASTERY, _flag(DIFFICULTY_FLAGS['beginner'])),
    Achievement('intermediate-master', '🟡', 'Intermediate Master', 'Complete an intermediate difficulty deck',
                CATEGORY_MASTERY, _flag(DIFFICULTY_FLAGS['intermediate'])),
    Achievement('advanced-master', '🟠', 'Advanced Master', 'Complete an advanced difficulty deck',
                CATEGORY_MASTERY, _flag(DIFFICULTY_FLAGS['advanced'])),
    Achievement('expert-master', '🔴', 'Expert Master', 'Complete an expert difficulty deck',
                CATEGORY_MASTERY, _flag(DIFFICULTY_FLAGS['expert'])),
    Achievement('ultimate-master', '🌈', 'Ultimate Master', 'Complete a deck of every difficulty',
                CATEGORY_MASTERY, _all_flags(DIFFICULTY_FLAGS.values())),

    # Deck creation
    Achievement('deck-builder', '🏗️', 'Deck Builder', 'Create 5 decks',
                CATEGORY_DECK_CREATION, _at_least('decks_created', 5)),
    Achievement('deck-architect', '🏛️', 'Deck Architect', 'Create 10 decks',
                CATEGORY_DECK_CREATION, _at_least('decks_created', 10)),
    Achievement('deck-master', '👑', 'Deck Master', 'Create 20 decks',
                CATEGORY_DECK_CREATION, _at_least('decks_created', 20)),
    Achievement('card-variety', '🎴', 'Card Variety', 'Create cards of all different types',
                CATEGORY_DECK_CREATION, _all_flags(CARD_TYPE_FLAGS.values())),
    Achievement('hundred-card-deck', '📚', 'Ambitious Creator', 'Create a deck with 100+ cards',
                CATEGORY_DECK_CREATION, _flag('created_hundred_card_deck')),
    Achievement('categorized', '📂', 'Organized Mind', 'Create decks in 5 different categories',
                CATEGORY_DECK_CREATION, _flag('used_five_categories')),

    # Community
    Achievement('publisher', '📤', 'Publisher', 'Publish your first deck to the community',
                CATEGORY_COMMUNITY, _at_least('decks_published', 1)),
    Achievement('prolific-publisher', '📦', 'Prolific Publisher', 'Publish 5 decks to the community',
                CATEGORY_COMMUNITY, _at_least('decks_published', 5)),

    # Hidden
    Achievement('slow-and-steady', '🐢', 'Slow and Steady', 'Take over 10 minutes to review one card',
                CATEGORY_HIDDEN, _flag('slow_card_review')),
    Achievement('achievement-hunter', '🏆', 'Achievement Hunter', 'Unlock 20 achievements',
                CATEGORY_HIDDEN, meta_threshold=20),
    Achievement('completionist', '💎', 'Completionist', 'Unlock 50 achievements',
                CATEGORY_HIDDEN, meta_threshold=50),
]

ACHIEVEMENTS_BY_ID: Dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}


def get_achievement(achievement_id: str) -> Optional[Achievement]:
    return ACHIEVEMENTS_BY_ID.get(achievement_id)


def newly_unlocked(stats) -> List[Achievement]:
    """
    Achievements whose rule now holds but which ``stats.unlocked`` lacks.

    Meta achievements count the ones unlocked in this same pass, so they are
    checked after every other rule.
    """
    already = set(getattr(stats, 'unlocked', None) or [])
    found = [a for a in ACHIEVEMENTS if not a.meta and a.id not in already and a.rule(stats)]

    total = len(already) + len(found)
    for achievement in ACHIEVEMENTS:
        if achievement.meta and achievement.id not in already:
            if total >= achievement.meta_threshold:
                found.append(achievement)
                total += 1
    return found
