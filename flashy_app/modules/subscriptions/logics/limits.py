"""Plan limits per subscription tier. ``None`` means unlimited."""

from dataclasses import asdict, dataclass
from typing import Optional

FEATURE_IMAGES = 'images_on_cards'
FEATURE_PUBLISH = 'community_publish'
FEATURE_IMPORT = 'community_import'
FEATURE_AI = 'ai_generation'
FEATURES = (FEATURE_IMAGES, FEATURE_PUBLISH, FEATURE_IMPORT, FEATURE_AI)


@dataclass(frozen=True)
class PlanLimits:
    max_decks: Optional[int]
    max_cards_per_deck: Optional[int]
    images_on_cards: bool
    community_publish: bool
    community_import: bool
    ai_generation: bool

    def allows(self, feature: str) -> bool:
        return bool(getattr(self, feature, False))

    def to_dict(self):
        return asdict(self)


FREE_LIMITS = PlanLimits(
    max_decks=15,
    max_cards_per_deck=50,
    images_on_cards=False,
    community_publish=False,
    community_import=False,
    ai_generation=False,
)

UNLIMITED = PlanLimits(
    max_decks=None,
    max_cards_per_deck=None,
    images_on_cards=True,
    community_publish=True,
    community_import=True,
    ai_generation=True,
)

TIER_LIMITS = {
    'free': FREE_LIMITS,
    'monthly': UNLIMITED,
    'annual': UNLIMITED,
    'lifetime': UNLIMITED,
}


def limits_for(tier: Optional[str], is_superuser: bool = False) -> PlanLimits:
    if is_superuser:
        return UNLIMITED
    return TIER_LIMITS.get(tier or 'free', FREE_LIMITS)


def is_premium(tier: Optional[str]) -> bool:
    return tier in ('monthly', 'annual', 'lifetime')
