# File: flashy_app/modules/subscriptions/interface.py
"""
Subscription Interface
======================
Plan checks used by the deck, card and community services. Every check
raises ``SubscriptionLimitError`` instead of returning a flag so callers
cannot forget to act on it.
"""

from flashy_app.core.error_handlers import SubscriptionLimitError

from .logics.limits import FEATURE_IMAGES, PlanLimits, is_premium, limits_for

_FEATURE_LABELS = {
    'images_on_cards': 'Images on cards',
    'community_publish': 'Publishing to the community',
    'community_import': 'Importing community decks',
    'ai_generation': 'AI card generation',
}


class SubscriptionInterface:

    @staticmethod
    def limits(user) -> PlanLimits:
        return limits_for(user.subscription_tier, bool(user.is_superuser))

    @staticmethod
    def check_deck_limit(user, current_count: int) -> None:
        max_decks = SubscriptionInterface.limits(user).max_decks
        if max_decks is not None and current_count >= max_decks:
            raise SubscriptionLimitError(
                f"Your plan allows up to {max_decks} decks. Upgrade to create more.",
                limit='max_decks',
                value=max_decks,
            )

    @staticmethod
    def check_card_limit(user, current_count: int, adding: int = 1) -> None:
        max_cards = SubscriptionInterface.limits(user).max_cards_per_deck
        if max_cards is not None and current_count + adding > max_cards:
            raise SubscriptionLimitError(
                f"Your plan allows up to {max_cards} cards per deck. Upgrade to add more.",
                limit='max_cards_per_deck',
                value=max_cards,
            )

    @staticmethod
    def require_feature(user, feature: str) -> None:
        if not SubscriptionInterface.limits(user).allows(feature):
            label = _FEATURE_LABELS.get(feature, feature)
            raise SubscriptionLimitError(
                f"{label} requires a premium plan.",
                limit=feature,
                value=False,
            )

    @staticmethod
    def check_card_media(user, payload: dict) -> None:
        """Cards carrying image URLs need the images feature."""
        if payload.get('front_image_url') or payload.get('back_image_url'):
            SubscriptionInterface.require_feature(user, FEATURE_IMAGES)

    @staticmethod
    def describe(user) -> dict:
        return {
            'tier': user.subscription_tier,
            'is_premium': is_premium(user.subscription_tier) or bool(user.is_superuser),
            'is_superuser': bool(user.is_superuser),
            'limits': SubscriptionInterface.limits(user).to_dict(),
        }
