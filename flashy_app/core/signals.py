"""
Central Signal Registry for Event-Driven Architecture.

Modules publish through these blinker signals so that listeners (for
example achievements) stay decoupled from the publishers.

Usage:
    # Publisher (sender)
    from flashy_app.core.signals import session_completed
    session_completed.send(None, user_id=1, summary=summary, persisted=True)

    # Subscriber (receiver), in a module's events.py
    @session_completed.connect
    def on_session_completed(sender, **kwargs):
        ...
"""
from blinker import Namespace

study_signals = Namespace()

# Fired when a study run starts with a non-empty working list
# Payload: user_id, started_at (datetime, UTC), local_hour (int, learner clock)
session_started = study_signals.signal('session_started')

# Fired when the controller leaves a card
# Payload: user_id, card_id, seconds_on_card (float), was_correct (bool | None)
card_advanced = study_signals.signal('card_advanced')

# Fired when a study run reaches its summary
# Payload: user_id, summary (SessionSummary), persisted (bool), difficulty (str | None)
session_completed = study_signals.signal('session_completed')

# Fired after a StudySession row is written
# Payload: user_id, study_session (StudySession), created (False when an existing run was resubmitted)
session_recorded = study_signals.signal('session_recorded')

# ============================================
# Content Signals
# ============================================
content_signals = Namespace()

# Payload: user_id, deck (Deck)
deck_created = content_signals.signal('deck_created')

# Payload: user_id, deck_id
deck_deleted = content_signals.signal('deck_deleted')

# Payload: user_id, card (Card)
card_created = content_signals.signal('card_created')

# Payload: user_id, deck (Deck), community_deck (CommunityDeck), first_publish (bool)
deck_published = content_signals.signal('deck_published')
