# File: flashy_app/modules/study/interface.py
"""
Study Interface
===============
Public API of the study module. Other modules import study types from here.
"""

from .cards import AnyCard, card_from_record, cards_from_records, normalize_multiple_choice
from .engine.session_controller import StudySessionController
from .options import StudyOptions
from .schemas import SessionRecord, SessionSummary, StudySource
from .services.history_service import StudyHistoryService

__all__ = [
    'AnyCard',
    'StudySessionController',
    'StudyOptions',
    'StudySource',
    'SessionRecord',
    'SessionSummary',
    'StudyHistoryService',
    'card_from_record',
    'cards_from_records',
    'normalize_multiple_choice',
]
