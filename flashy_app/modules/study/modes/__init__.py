from .base_mode import BaseStudyMode, EvaluationResult
from .factory import ModeFactory

__all__ = ['BaseStudyMode', 'EvaluationResult', 'ModeFactory']
