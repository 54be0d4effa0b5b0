"""
Math Quiz Bot: arithmetic quiz sessions played over Discord slash commands.
"""
from .models import Operation, Question, QuizSettings
from .quiz_engine import InvalidConfigurationError, QuizEngine, QuizError
from .quiz_session import QuizSession
from .data_manager import DataManager, InMemoryStore, HIGH_SCORE_KEY

__all__ = [
    "Operation",
    "Question",
    "QuizSettings",
    "QuizEngine",
    "QuizError",
    "InvalidConfigurationError",
    "QuizSession",
    "DataManager",
    "InMemoryStore",
    "HIGH_SCORE_KEY",
]
