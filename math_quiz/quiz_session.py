"""
Quiz session state for the Math Quiz Bot.
Owns the score, the settings and the current question, and persists the high score.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from .data_manager import load_high_score, save_high_score
from .models import Number, Operation, Question, QuizSettings
from .quiz_engine import InvalidConfigurationError, QuizEngine, format_answer, parse_answer

logger = logging.getLogger(__name__)

Listener = Callable[[str, "QuizSession"], Any]


class SessionEventLogger:
    """Structured logging for session lifecycle events."""

    @staticmethod
    def log_game_started(digit_level: int, operations: List[Operation]) -> None:
        symbols = " ".join(op.symbol for op in operations)
        logger.info(
            f"Session lifecycle: GAME_STARTED - Digits {digit_level}, Operations [{symbols}]",
            extra={
                'event_type': 'game_started',
                'digit_level': digit_level,
                'operations': [op.symbol for op in operations],
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_game_ended(score: int, total_answered: int, correct_answers: int) -> None:
        logger.info(
            f"Session lifecycle: GAME_ENDED - Score {score}, Correct {correct_answers}/{total_answered}",
            extra={
                'event_type': 'game_ended',
                'score': score,
                'total_answered': total_answered,
                'correct_answers': correct_answers,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_answer_checked(prompt: str, answer: str, is_correct: bool) -> None:
        logger.debug(
            f"Session lifecycle: ANSWER_CHECKED - {prompt} answered {answer} ({'correct' if is_correct else 'wrong'})",
            extra={
                'event_type': 'answer_checked',
                'prompt': prompt,
                'answer': answer,
                'is_correct': is_correct,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_high_score(previous: int, new: int) -> None:
        logger.info(
            f"Session lifecycle: HIGH_SCORE - {previous} -> {new}",
            extra={
                'event_type': 'high_score_updated',
                'previous': previous,
                'new': new,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_configuration_error(operation: str, error_message: str) -> None:
        logger.warning(
            f"Session lifecycle: CONFIGURATION_ERROR - Operation {operation}: {error_message}",
            extra={
                'event_type': 'configuration_error',
                'operation': operation,
                'error_message': error_message,
                'timestamp': time.time()
            }
        )


class QuizSession:
    """
    Holds all game and question state for a single player.

    One session is created per process and lives as long as the presentation
    layer does. Games reset its counters; the session itself is never
    replaced. Observers registered with add_listener are called with
    (event_name, session) after each state transition.
    """

    def __init__(
        self,
        store,
        settings: Optional[QuizSettings] = None,
        engine: Optional[QuizEngine] = None
    ):
        """
        Initialize the session and load the persisted high score.

        Args:
            store: Key-value store with get(key) and set(key, value)
            settings: Initial settings, empty operation list if None
            engine: Question generator, a fresh unseeded engine if None
        """
        self._store = store
        self._settings = settings if settings is not None else QuizSettings()
        self._engine = engine if engine is not None else QuizEngine()
        self._listeners: List[Listener] = []

        self.is_playing = False
        self.score = 0
        self.total_answered = 0
        self.correct_answers = 0
        self.high_score = load_high_score(store)

        self.question = Question()

        logger.info(f"QuizSession initialized with high score {self.high_score}")

    # Settings

    @property
    def selected_operations(self) -> List[Operation]:
        return self._settings.selected_operations

    @property
    def digit_level(self) -> int:
        return self._settings.digit_level

    # Current question

    @property
    def num1(self) -> int:
        return self.question.num1

    @property
    def num2(self) -> int:
        return self.question.num2

    @property
    def operation(self) -> Operation:
        return self.question.operation

    @property
    def user_answer(self) -> str:
        return self.question.user_answer

    @property
    def show_result(self) -> bool:
        return self.question.show_result

    @property
    def is_correct(self) -> bool:
        return self.question.is_correct

    @property
    def correct_answer(self) -> Number:
        return self.question.correct_answer

    @property
    def accuracy(self) -> int:
        """Percentage of answered questions that were correct."""
        if self.total_answered == 0:
            return 0
        return round(self.correct_answers / self.total_answered * 100)

    def add_listener(self, callback: Listener) -> None:
        """Register a callback for state change events."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        """Unregister a previously added callback."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, event: str) -> None:
        for callback in list(self._listeners):
            callback(event, self)

    def _generate_question(self) -> None:
        self.question = self._engine.generate_question(
            self._settings.selected_operations,
            self._settings.digit_level
        )
        self._notify('question_generated')

    def start_game(self) -> None:
        """
        Reset the counters and present the first question.

        Raises:
            InvalidConfigurationError: If no operation is selected; nothing is reset
        """
        if not self._settings.selected_operations:
            SessionEventLogger.log_configuration_error("start_game", "no operations selected")
            raise InvalidConfigurationError("Select at least one operation before starting a game")

        self.score = 0
        self.total_answered = 0
        self.correct_answers = 0
        self.is_playing = True

        SessionEventLogger.log_game_started(self._settings.digit_level, self._settings.selected_operations)
        self._notify('game_started')
        self._generate_question()

    def end_game(self) -> None:
        """Stop playing; counters and the last question stay inspectable."""
        self.is_playing = False
        SessionEventLogger.log_game_ended(self.score, self.total_answered, self.correct_answers)
        self._notify('game_ended')

    def toggle_operation(self, op: Operation) -> None:
        """Remove op if it is selected, otherwise append it."""
        operations = self._settings.selected_operations
        if op in operations:
            operations.remove(op)
        else:
            operations.append(op)
        logger.info(f"Operations now [{' '.join(o.symbol for o in operations)}]")
        self._notify('operations_changed')

    def set_digit_level(self, level: int) -> None:
        """
        Set the operand size for subsequent questions.

        Raises:
            ValueError: If level is not a positive integer
        """
        if isinstance(level, bool) or not isinstance(level, int) or level < 1:
            raise ValueError(f"Digit level must be a positive integer, got {level!r}")
        self._settings.digit_level = level
        logger.info(f"Digit level set to {level}")
        self._notify('digit_level_changed')

    def next_question(self) -> None:
        """
        Replace the current question with a new one.

        Raises:
            InvalidConfigurationError: If no operation is selected
        """
        try:
            self._generate_question()
        except InvalidConfigurationError as e:
            SessionEventLogger.log_configuration_error("next_question", str(e))
            raise

    def check_answer(self, answer) -> None:
        """
        Validate an answer against the current question.

        Missing or malformed input is ignored. The question is not advanced.

        Args:
            answer: Proposed answer as a number or numeric string
        """
        value = parse_answer(answer)
        if value is None:
            logger.debug(f"Ignoring malformed answer: {answer!r}")
            return

        question = self.question
        question.user_answer = format_answer(value)
        question.is_correct = value == question.correct_answer
        question.show_result = True
        self.total_answered += 1

        SessionEventLogger.log_answer_checked(question.prompt, question.user_answer, question.is_correct)

        if question.is_correct:
            self.score += 1
            self.correct_answers += 1

            if self.score > self.high_score:
                previous = self.high_score
                self.high_score = self.score
                save_high_score(self._store, self.high_score)
                SessionEventLogger.log_high_score(previous, self.high_score)
                self._notify('high_score_updated')

        self._notify('answer_checked')

    def get_session_progress(self) -> Dict[str, Any]:
        """
        Get a snapshot of the observable session state.

        Returns:
            Dictionary of counters, settings and the current question
        """
        return {
            'is_playing': self.is_playing,
            'score': self.score,
            'high_score': self.high_score,
            'total_answered': self.total_answered,
            'correct_answers': self.correct_answers,
            'accuracy': self.accuracy,
            'selected_operations': [op.symbol for op in self.selected_operations],
            'digit_level': self.digit_level,
            'num1': self.num1,
            'num2': self.num2,
            'operation': self.operation.symbol,
            'prompt': self.question.prompt,
            'user_answer': self.user_answer,
            'show_result': self.show_result,
            'is_correct': self.is_correct,
            'correct_answer': self.correct_answer,
        }
