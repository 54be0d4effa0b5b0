"""
Comprehensive integration tests for the Math Quiz Bot.
Tests complete game flows across the session, the engine and the file store.
"""
import logging
import shutil
import tempfile
import unittest
from pathlib import Path

from math_quiz.config_manager import ConfigManager
from math_quiz.data_manager import HIGH_SCORE_KEY, DataManager
from math_quiz.models import Operation
from math_quiz.quiz_engine import InvalidConfigurationError, QuizEngine
from math_quiz.quiz_session import QuizSession
from tests.test_fixtures import TestDataValidation


class TestCompleteGameFlow(unittest.TestCase):
    """Test complete game flow from configuration to persisted high score."""

    def setUp(self):
        """Set up integration test environment."""
        logging.disable(logging.CRITICAL)
        self.temp_dir = tempfile.mkdtemp()
        self.storage_file = str(Path(self.temp_dir) / "data" / "high_score.json")

        self.config_manager = ConfigManager()
        self.config_manager.apply_config({
            "default_digit_level": 2,
            "default_operations": ["+", "-", "×", "÷"],
            "storage_file": self.storage_file,
        })

    def tearDown(self):
        """Clean up test environment."""
        logging.disable(logging.NOTSET)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _new_session(self, seed: int) -> QuizSession:
        store = DataManager(self.config_manager.get_storage_file())
        return QuizSession(store, self.config_manager.get_quiz_settings(), QuizEngine(seed=seed))

    def _play(self, session: QuizSession, correct: int, wrong: int = 0) -> None:
        for _ in range(correct):
            self.assertTrue(TestDataValidation.validate_question(session.question, session.digit_level))
            session.check_answer(session.correct_answer)
            session.next_question()
        for _ in range(wrong):
            session.check_answer(session.correct_answer + 1)
            session.next_question()

    def test_full_game_persists_high_score(self):
        session = self._new_session(seed=1)
        self.assertEqual(session.high_score, 0)

        session.start_game()
        self._play(session, correct=5, wrong=2)
        session.end_game()

        self.assertEqual(session.score, 5)
        self.assertEqual(session.total_answered, 7)
        self.assertEqual(session.correct_answers, 5)
        self.assertEqual(session.high_score, 5)

        restarted = self._new_session(seed=2)
        self.assertEqual(restarted.high_score, 5)

    def test_lower_score_keeps_previous_high_score(self):
        first = self._new_session(seed=3)
        first.start_game()
        self._play(first, correct=4)

        second = self._new_session(seed=4)
        second.start_game()
        self._play(second, correct=2)

        self.assertEqual(second.high_score, 4)
        self.assertEqual(DataManager(self.storage_file).get(HIGH_SCORE_KEY), "4")

    def test_settings_changes_mid_game(self):
        session = self._new_session(seed=5)
        session.start_game()

        for op in (Operation.ADDITION, Operation.SUBTRACTION, Operation.MULTIPLICATION):
            session.toggle_operation(op)
        session.set_digit_level(3)

        for _ in range(50):
            session.next_question()
            self.assertIs(session.operation, Operation.DIVISION)
            self.assertTrue(TestDataValidation.validate_question(session.question, 3))

        session.toggle_operation(Operation.DIVISION)
        with self.assertRaises(InvalidConfigurationError):
            session.next_question()

        session.end_game()
        with self.assertRaises(InvalidConfigurationError):
            session.start_game()
        self.assertFalse(session.is_playing)

    def test_corrupt_store_starts_from_zero(self):
        Path(self.storage_file).parent.mkdir(parents=True, exist_ok=True)
        with open(self.storage_file, 'w', encoding='utf-8') as f:
            f.write("{ not json")

        session = self._new_session(seed=6)
        self.assertEqual(session.high_score, 0)

        session.start_game()
        self._play(session, correct=1)

        self.assertEqual(DataManager(self.storage_file).get(HIGH_SCORE_KEY), "1")


if __name__ == '__main__':
    unittest.main()
