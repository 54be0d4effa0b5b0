"""
Unit tests for ConfigManager class.
"""
import logging
import tempfile
import unittest
from pathlib import Path

from math_quiz.config_manager import ConfigManager
from math_quiz.models import Operation, QuizSettings


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager functionality."""

    def setUp(self):
        """Set up test fixtures before each test method."""
        self.config_manager = ConfigManager()

        # Suppress logging during tests
        logging.disable(logging.CRITICAL)

    def tearDown(self):
        """Clean up after each test method."""
        logging.disable(logging.NOTSET)

    def test_initialization_with_defaults(self):
        """Test that ConfigManager initializes with correct default values."""
        settings = self.config_manager.get_quiz_settings()

        self.assertIsInstance(settings, QuizSettings)
        self.assertEqual(settings.digit_level, 1)
        self.assertEqual(settings.selected_operations, [Operation.ADDITION])
        self.assertEqual(self.config_manager.get_storage_file(), "./data/high_score.json")

    def test_quiz_settings_are_independent_copies(self):
        """Mutating returned settings does not change the defaults."""
        settings = self.config_manager.get_quiz_settings()
        settings.selected_operations.append(Operation.DIVISION)
        settings.digit_level = 4

        fresh = self.config_manager.get_quiz_settings()
        self.assertEqual(fresh.selected_operations, [Operation.ADDITION])
        self.assertEqual(fresh.digit_level, 1)

    def test_validate_digit_level_valid_values(self):
        for level in range(ConfigManager.MIN_DIGIT_LEVEL, ConfigManager.MAX_DIGIT_LEVEL + 1):
            result = self.config_manager.validate_digit_level(level)
            self.assertTrue(result['success'], level)
            self.assertIn('user_message', result)

    def test_validate_digit_level_invalid_values(self):
        for level in (0, -1, ConfigManager.MAX_DIGIT_LEVEL + 1, "3", 2.5, True, None):
            result = self.config_manager.validate_digit_level(level)
            self.assertFalse(result['success'], level)
            self.assertIn('error', result)
            self.assertTrue(result['user_message'].startswith("❌"))

    def test_set_digit_level(self):
        result = self.config_manager.set_digit_level(3)

        self.assertTrue(result['success'])
        self.assertEqual(self.config_manager.get_digit_level(), 3)
        self.assertEqual(self.config_manager.get_quiz_settings().digit_level, 3)

    def test_set_digit_level_invalid_keeps_value(self):
        self.config_manager.set_digit_level(2)
        result = self.config_manager.set_digit_level(99)

        self.assertFalse(result['success'])
        self.assertEqual(self.config_manager.get_digit_level(), 2)

    def test_set_default_operations(self):
        result = self.config_manager.set_default_operations(["+", "x", "/", "+"])

        self.assertTrue(result['success'])
        self.assertEqual(
            self.config_manager.get_default_operations(),
            [Operation.ADDITION, Operation.MULTIPLICATION, Operation.DIVISION]
        )

    def test_set_default_operations_invalid(self):
        for value in ([], ["%"], "+", None):
            result = self.config_manager.set_default_operations(value)
            self.assertFalse(result['success'], value)

        self.assertEqual(self.config_manager.get_default_operations(), [Operation.ADDITION])

    def test_set_storage_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = str(Path(temp_dir) / "scores.json")
            result = self.config_manager.set_storage_file(path)

            self.assertTrue(result['success'])
            self.assertEqual(self.config_manager.get_storage_file(), str(Path(path).resolve()))

    def test_set_storage_file_invalid(self):
        for value in ("", "   ", 123, "/etc/high_score.json"):
            result = self.config_manager.set_storage_file(value)
            self.assertFalse(result['success'], value)

        self.assertEqual(self.config_manager.get_storage_file(), ConfigManager.DEFAULT_STORAGE_FILE)

    def test_apply_config(self):
        errors = self.config_manager.apply_config({
            "default_digit_level": 2,
            "default_operations": ["-", "÷"],
        })

        self.assertEqual(errors, [])
        settings = self.config_manager.get_quiz_settings()
        self.assertEqual(settings.digit_level, 2)
        self.assertEqual(settings.selected_operations, [Operation.SUBTRACTION, Operation.DIVISION])

    def test_apply_config_reports_rejected_entries(self):
        errors = self.config_manager.apply_config({
            "default_digit_level": 0,
            "default_operations": ["?"],
            "storage_file": "",
        })

        self.assertEqual(len(errors), 3)
        self.assertTrue(self.config_manager.validate_settings()['valid'])

    def test_reset_to_defaults(self):
        self.config_manager.set_digit_level(5)
        self.config_manager.set_default_operations(["×"])

        self.config_manager.reset_to_defaults()

        self.assertEqual(self.config_manager.get_digit_level(), ConfigManager.DEFAULT_DIGIT_LEVEL)
        self.assertEqual(self.config_manager.get_default_operations(), [Operation.ADDITION])

    def test_validate_settings(self):
        validation = self.config_manager.validate_settings()
        self.assertTrue(validation['valid'])
        self.assertEqual(validation['issues'], [])

        self.config_manager._operations = []
        validation = self.config_manager.validate_settings()
        self.assertFalse(validation['valid'])
        self.assertEqual(len(validation['issues']), 1)

    def test_settings_summary(self):
        self.config_manager.set_digit_level(2)
        self.config_manager.set_default_operations(["+", "-"])

        summary = self.config_manager.get_settings_summary()

        self.assertIn("Digits: 2", summary)
        self.assertIn("Operations: + -", summary)


if __name__ == '__main__':
    unittest.main()
