"""
Configuration manager for Math Quiz Bot settings and defaults.
"""
import logging
from typing import Any, Dict, List
from pathlib import Path

from .models import Operation, QuizSettings


class ConfigManager:
    """Manages default quiz settings and the storage location."""

    # Default configuration values
    DEFAULT_DIGIT_LEVEL = 1
    DEFAULT_OPERATIONS = [Operation.ADDITION]
    DEFAULT_STORAGE_FILE = "./data/high_score.json"

    # Validation limits
    MIN_DIGIT_LEVEL = 1
    MAX_DIGIT_LEVEL = 6

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._digit_level = self.DEFAULT_DIGIT_LEVEL
        self._operations: List[Operation] = list(self.DEFAULT_OPERATIONS)
        self._storage_file = self.DEFAULT_STORAGE_FILE

    def get_quiz_settings(self) -> QuizSettings:
        """
        Get a fresh settings object built from the current defaults.

        Returns:
            QuizSettings the session can mutate without touching the defaults
        """
        return QuizSettings(
            selected_operations=list(self._operations),
            digit_level=self._digit_level
        )

    def validate_digit_level(self, level: int) -> Dict[str, Any]:
        """
        Check a digit level against the allowed range.

        Args:
            level: Proposed number of digits per operand

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if isinstance(level, bool) or not isinstance(level, int):
            error_msg = f"Digit level must be an integer, got {type(level).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(level).__name__}"
            }

        if level < self.MIN_DIGIT_LEVEL:
            error_msg = f"Digit level must be at least {self.MIN_DIGIT_LEVEL}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Too small: Minimum is {self.MIN_DIGIT_LEVEL} digit"
            }

        if level > self.MAX_DIGIT_LEVEL:
            error_msg = f"Digit level cannot exceed {self.MAX_DIGIT_LEVEL}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Too large: Maximum is {self.MAX_DIGIT_LEVEL} digits"
            }

        return {
            'success': True,
            'message': f"Digit level {level} is valid",
            'user_message': f"✅ Numbers will have {level} digit{'s' if level > 1 else ''}"
        }

    def set_digit_level(self, level: int) -> Dict[str, Any]:
        """
        Set the default digit level.

        Args:
            level: Number of digits per operand

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        result = self.validate_digit_level(level)
        if result['success']:
            self._digit_level = level
            self.logger.info(f"Default digit level set to {level}")
            result['message'] = f"Default digit level set to {level}"
        return result

    def get_digit_level(self) -> int:
        """
        Get the default digit level.

        Returns:
            Number of digits per operand
        """
        return self._digit_level

    def set_default_operations(self, symbols: List[str]) -> Dict[str, Any]:
        """
        Set the operations enabled when the bot starts.

        Args:
            symbols: Operation symbols or names, e.g. ["+", "×"]

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(symbols, list):
            error_msg = f"Default operations must be a list, got {type(symbols).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Invalid input: Expected a list of operations"
            }

        if not symbols:
            error_msg = "At least one default operation is required"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Select at least one operation"
            }

        operations: List[Operation] = []
        for symbol in symbols:
            try:
                op = Operation.parse(symbol)
            except ValueError as e:
                error_msg = str(e)
                self.logger.error(error_msg)
                return {
                    'success': False,
                    'error': error_msg,
                    'user_message': f"❌ Unknown operation: {symbol}"
                }
            if op not in operations:
                operations.append(op)

        self._operations = operations
        joined = " ".join(op.symbol for op in operations)
        self.logger.info(f"Default operations set to [{joined}]")
        return {
            'success': True,
            'message': f"Default operations set to [{joined}]",
            'user_message': f"✅ Enabled operations: {joined}"
        }

    def get_default_operations(self) -> List[Operation]:
        """
        Get the operations enabled when the bot starts.

        Returns:
            Copy of the default operation list
        """
        return list(self._operations)

    def set_storage_file(self, storage_file: str) -> Dict[str, Any]:
        """
        Set the path of the high score file with validation.

        Args:
            storage_file: Path to the JSON storage file

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(storage_file, str):
            error_msg = f"Storage file must be a string, got {type(storage_file).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a path string, got {type(storage_file).__name__}"
            }

        if not storage_file.strip():
            error_msg = "Storage file cannot be empty"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ Storage file path cannot be empty"
            }

        try:
            normalized_path = str(Path(storage_file).resolve())
        except (OSError, ValueError) as e:
            error_msg = f"Invalid storage file path format: {e}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid path format: {storage_file}"
            }

        # Refuse system directories
        system_dirs = ['/bin', '/usr', '/etc', '/sys', '/proc', 'C:\\Windows', 'C:\\Program Files']
        if any(normalized_path.startswith(sys_dir) for sys_dir in system_dirs):
            error_msg = f"Cannot use system directory: {normalized_path}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Cannot use system directory: {storage_file}"
            }

        self._storage_file = normalized_path
        self.logger.info(f"Storage file set to {normalized_path}")
        return {
            'success': True,
            'message': f"Storage file set to {normalized_path}",
            'user_message': f"✅ High score will be stored in {normalized_path}"
        }

    def get_storage_file(self) -> str:
        """
        Get the path of the high score file.

        Returns:
            Path to the JSON storage file
        """
        return self._storage_file

    def apply_config(self, quiz_config: Dict[str, Any]) -> List[str]:
        """
        Apply the "quiz" section of config.json.

        Invalid entries are skipped and the defaults kept.

        Args:
            quiz_config: Parsed "quiz" section

        Returns:
            List of error messages for rejected entries
        """
        errors = []

        if 'default_digit_level' in quiz_config:
            result = self.set_digit_level(quiz_config['default_digit_level'])
            if not result['success']:
                errors.append(result['error'])

        if 'default_operations' in quiz_config:
            result = self.set_default_operations(quiz_config['default_operations'])
            if not result['success']:
                errors.append(result['error'])

        if 'storage_file' in quiz_config:
            result = self.set_storage_file(quiz_config['storage_file'])
            if not result['success']:
                errors.append(result['error'])

        if errors:
            self.logger.warning(f"Configuration applied with {len(errors)} rejected entries")
        else:
            self.logger.info("Configuration applied successfully")
        return errors

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        self._digit_level = self.DEFAULT_DIGIT_LEVEL
        self._operations = list(self.DEFAULT_OPERATIONS)
        self._storage_file = self.DEFAULT_STORAGE_FILE
        self.logger.info("All settings reset to default values")

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }

        if not self.validate_digit_level(self._digit_level)['success']:
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid digit level: {self._digit_level}")

        if not self._operations:
            validation_result["valid"] = False
            validation_result["issues"].append("No default operations selected")

        if not isinstance(self._storage_file, str) or not self._storage_file.strip():
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid storage file: {self._storage_file}")

        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        operations_str = " ".join(op.symbol for op in self._operations) or "none"
        return (
            f"Quiz Settings:\n"
            f"• Digits: {self._digit_level}\n"
            f"• Operations: {operations_str}\n"
            f"• Storage File: {self._storage_file}"
        )
