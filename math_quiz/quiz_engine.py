"""
Quiz engine core logic for the Math Quiz Bot.
Handles operand generation, operation selection and answer parsing.
"""
import logging
import math
import random
from typing import List, Optional

from math_quiz.models import Number, Operation, Question

logger = logging.getLogger(__name__)


class QuizError(Exception):
    """Base exception for quiz errors."""
    pass


class InvalidConfigurationError(QuizError):
    """Raised when the settings cannot produce a question."""
    pass


def digit_bounds(digits: int) -> tuple:
    """
    Get the inclusive operand range for a digit level.

    Args:
        digits: Number of decimal digits, at least 1

    Returns:
        (minimum, maximum) tuple; (1, 9) for a single digit

    Raises:
        ValueError: If digits is not a positive integer
    """
    if isinstance(digits, bool) or not isinstance(digits, int) or digits < 1:
        raise ValueError(f"Digit level must be a positive integer, got {digits!r}")

    minimum = 1 if digits == 1 else 10 ** (digits - 1)
    maximum = 10 ** digits - 1
    return minimum, maximum


def parse_answer(answer) -> Optional[Number]:
    """
    Convert raw answer input into a finite number.

    Args:
        answer: int, float or numeric string from the input surface

    Returns:
        The numeric value, or None if the input is missing or malformed
    """
    if answer is None or isinstance(answer, bool):
        return None

    if isinstance(answer, str):
        text = answer.strip()
        if not text:
            return None
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                return None
    elif isinstance(answer, (int, float)):
        value = answer
    else:
        return None

    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def format_answer(value: Number) -> str:
    """Render an answer the way it is shown back to the player."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class QuizEngine:
    """Generates arithmetic questions from the current settings."""

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize the quiz engine.

        Args:
            seed: Optional seed for reproducible question sequences
        """
        self._rng = random.Random(seed)

    def generate_number(self, digits: int) -> int:
        """Draw a uniform integer with the given number of digits."""
        minimum, maximum = digit_bounds(digits)
        return self._rng.randint(minimum, maximum)

    def choose_operation(self, operations: List[Operation]) -> Operation:
        """
        Pick an operation uniformly from the enabled ones.

        Raises:
            InvalidConfigurationError: If no operation is enabled
        """
        if not operations:
            raise InvalidConfigurationError("Cannot generate a question with no operations selected")
        return self._rng.choice(operations)

    def generate_question(self, operations: List[Operation], digit_level: int) -> Question:
        """
        Generate a new question.

        Subtraction operands are ordered so the result is never negative.
        Division uses num1 = num2 * X so the quotient is a whole number.

        Args:
            operations: Enabled operations to choose from
            digit_level: Number of digits per operand

        Returns:
            A fresh Question with an empty answer and hidden result

        Raises:
            InvalidConfigurationError: If no operation is enabled
            ValueError: If digit_level is not a positive integer
        """
        operation = self.choose_operation(operations)

        num1 = self.generate_number(digit_level)
        num2 = self.generate_number(digit_level)

        if operation is Operation.SUBTRACTION and num2 > num1:
            num1, num2 = num2, num1

        if operation is Operation.DIVISION:
            num1 = num2 * self.generate_number(digit_level)

        question = Question(num1=num1, num2=num2, operation=operation)
        logger.debug(f"Generated question: {question.prompt}")
        return question
