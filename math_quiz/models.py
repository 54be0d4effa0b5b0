"""
Core data models for the Math Quiz Bot.
"""
import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Union


Number = Union[int, float]


def divide(a: int, b: int) -> Number:
    """Exact integer quotient when b divides a, real-valued otherwise."""
    if isinstance(a, int) and isinstance(b, int) and b != 0 and a % b == 0:
        return a // b
    return a / b


class Operation(Enum):
    """Arithmetic operations a question can use, keyed by display symbol."""
    ADDITION = ("+", operator.add)
    SUBTRACTION = ("-", operator.sub)
    MULTIPLICATION = ("×", operator.mul)
    DIVISION = ("÷", divide)

    def __init__(self, symbol: str, func: Callable[[int, int], Number]):
        self.symbol = symbol
        self.func = func

    def apply(self, a: int, b: int) -> Number:
        """Apply the operation to two operands."""
        return self.func(a, b)

    @classmethod
    def parse(cls, text: str) -> "Operation":
        """
        Resolve user input to an Operation.

        Accepts the display symbol, a common ASCII alias or the member name
        (case-insensitive).

        Raises:
            ValueError: If the text does not name an operation
        """
        if not isinstance(text, str):
            raise ValueError(f"Operation must be a string, got {type(text).__name__}")

        key = text.strip().lower()
        for op in cls:
            if key == op.symbol or key == op.name.lower():
                return op

        aliases = {
            "*": cls.MULTIPLICATION,
            "x": cls.MULTIPLICATION,
            "/": cls.DIVISION,
            ":": cls.DIVISION,
        }
        if key in aliases:
            return aliases[key]

        raise ValueError(f"Unknown operation: {text!r}")

    def __str__(self) -> str:
        return self.symbol


@dataclass
class QuizSettings:
    """Settings that shape generated questions."""
    selected_operations: List[Operation] = field(default_factory=list)
    digit_level: int = 1


@dataclass
class Question:
    """The question currently presented to the player."""
    num1: int = 0
    num2: int = 0
    operation: Operation = Operation.ADDITION
    user_answer: str = ""
    show_result: bool = False
    is_correct: bool = False

    @property
    def correct_answer(self) -> Number:
        # whole quotients stay ints so large operands compare exactly
        return self.operation.apply(self.num1, self.num2)

    @property
    def prompt(self) -> str:
        return f"{self.num1} {self.operation.symbol} {self.num2} = ?"
