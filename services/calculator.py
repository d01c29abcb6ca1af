"""
Calculator - Single binary operation extracted from free text
============================================================

Finds the first ``<number> <operator> <number>`` in a message and
evaluates it. Division by exactly zero yields NaN, which the responder
reports as an undefined value instead of raising.
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


# Either of these marks a message as a calculation request.
TRIGGER_EXPRESSION = r"\d+\s*[+\-*/^]\s*\d+"
TRIGGER_WORDS = r"calculate|compute|solve|sum|multiply|divide|add|subtract"

_EXPRESSION = re.compile(r"(\d+\.?\d*)\s*([+\-*/^])\s*(\d+\.?\d*)", re.ASCII)

OPERATORS = ("+", "-", "*", "/", "^")


@dataclass(frozen=True)
class Calculation:
    """An extracted operation and its result."""
    left: float
    operator: str
    right: float
    result: float

    @property
    def undefined(self) -> bool:
        return math.isnan(self.result)


def evaluate(left: float, operator: str, right: float) -> float:
    """
    Apply ``operator`` to two floats.

    Returns NaN for division by zero and infinity when a power
    overflows the float range.

    Raises:
        ValueError: For an operator outside ``OPERATORS``
    """
    if operator == "+":
        return left + right
    if operator == "-":
        return left - right
    if operator == "*":
        return left * right
    if operator == "/":
        return left / right if right != 0 else math.nan
    if operator == "^":
        try:
            return math.pow(left, right)
        except OverflowError:
            return math.inf
        except ValueError:
            # 0 raised to a negative power
            return math.inf
    raise ValueError(f"Unsupported operator: {operator}")


def extract(text: str) -> Optional[Calculation]:
    """
    Evaluate the first binary operation found in ``text``.

    Returns:
        Calculation, or None when no operation can be found
    """
    match = _EXPRESSION.search(text)
    if not match:
        return None

    left, operator, right = float(match.group(1)), match.group(2), float(match.group(3))
    return Calculation(left, operator, right, evaluate(left, operator, right))


def format_number(value: float) -> str:
    """
    Render a float the way a person would write it: 4, 2.5, Infinity.

    Uses the shortest digits that round-trip (``repr``) and switches to
    exponent notation only below 1e-6 or from 1e21 up, as in ``1e+21``
    and ``3.5e-7``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    # Position of the decimal point relative to the first digit.
    point = exponent + len(digits)

    if len(digits) <= point <= 21:
        text = digits + "0" * (point - len(digits))
    elif 0 < point <= 21:
        text = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        mantissa = digits if len(digits) == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{point - 1:+d}"

    return sign + text
