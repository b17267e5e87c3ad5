from __future__ import annotations

import math
import re


NUMERIC_INPUT_RE = re.compile(r"^[0-9]*\.?[0-9]*$")

# Upper bound for any measurement field (kg, lb, cm, ft, in).
MAX_INPUT_VALUE = 10_000.0


class InputRejected(ValueError):
    """Raised by parsers when text is not acceptable for a numeric field."""


def _to_float(value: object) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InputRejected("booleans are not numeric input")
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            raise InputRejected(f"number too large: {value!r}")
    if not isinstance(value, str):
        raise InputRejected(f"unsupported input type: {type(value).__name__}")
    if value == "":
        return None
    if not NUMERIC_INPUT_RE.match(value) or value == ".":
        raise InputRejected(f"malformed numeric input: {value!r}")
    return float(value)


def is_acceptable_measurement(number: float, maximum: float = MAX_INPUT_VALUE) -> bool:
    return math.isfinite(number) and 0 <= number <= maximum


def parse_numeric_input(value: object, *, maximum: float = MAX_INPUT_VALUE) -> float | None:
    """Parse form text (or a JSON number) for a decimal field.

    Empty text (or None) means the field is cleared and returns None.
    Accepted text is digits with at most one decimal point; a lone "."
    has no numeric value and is rejected. The parsed number must be finite
    and within 0..maximum.
    """
    number = _to_float(value)
    if number is None:
        return None
    if not is_acceptable_measurement(number, maximum):
        raise InputRejected(f"{number!r} is outside 0..{maximum:g}")
    return number


def parse_integer_input(value: object, *, minimum: int, maximum: int) -> int | None:
    number = _to_float(value)
    if number is None:
        return None
    if not math.isfinite(number) or not number.is_integer():
        raise InputRejected(f"not a whole number: {value!r}")
    if number < minimum or number > maximum:
        raise InputRejected(f"{number:g} is outside {minimum}..{maximum}")
    return int(number)
