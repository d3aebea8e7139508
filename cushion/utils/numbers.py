"""Parsing of user-entered and spreadsheet numbers"""

import math
from typing import Any


def parse_number(value: Any) -> float:
    """
    Coerce a user-entered number to float.

    Strings may use a comma as decimal separator ("979,44").

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        number = float(value.strip().replace(",", "."))
    else:
        raise ValueError(f"not a number: {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number


def parse_number_or_zero(value: Any) -> float:
    """Lenient variant for spreadsheet cells: blanks and junk read as 0"""
    if value is None or value == "":
        return 0.0
    try:
        return parse_number(value)
    except ValueError:
        return 0.0
