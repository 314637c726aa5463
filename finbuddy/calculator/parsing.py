"""
parsing.py — Free-text numeric input parsing.

Every numeric field arrives from a form as text. The calculators never see a
parse failure: anything that is not a finite, non-negative number becomes 0.
"""
from __future__ import annotations

import math
from typing import Any

_STRIP_CHARS = ("₹", "Rs.", "INR")


def parse_amount(value: Any) -> float:
    """
    Parse a form value into a non-negative float.

    Accepts ints/floats, numeric strings with surrounding whitespace,
    thousands separators ("1,50,000") and a leading currency marker.
    None, empty strings, garbage, NaN/inf and negatives all yield 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        for marker in _STRIP_CHARS:
            if text.startswith(marker):
                text = text[len(marker):].strip()
        text = text.replace(",", "")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0

    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def parse_count(value: Any) -> int:
    """Whole-number variant (months, counts): fractional part is dropped."""
    return int(parse_amount(value))
