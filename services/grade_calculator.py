"""
Subject average for one trimester.

    2 interrogations: (I1 + I2 + 2*C) / 3
    3 interrogations: (I1 + I2 + I3 + 2*C) / 4

The doubled composition counts as two entries toward the three-entry minimum;
below it the average is undetermined (None), never 0.
"""

from typing import Optional

from services.errors import InvalidInputError

MIN_SCORE = 0.0
MAX_SCORE = 20.0
MIN_COEFFICIENT = 0.5
MAX_COEFFICIENT = 10.0
MIN_WEIGHTED_ENTRIES = 3


def compute_subject_average(
    interrogation1: Optional[float] = None,
    interrogation2: Optional[float] = None,
    interrogation3: Optional[float] = None,
    composition: Optional[float] = None,
) -> Optional[float]:
    entries = [n for n in (interrogation1, interrogation2, interrogation3) if n is not None]
    if composition is not None:
        entries.extend([composition, composition])

    if len(entries) < MIN_WEIGHTED_ENTRIES:
        return None

    divisor = 4 if interrogation3 is not None else 3
    return round(sum(entries) / divisor, 2)


def is_complete(interrogation1, interrogation2, composition) -> bool:
    return None not in (interrogation1, interrogation2, composition)


def validate_score(value: Optional[float], field: str = "score") -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{field} must be a number")
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise InvalidInputError(f"{field} must be between 0 and 20, got {value}")
    return float(value)


def validate_coefficient(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError("coefficient must be a number")
    if not MIN_COEFFICIENT <= value <= MAX_COEFFICIENT:
        raise InvalidInputError(f"coefficient must be between 0.5 and 10, got {value}")
    return float(value)
