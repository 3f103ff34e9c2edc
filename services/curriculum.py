"""
Togolese curriculum constants: cycles, class grades, lycée series, default
coefficients and the trimester / academic-year vocabulary.
"""

import re
from datetime import date
from typing import Optional

from services.errors import InvalidInputError

TRIMESTERS = ("first", "second", "third")

LEVELS = {
    "maternelle": ["PS", "MS", "GS"],
    "primaire": ["CP1", "CP2", "CE1", "CE2", "CM1", "CM2"],
    "college": ["6e", "5e", "4e", "3e"],
    "lycee": ["2nde", "1ere", "Tle"],
}

SERIES = {
    "A4": "Langues et Littérature",
    "B": "Économie et Social",
    "C": "Mathématiques et Sciences Physiques",
    "D": "Sciences de la Nature",
    "F": "Sciences et Technologies",
    "G": "Gestion et Commerce",
}

# BAC coefficients per series
BAC_COEFFICIENTS = {
    "A4": {
        "Français": 4, "Philosophie": 4, "Histoire-Géographie": 3, "Anglais": 3,
        "Langue Vivante 2": 2, "Mathématiques": 2, "SVT": 2, "EPS": 1,
    },
    "B": {
        "SES": 5, "Histoire-Géographie": 3, "Français": 3, "Mathématiques": 3,
        "Anglais": 2, "EPS": 1,
    },
    "C": {
        "Mathématiques": 5, "Physique-Chimie": 4, "SVT": 3, "Français": 3,
        "Histoire-Géographie": 2, "Anglais": 2, "EPS": 1,
    },
    "D": {
        "Mathématiques": 4, "Physique-Chimie": 4, "SVT": 4, "Français": 3,
        "Histoire-Géographie": 2, "Anglais": 2, "EPS": 1,
    },
}

# collège coefficients (BEPC preparation)
COLLEGE_COEFFICIENTS = {
    "Français": 3, "Mathématiques": 3, "Histoire-Géographie": 2, "SVT": 2,
    "Physique-Chimie": 2, "Anglais": 2, "EPS": 1, "Technologie": 1,
}

_ACADEMIC_YEAR_RE = re.compile(r"^(\d{4})-(\d{4})$")


def current_academic_year(today: Optional[date] = None) -> str:
    """A school year starts in September: 2025-10 -> "2025-2026", 2026-03 -> "2025-2026"."""
    today = today or date.today()
    start = today.year if today.month >= 9 else today.year - 1
    return f"{start}-{start + 1}"


def current_trimester(today: Optional[date] = None) -> str:
    """
    - Sep ~ Dec -> first
    - Jan ~ Mar -> second
    - Apr ~ Aug -> third
    """
    month = (today or date.today()).month
    if month >= 9:
        return "first"
    if month <= 3:
        return "second"
    return "third"


def default_coefficient(subject_name: str, level: str, series: Optional[str] = None) -> float:
    """Coefficient of a subject when none is given; primaire/maternelle weigh everything 1."""
    if level == "lycee":
        table = BAC_COEFFICIENTS.get(series or "", BAC_COEFFICIENTS["A4"])
    elif level == "college":
        table = COLLEGE_COEFFICIENTS
    else:
        return 1.0
    return float(table.get(subject_name, 1))


def validate_trimester(trimester: str) -> str:
    if trimester not in TRIMESTERS:
        raise InvalidInputError(f"trimester must be one of {', '.join(TRIMESTERS)}, got {trimester!r}")
    return trimester


def validate_academic_year(academic_year: str) -> str:
    match = _ACADEMIC_YEAR_RE.match(academic_year or "")
    if not match or int(match.group(2)) != int(match.group(1)) + 1:
        raise InvalidInputError(f"academic year must look like 2025-2026, got {academic_year!r}")
    return academic_year


def validate_level(level: str) -> str:
    if level not in LEVELS:
        raise InvalidInputError(f"unknown level {level!r}")
    return level
