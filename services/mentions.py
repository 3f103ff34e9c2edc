"""
Mention bands: numeric average (0-20) -> qualitative label.

One table for the whole application. Each band is half-open [min, next band's
min); the highest band whose lower bound is reached wins.
"""

from typing import Any, Dict, Optional

NOT_EVALUATED = "Non évalué"

# (lower bound, code, label, description), ordered high to low
MENTION_BANDS = [
    (16.0, "EXCELLENT", "Excellent", "Excellente maîtrise des connaissances et compétences"),
    (14.0, "TRES_BIEN", "Très Bien", "Très bonne maîtrise des connaissances et compétences"),
    (12.0, "BIEN", "Bien", "Bonne maîtrise des connaissances et compétences"),
    (10.0, "ASSEZ_BIEN", "Assez Bien", "Maîtrise satisfaisante des connaissances et compétences"),
    (0.0, "PASSABLE", "Passable", "Maîtrise fragile des connaissances et compétences"),
]


def mention_band(average: Optional[float]) -> Dict[str, Any]:
    """Full band info for an average; None yields the not-evaluated band."""
    if average is None:
        return {"code": "NON_EVALUE", "label": NOT_EVALUATED, "min": None, "max": None, "description": ""}

    upper = 20.0
    for lower, code, label, description in MENTION_BANDS:
        if average >= lower:
            return {"code": code, "label": label, "min": lower, "max": upper, "description": description}
        upper = lower

    # below 0 only happens with bad input; clamp to the lowest band
    lower, code, label, description = MENTION_BANDS[-1]
    return {"code": code, "label": label, "min": lower, "max": MENTION_BANDS[-2][0], "description": description}


def classify_mention(average: Optional[float]) -> str:
    return mention_band(average)["label"]
