from fastapi import APIRouter

from dependencies.services import AcademicYear
from services.curriculum import LEVELS, SERIES, TRIMESTERS, current_trimester
from services.mentions import MENTION_BANDS

router = APIRouter(prefix="/config", tags=["config"])


# ✅ [READ] current academic year and trimester
@router.get("/academic")
def get_academic_config(academic_year: AcademicYear):
    trimester = current_trimester()
    return {
        "success": True,
        "data": {
            "academic_year": academic_year,
            "trimester": trimester,
            "trimesters": list(TRIMESTERS),
        },
        "message": f"{academic_year}, {trimester} trimester",
    }


# ✅ [READ] levels, series and mention bands used by the front end
@router.get("/curriculum")
def get_curriculum():
    return {
        "success": True,
        "data": {
            "levels": LEVELS,
            "series": SERIES,
            "mentions": [
                {"min": lower, "code": code, "label": label} for lower, code, label, _ in MENTION_BANDS
            ],
        },
    }
