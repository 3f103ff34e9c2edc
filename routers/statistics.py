from typing import Optional

from fastapi import APIRouter

from dependencies.services import AcademicYear, Stats
from schemas.grades import Trimester

router = APIRouter(prefix="/statistics", tags=["statistics"])


# ✅ [STUDENT] general average, rank, class figures and mention
@router.get("/students/{student_id}")
def student_statistics(student_id: int, trimester: Trimester, academic_year: AcademicYear, stats: Stats):
    data = stats.compute_student_statistics(student_id, trimester, academic_year)
    return {"success": True, "data": data}


# ✅ [CLASS] class average / min / max and every member's rank
@router.get("/classes/{class_id}")
def class_statistics(class_id: int, trimester: Trimester, academic_year: AcademicYear, stats: Stats):
    data = stats.compute_class_statistics(class_id, trimester, academic_year)
    return {"success": True, "data": data}


# ✅ [RANKING] class ranking only
@router.get("/classes/{class_id}/ranking")
def class_ranking(class_id: int, trimester: Trimester, academic_year: AcademicYear, stats: Stats):
    data = stats.compute_class_statistics(class_id, trimester, academic_year)
    return {
        "success": True,
        "data": {
            "class_id": data["class_id"],
            "trimester": trimester,
            "academic_year": academic_year,
            "ranking": [
                {k: row[k] for k in ("student_id", "first_name", "last_name", "average", "rank", "mention")}
                for row in data["students"]
            ],
        },
    }


# ✅ [SUBJECT] one subject inside one class
@router.get("/classes/{class_id}/subjects/{subject_id}")
def subject_statistics(class_id: int, subject_id: int, trimester: Trimester,
                       academic_year: AcademicYear, stats: Stats):
    data = stats.compute_subject_statistics(subject_id, class_id, trimester, academic_year)
    return {"success": True, "data": data}


# ✅ [LEVEL] ranking across every class of a level (optionally one series)
@router.get("/levels/{level}/ranking")
def level_ranking(level: str, trimester: Trimester, academic_year: AcademicYear, stats: Stats,
                  series: Optional[str] = None):
    data = stats.compute_level_ranking(level, trimester, academic_year, series)
    return {"success": True, "data": data}
