from typing import Optional

from fastapi import APIRouter, Depends

from dependencies.services import AcademicYear, Store, resolve_academic_year
from models.grades import Grade as GradeModel
from schemas.common import Pagination, make_meta
from schemas.grades import AverageRequest, BulkGradeUpsert, GradeUpsert, Trimester
from services.grade_calculator import compute_subject_average
from services.grade_store import effective_coefficient
from services.mentions import classify_mention

router = APIRouter(prefix="/grades", tags=["grades"])


def _grade_data(grade: GradeModel) -> dict:
    return {
        "id": grade.id,
        "student_id": grade.student_id,
        "subject_id": grade.subject_id,
        "class_id": grade.class_id,
        "trimester": grade.trimester,
        "academic_year": grade.academic_year,
        "interrogation1": grade.interrogation1,
        "interrogation2": grade.interrogation2,
        "interrogation3": grade.interrogation3,
        "composition": grade.composition,
        "average": grade.average,
        "coefficient": effective_coefficient(grade),
        "mention": classify_mention(grade.average),
        "appreciation": grade.appreciation,
        "is_published": grade.is_published,
        "published_at": grade.published_at,
        "updated_at": grade.updated_at,
    }


# ==========================================================
# [1] static routes
# ==========================================================

# ✅ [CALC] subject average without storing anything
@router.post("/average")
def compute_average(scores: AverageRequest):
    average = compute_subject_average(
        scores.interrogation1, scores.interrogation2, scores.interrogation3, scores.composition
    )
    return {
        "success": True,
        "data": {"average": average, "mention": classify_mention(average)},
    }


# ✅ [UPSERT] enter or update one grade
@router.put("/")
def upsert_grade(payload: GradeUpsert, store: Store):
    academic_year = resolve_academic_year(payload.academic_year)
    grade = store.upsert(
        payload.student_id, payload.subject_id, payload.trimester, academic_year, **payload.changes()
    )
    return {"success": True, "data": _grade_data(grade), "message": "Grade saved"}


# ✅ [BULK] one subject for a whole class
@router.post("/bulk")
def bulk_upsert_grades(payload: BulkGradeUpsert, store: Store):
    academic_year = resolve_academic_year(payload.academic_year)
    result = store.bulk_upsert(
        payload.class_id, payload.subject_id, payload.trimester, academic_year,
        [entry.changes() for entry in payload.grades],
    )
    return {
        "success": True,
        "data": result,
        "message": f"{result['success_count']} grades saved, {result['error_count']} failed",
    }


# ✅ [READ] grades of a trimester, filtered by student / subject / class
@router.get("/")
def list_grades(
    trimester: Trimester,
    academic_year: AcademicYear,
    store: Store,
    student_id: Optional[int] = None,
    subject_id: Optional[int] = None,
    class_id: Optional[int] = None,
    paging: Pagination = Depends(),
):
    if student_id is not None:
        store.get_student(student_id)
    if subject_id is not None:
        store.get_subject(subject_id)
    if class_id is not None:
        store.get_class(class_id)

    grades = store.find(trimester, academic_year, student_id=student_id, subject_id=subject_id, class_id=class_id)
    page = grades[paging.offset:paging.offset + paging.size]
    return {
        "success": True,
        "data": [_grade_data(g) for g in page],
        "meta": make_meta(len(grades), paging.page, paging.size),
    }


# ==========================================================
# [2] dynamic routes
# ==========================================================

# ✅ [READ] one grade
@router.get("/{grade_id}")
def read_grade(grade_id: int, store: Store):
    return {"success": True, "data": _grade_data(store.get_grade(grade_id))}


# ✅ [PUBLISH] make a grade visible to families
@router.post("/{grade_id}/publish")
def publish_grade(grade_id: int, store: Store):
    grade = store.set_published(grade_id, True)
    return {"success": True, "data": _grade_data(grade), "message": "Grade published"}


@router.post("/{grade_id}/unpublish")
def unpublish_grade(grade_id: int, store: Store):
    grade = store.set_published(grade_id, False)
    return {"success": True, "data": _grade_data(grade), "message": "Grade unpublished"}


# ✅ [DELETE]
@router.delete("/{grade_id}")
def delete_grade(grade_id: int, store: Store):
    store.delete(grade_id)
    return {"success": True, "data": {"grade_id": grade_id}, "message": "Grade deleted"}
