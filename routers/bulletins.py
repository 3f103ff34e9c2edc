from typing import Optional

from fastapi import APIRouter

from dependencies.services import Bulletins, resolve_academic_year
from models.bulletins import Bulletin as BulletinModel
from schemas.bulletins import BulletinGenerate, BulletinUpdate, ClassBulletinGenerate
from schemas.grades import Trimester

router = APIRouter(prefix="/bulletins", tags=["bulletins"])


def _bulletin_data(bulletin: BulletinModel) -> dict:
    return {
        "id": bulletin.id,
        "student_id": bulletin.student_id,
        "class_id": bulletin.class_id,
        "trimester": bulletin.trimester,
        "academic_year": bulletin.academic_year,
        "lines": bulletin.lines,
        "statistics": bulletin.statistics,
        "general_appreciation": bulletin.general_appreciation,
        "is_published": bulletin.is_published,
        "published_at": bulletin.published_at,
        "created_at": bulletin.created_at,
        "updated_at": bulletin.updated_at,
    }


# ==========================================================
# [1] generation
# ==========================================================

# ✅ [CREATE] one student's bulletin
@router.post("/", status_code=201)
def generate_bulletin(payload: BulletinGenerate, bulletins: Bulletins):
    academic_year = resolve_academic_year(payload.academic_year)
    bulletin = bulletins.generate(payload.student_id, payload.trimester, academic_year, payload.general_appreciation)
    return {"success": True, "data": _bulletin_data(bulletin), "message": "Bulletin generated"}


# ✅ [CREATE] every student of a class
@router.post("/class/{class_id}")
def generate_class_bulletins(class_id: int, payload: ClassBulletinGenerate, bulletins: Bulletins):
    academic_year = resolve_academic_year(payload.academic_year)
    result = bulletins.generate_for_class(class_id, payload.trimester, academic_year)
    return {
        "success": True,
        "data": {
            "success_count": result["success_count"],
            "error_count": result["error_count"],
            "errors": result["errors"],
            "bulletins": [_bulletin_data(b) for b in result["bulletins"]],
        },
        "message": f"{result['success_count']} bulletins generated, {result['error_count']} failed",
    }


# ✅ [READ] list with optional filters
@router.get("/")
def list_bulletins(
    bulletins: Bulletins,
    class_id: Optional[int] = None,
    student_id: Optional[int] = None,
    trimester: Optional[Trimester] = None,
    academic_year: Optional[str] = None,
):
    if academic_year:
        academic_year = resolve_academic_year(academic_year)
    records = bulletins.list_bulletins(class_id=class_id, student_id=student_id, trimester=trimester,
                             academic_year=academic_year)
    return {"success": True, "data": [_bulletin_data(b) for b in records]}


# ==========================================================
# [2] dynamic routes
# ==========================================================

@router.get("/{bulletin_id}")
def read_bulletin(bulletin_id: int, bulletins: Bulletins):
    return {"success": True, "data": _bulletin_data(bulletins.get(bulletin_id))}


# ✅ [UPDATE] appreciation is the only editable field
@router.patch("/{bulletin_id}")
def update_bulletin(bulletin_id: int, payload: BulletinUpdate, bulletins: Bulletins):
    bulletin = bulletins.update_appreciation(bulletin_id, payload.general_appreciation)
    return {"success": True, "data": _bulletin_data(bulletin), "message": "Bulletin updated"}


@router.post("/{bulletin_id}/publish")
def publish_bulletin(bulletin_id: int, bulletins: Bulletins):
    bulletin = bulletins.publish(bulletin_id)
    return {"success": True, "data": _bulletin_data(bulletin), "message": "Bulletin published"}


@router.post("/{bulletin_id}/unpublish")
def unpublish_bulletin(bulletin_id: int, bulletins: Bulletins):
    bulletin = bulletins.unpublish(bulletin_id)
    return {"success": True, "data": _bulletin_data(bulletin), "message": "Bulletin unpublished"}


@router.delete("/{bulletin_id}")
def delete_bulletin(bulletin_id: int, bulletins: Bulletins):
    bulletins.delete(bulletin_id)
    return {"success": True, "data": {"bulletin_id": bulletin_id}, "message": "Bulletin deleted"}
