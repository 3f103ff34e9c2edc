from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from services.bulletin_service import BulletinService
from services.curriculum import current_academic_year, validate_academic_year
from services.grade_store import GradeStore
from services.statistics_service import StatisticsService


# ==========================================================
# [DI] services are built per request around the request's session
# ==========================================================
def get_store(db: Session = Depends(get_db)) -> GradeStore:
    return GradeStore(db)


def get_statistics_service(store: GradeStore = Depends(get_store)) -> StatisticsService:
    return StatisticsService(store)


def get_bulletin_service(
    store: GradeStore = Depends(get_store),
    statistics: StatisticsService = Depends(get_statistics_service),
) -> BulletinService:
    return BulletinService(store, statistics)


def resolve_academic_year(academic_year: Optional[str] = None) -> str:
    """Explicit value > DEFAULT_ACADEMIC_YEAR setting > year of today's date."""
    if academic_year:
        return validate_academic_year(academic_year)
    if settings.DEFAULT_ACADEMIC_YEAR:
        return settings.DEFAULT_ACADEMIC_YEAR
    return current_academic_year()


Store = Annotated[GradeStore, Depends(get_store)]
Stats = Annotated[StatisticsService, Depends(get_statistics_service)]
Bulletins = Annotated[BulletinService, Depends(get_bulletin_service)]
AcademicYear = Annotated[str, Depends(resolve_academic_year)]
