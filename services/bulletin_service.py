"""
Bulletin (report card) assembly and persistence.

A bulletin is a snapshot: lines and statistics are copied in at generation
time and do not follow later grade changes. Only the appreciation and the
publish flag may be edited afterwards. An unpublished bulletin can be
regenerated (replaced); a published one must be unpublished first.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from models.bulletins import Bulletin
from services.errors import ConflictError, InvalidInputError, NoGradesError, NotFoundError
from services.grade_calculator import is_complete
from services.grade_store import GradeStore, effective_coefficient
from services.mentions import classify_mention
from services.statistics_service import StatisticsService

logger = logging.getLogger(__name__)

DEFAULT_LINE_APPRECIATION = "Non spécifié"


def default_appreciation(average: float, mention: str) -> str:
    return f"Moyenne générale: {average:.2f}/20 - {mention}"


class BulletinService:
    def __init__(self, store: GradeStore, statistics: StatisticsService):
        self.store = store
        self.statistics = statistics

    # ==========================================================
    # [assembly]
    # ==========================================================
    def assemble(self, student_id: int, trimester: str, academic_year: str) -> Dict[str, Any]:
        """Document structure for one student/trimester; nothing is persisted except the statistics snapshot."""
        student = self.store.get_student(student_id)
        classroom = self.store.get_class(student.class_id)
        stats = self.statistics.compute_student_statistics(student.id, trimester, academic_year)
        grades = self.store.find(trimester, academic_year, student_id=student.id)

        lines = []
        for grade in grades:
            coefficient = effective_coefficient(grade)
            lines.append({
                "subject_id": grade.subject_id,
                "subject_name": grade.subject.name,
                "subject_code": grade.subject.code,
                "interrogation1": grade.interrogation1,
                "interrogation2": grade.interrogation2,
                "interrogation3": grade.interrogation3,
                "composition": grade.composition,
                "average": grade.average,
                "coefficient": coefficient,
                "points": None if grade.average is None else round(grade.average * coefficient, 2),
                "mention": classify_mention(grade.average),
                "appreciation": grade.appreciation or DEFAULT_LINE_APPRECIATION,
                "is_complete": is_complete(grade.interrogation1, grade.interrogation2, grade.composition),
            })

        return {
            "student": {
                "id": student.id,
                "matricule": student.matricule,
                "first_name": student.first_name,
                "last_name": student.last_name,
            },
            "class": {
                "id": classroom.id,
                "name": classroom.name,
                "level": classroom.level,
                "series": classroom.series,
            },
            "trimester": trimester,
            "academic_year": academic_year,
            "lines": lines,
            "statistics": {
                "average": stats["average"],
                "rank": stats["rank"],
                "class_average": stats["class_average"],
                "min_score": stats["min_score"],
                "max_score": stats["max_score"],
                "mention": stats["mention"],
                "total_students": stats["total_students"],
                "total_subjects": stats["total_subjects"],
                "completed_subjects": stats["completed_subjects"],
                "total_coefficients": sum(line["coefficient"] for line in lines if line["average"] is not None),
            },
        }

    # ==========================================================
    # [generation]
    # ==========================================================
    def generate(self, student_id: int, trimester: str, academic_year: str,
                 general_appreciation: Optional[str] = None) -> Bulletin:
        document = self.assemble(student_id, trimester, academic_year)
        if not document["lines"]:
            raise NoGradesError(f"no grades for student {student_id} in {trimester} trimester {academic_year}")

        db = self.store.db
        key = dict(student_id=student_id, trimester=trimester, academic_year=academic_year)
        bulletin = self._find_one(**key)
        self._ensure_unpublished(bulletin)

        created = bulletin is None
        if created:
            bulletin = Bulletin(**key)
            self._fill(bulletin, document, general_appreciation)
            db.add(bulletin)
            try:
                db.flush()
            except IntegrityError:
                # generated concurrently by another request: regenerate that one
                db.rollback()
                logger.info("bulletin insert raced for %s, retrying as update", key)
                bulletin = self._find_one(**key)
                created = False
                if bulletin is None:
                    raise
                self._ensure_unpublished(bulletin)

        if not created:
            self._fill(bulletin, document, general_appreciation)
        db.commit()
        db.refresh(bulletin)

        logger.info(
            "bulletin %s %s student=%s %s %s",
            bulletin.id, "generated" if created else "regenerated", student_id, trimester, academic_year,
        )
        return bulletin

    def generate_for_class(self, class_id: int, trimester: str, academic_year: str) -> Dict[str, Any]:
        classroom = self.store.get_class(class_id)
        bulletins: List[Bulletin] = []
        errors = []
        for student in self.store.class_students(classroom.id):
            try:
                bulletins.append(self.generate(student.id, trimester, academic_year))
            except (InvalidInputError, ConflictError) as exc:
                self.store.db.rollback()
                errors.append(f"{student.full_name}: {exc.message}")

        logger.info("class %s bulletins: %s generated, %s failed", class_id, len(bulletins), len(errors))
        return {
            "success_count": len(bulletins),
            "error_count": len(errors),
            "errors": errors,
            "bulletins": bulletins,
        }

    # ==========================================================
    # [administration]
    # ==========================================================
    def get(self, bulletin_id: int) -> Bulletin:
        bulletin = self.store.db.get(Bulletin, bulletin_id)
        if bulletin is None:
            raise NotFoundError("Bulletin", bulletin_id)
        return bulletin

    def list_bulletins(self, class_id: Optional[int] = None, student_id: Optional[int] = None,
                      trimester: Optional[str] = None, academic_year: Optional[str] = None) -> List[Bulletin]:
        query = self.store.db.query(Bulletin)
        if class_id is not None:
            query = query.filter(Bulletin.class_id == class_id)
        if student_id is not None:
            query = query.filter(Bulletin.student_id == student_id)
        if trimester is not None:
            query = query.filter(Bulletin.trimester == trimester)
        if academic_year is not None:
            query = query.filter(Bulletin.academic_year == academic_year)
        return query.order_by(Bulletin.academic_year, Bulletin.trimester, Bulletin.id).all()

    def update_appreciation(self, bulletin_id: int, general_appreciation: str) -> Bulletin:
        bulletin = self.get(bulletin_id)
        bulletin.general_appreciation = general_appreciation
        self.store.db.commit()
        self.store.db.refresh(bulletin)
        return bulletin

    def publish(self, bulletin_id: int) -> Bulletin:
        return self._set_published(bulletin_id, True)

    def unpublish(self, bulletin_id: int) -> Bulletin:
        return self._set_published(bulletin_id, False)

    def delete(self, bulletin_id: int) -> None:
        bulletin = self.get(bulletin_id)
        self.store.db.delete(bulletin)
        self.store.db.commit()
        logger.info("bulletin %s deleted", bulletin_id)

    def _find_one(self, student_id, trimester, academic_year) -> Optional[Bulletin]:
        return (
            self.store.db.query(Bulletin)
            .filter(
                Bulletin.student_id == student_id,
                Bulletin.trimester == trimester,
                Bulletin.academic_year == academic_year,
            )
            .first()
        )

    @staticmethod
    def _ensure_unpublished(bulletin: Optional[Bulletin]) -> None:
        if bulletin is not None and bulletin.is_published:
            raise ConflictError(f"bulletin {bulletin.id} is published; unpublish it before regenerating")

    @staticmethod
    def _fill(bulletin: Bulletin, document: Dict[str, Any], general_appreciation: Optional[str]) -> None:
        stats = document["statistics"]
        bulletin.class_id = document["class"]["id"]
        bulletin.lines = document["lines"]
        bulletin.statistics = stats
        bulletin.general_appreciation = general_appreciation or default_appreciation(stats["average"], stats["mention"])

    def _set_published(self, bulletin_id: int, published: bool) -> Bulletin:
        bulletin = self.get(bulletin_id)
        bulletin.is_published = published
        bulletin.published_at = datetime.now(timezone.utc) if published else None
        self.store.db.commit()
        self.store.db.refresh(bulletin)
        logger.info("bulletin %s %s", bulletin_id, "published" if published else "unpublished")
        return bulletin
