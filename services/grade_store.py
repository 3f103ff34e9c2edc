"""
Grade Record Store.

Wraps a SQLAlchemy session; one instance per request. Every write goes
through `upsert`, which keeps at most one Grade per
(student, subject, trimester, academic_year) and recomputes the average.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from models.bulletins import Bulletin  # noqa: F401  (mapper registry)
from models.classes import Classroom
from models.grades import Grade
from models.statistics import Statistics  # noqa: F401
from models.students import Student
from models.subjects import Subject
from services.curriculum import validate_academic_year, validate_trimester
from services.errors import InvalidInputError, NotFoundError
from services.grade_calculator import compute_subject_average, validate_coefficient, validate_score

logger = logging.getLogger(__name__)

SCORE_FIELDS = ("interrogation1", "interrogation2", "interrogation3", "composition")
WRITABLE_FIELDS = SCORE_FIELDS + ("appreciation", "coefficient")
MAX_REPORTED_ERRORS = 10


def effective_coefficient(grade: Grade) -> float:
    """Grade-level override wins, else the subject's default coefficient."""
    if grade.coefficient is not None:
        return grade.coefficient
    if grade.subject is not None and grade.subject.coefficient is not None:
        return grade.subject.coefficient
    return 1.0


class GradeStore:
    def __init__(self, db: Session):
        self.db = db

    # ==========================================================
    # [lookups]
    # ==========================================================
    def get_student(self, student_id: int) -> Student:
        student = self.db.get(Student, student_id)
        if student is None:
            raise NotFoundError("Student", student_id)
        return student

    def get_class(self, class_id: int) -> Classroom:
        classroom = self.db.get(Classroom, class_id)
        if classroom is None:
            raise NotFoundError("Class", class_id)
        return classroom

    def get_subject(self, subject_id: int) -> Subject:
        subject = self.db.get(Subject, subject_id)
        if subject is None:
            raise NotFoundError("Subject", subject_id)
        return subject

    def get_grade(self, grade_id: int) -> Grade:
        grade = self.db.get(Grade, grade_id)
        if grade is None:
            raise NotFoundError("Grade", grade_id)
        return grade

    def class_students(self, class_id: int) -> List[Student]:
        return (
            self.db.query(Student)
            .filter(Student.class_id == class_id)
            .order_by(Student.last_name, Student.first_name, Student.id)
            .all()
        )

    def classes_for_level(self, level: str, academic_year: str, series: Optional[str] = None) -> List[Classroom]:
        query = self.db.query(Classroom).filter(
            Classroom.level == level, Classroom.academic_year == academic_year
        )
        if series:
            query = query.filter(Classroom.series == series)
        return query.order_by(Classroom.name).all()

    # ==========================================================
    # [read]
    # ==========================================================
    def find(
        self,
        trimester: str,
        academic_year: str,
        student_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        class_id: Optional[int] = None,
    ) -> List[Grade]:
        query = (
            self.db.query(Grade)
            .join(Subject, Subject.id == Grade.subject_id)
            .options(joinedload(Grade.subject))
            .filter(Grade.trimester == trimester, Grade.academic_year == academic_year)
        )
        if student_id is not None:
            query = query.filter(Grade.student_id == student_id)
        if subject_id is not None:
            query = query.filter(Grade.subject_id == subject_id)
        if class_id is not None:
            query = query.filter(Grade.class_id == class_id)
        return query.order_by(Subject.name, Grade.student_id).all()

    def find_for_students(self, student_ids: Iterable[int], trimester: str, academic_year: str) -> Dict[int, List[Grade]]:
        """Grades of several students at once, keyed by student id (every id present)."""
        ids = list(student_ids)
        by_student: Dict[int, List[Grade]] = {sid: [] for sid in ids}
        if not ids:
            return by_student
        grades = (
            self.db.query(Grade)
            .options(joinedload(Grade.subject))
            .filter(
                Grade.student_id.in_(ids),
                Grade.trimester == trimester,
                Grade.academic_year == academic_year,
            )
            .all()
        )
        for grade in grades:
            by_student[grade.student_id].append(grade)
        return by_student

    # ==========================================================
    # [write]
    # ==========================================================
    def upsert(
        self,
        student_id: int,
        subject_id: int,
        trimester: str,
        academic_year: str,
        **fields: Any,
    ) -> Grade:
        validate_trimester(trimester)
        validate_academic_year(academic_year)
        changes = self._clean_fields(fields)

        student = self.get_student(student_id)
        subject = self.get_subject(subject_id)
        classroom = self.get_class(student.class_id)
        if not subject.applies_to(classroom.level, classroom.series):
            raise InvalidInputError(
                f"subject {subject.code} is not taught in class {classroom.name}"
            )

        key = dict(student_id=student_id, subject_id=subject_id, trimester=trimester, academic_year=academic_year)
        grade = self._find_one(**key)
        created = grade is None
        if created:
            grade = Grade(class_id=classroom.id, **key)
            self._apply(grade, changes)
            self.db.add(grade)
            try:
                self.db.flush()
            except IntegrityError:
                # another writer inserted the same key first: update theirs
                self.db.rollback()
                logger.info("grade insert raced for %s, retrying as update", key)
                grade = self._find_one(**key)
                created = False
                if grade is None:
                    raise

        if not created:
            grade.class_id = classroom.id
            self._apply(grade, changes)

        self.db.commit()
        self.db.refresh(grade)
        logger.info(
            "grade %s student=%s subject=%s %s %s average=%s",
            "created" if created else "updated",
            student_id, subject_id, trimester, academic_year, grade.average,
        )
        return grade

    def bulk_upsert(
        self,
        class_id: int,
        subject_id: int,
        trimester: str,
        academic_year: str,
        entries: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        classroom = self.get_class(class_id)
        self.get_subject(subject_id)
        if not entries:
            raise InvalidInputError("grades list cannot be empty")

        success_count, errors = 0, []
        for entry in entries:
            entry = dict(entry)
            student_id = entry.pop("student_id", None)
            try:
                if student_id is None:
                    raise InvalidInputError("student_id is required")
                student = self.get_student(student_id)
                if student.class_id != classroom.id:
                    raise InvalidInputError(f"student {student_id} is not in class {classroom.name}")
                self.upsert(student_id, subject_id, trimester, academic_year, **entry)
                success_count += 1
            except (InvalidInputError, NotFoundError) as exc:
                self.db.rollback()
                errors.append(f"student {student_id}: {exc.message}")

        logger.info(
            "bulk grade entry class=%s subject=%s: %s ok, %s failed",
            class_id, subject_id, success_count, len(errors),
        )
        return {
            "success_count": success_count,
            "error_count": len(errors),
            "errors": errors[:MAX_REPORTED_ERRORS],
        }

    def set_published(self, grade_id: int, published: bool) -> Grade:
        grade = self.get_grade(grade_id)
        grade.is_published = published
        grade.published_at = datetime.now(timezone.utc) if published else None
        self.db.commit()
        self.db.refresh(grade)
        return grade

    def delete(self, grade_id: int) -> None:
        grade = self.get_grade(grade_id)
        self.db.delete(grade)
        self.db.commit()
        logger.info("grade %s deleted", grade_id)

    # ==========================================================
    # [internal]
    # ==========================================================
    def _find_one(self, student_id, subject_id, trimester, academic_year) -> Optional[Grade]:
        return (
            self.db.query(Grade)
            .filter(
                Grade.student_id == student_id,
                Grade.subject_id == subject_id,
                Grade.trimester == trimester,
                Grade.academic_year == academic_year,
            )
            .first()
        )

    @staticmethod
    def _clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(fields) - set(WRITABLE_FIELDS)
        if unknown:
            raise InvalidInputError(f"unknown grade fields: {', '.join(sorted(unknown))}")
        cleaned = {}
        for name, value in fields.items():
            if name in SCORE_FIELDS:
                value = validate_score(value, name)
            elif name == "coefficient":
                value = validate_coefficient(value)
            cleaned[name] = value
        return cleaned

    @staticmethod
    def _apply(grade: Grade, changes: Dict[str, Any]) -> None:
        for name, value in changes.items():
            setattr(grade, name, value)
        grade.average = compute_subject_average(
            grade.interrogation1, grade.interrogation2, grade.interrogation3, grade.composition
        )
