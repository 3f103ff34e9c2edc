"""
services/statistics_service.py

Statistics Aggregator
- general average of a student: sum(subject average x coefficient) / sum(coefficient),
  only over subjects whose average is computable
- cohort (class) ranking, class average / min / max
- per-subject class statistics and level-wide ranking

Ranking rule: rank = 1 + number of cohort members with a strictly greater
average, so equal averages share a rank and the next rank is skipped
(15, 14, 14, 12 -> 1, 2, 2, 4). Students without any computable subject
average are left unranked (rank None) and stay out of class average/min/max.

Every student computation upserts its Statistics snapshot (last write wins).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from models.grades import Grade
from models.statistics import Statistics
from models.students import Student
from services.curriculum import validate_academic_year, validate_level, validate_trimester
from services.grade_store import GradeStore, effective_coefficient
from services.mentions import NOT_EVALUATED, classify_mention

logger = logging.getLogger(__name__)

PASS_MARK = 10.0


def _round(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 2)


def general_average(grades: List[Grade]) -> Tuple[Optional[float], int, int]:
    """(average or None, completed subjects, total subjects) for one student's grades."""
    total_points = 0.0
    total_coefficients = 0.0
    completed = 0
    for grade in grades:
        if grade.average is None:
            continue
        coefficient = effective_coefficient(grade)
        total_points += grade.average * coefficient
        total_coefficients += coefficient
        completed += 1

    if total_coefficients == 0:
        return None, completed, len(grades)
    return total_points / total_coefficients, completed, len(grades)


def rank_entries(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Sort cohort rows best first and set `rank` on each.

    Rows need `average` (None = unranked), `last_name`, `first_name`, `student_id`.
    Unranked rows go last, in name order.
    """
    def _name_key(row):
        return (row["last_name"], row["first_name"], row["student_id"])

    ranked = sorted((r for r in entries if r["average"] is not None), key=lambda r: (-r["average"], *_name_key(r)))
    unranked = sorted((r for r in entries if r["average"] is None), key=_name_key)

    previous, previous_rank = None, 0
    for position, row in enumerate(ranked, start=1):
        if row["average"] != previous:
            previous, previous_rank = row["average"], position
        row["rank"] = previous_rank
    for row in unranked:
        row["rank"] = None
    return ranked + unranked


def _empty_student_statistics() -> Dict[str, Any]:
    return {
        "average": 0.0,
        "rank": None,
        "class_average": 0.0,
        "min_score": 0.0,
        "max_score": 0.0,
        "mention": NOT_EVALUATED,
        "total_subjects": 0,
        "completed_subjects": 0,
    }


class StatisticsService:
    def __init__(self, store: GradeStore):
        self.store = store

    # ==========================================================
    # [cohort]
    # ==========================================================
    def _cohort(self, students: List[Student], trimester: str, academic_year: str) -> List[Dict[str, Any]]:
        """One row per student, each average rounded before ranking."""
        grades_by_student = self.store.find_for_students([s.id for s in students], trimester, academic_year)
        rows = []
        for student in students:
            grades = grades_by_student[student.id]
            average, completed, total = general_average(grades)
            rows.append({
                "student_id": student.id,
                "matricule": student.matricule,
                "first_name": student.first_name,
                "last_name": student.last_name,
                "class_id": student.class_id,
                "average": _round(average),
                "completed_subjects": completed,
                "total_subjects": total,
                "subject_averages": [
                    {
                        "subject_id": g.subject_id,
                        "average": g.average,
                        "coefficient": effective_coefficient(g),
                    }
                    for g in sorted(grades, key=lambda g: g.subject_id)
                ],
            })
        return rank_entries(rows)

    @staticmethod
    def _aggregate(rows: List[Dict[str, Any]]) -> Dict[str, float]:
        averages = [r["average"] for r in rows if r["average"] is not None]
        if not averages:
            return {"class_average": 0.0, "min_score": 0.0, "max_score": 0.0, "success_rate": 0.0}
        passed = sum(1 for a in averages if a >= PASS_MARK)
        return {
            "class_average": _round(sum(averages) / len(averages)),
            "min_score": _round(min(averages)),
            "max_score": _round(max(averages)),
            "success_rate": _round(passed / len(averages) * 100),
        }

    def _student_result(self, row: Dict[str, Any], aggregate: Dict[str, float], cohort_size: int,
                        trimester: str, academic_year: str) -> Dict[str, Any]:
        if row["average"] is None:
            result = _empty_student_statistics()
            if row["total_subjects"]:
                # grades entered but none computable yet: still show where the class stands
                result["total_subjects"] = row["total_subjects"]
                result.update({k: aggregate[k] for k in ("class_average", "min_score", "max_score")})
        else:
            result = {
                "average": row["average"],
                "rank": row["rank"],
                "class_average": aggregate["class_average"],
                "min_score": aggregate["min_score"],
                "max_score": aggregate["max_score"],
                "mention": classify_mention(row["average"]),
                "total_subjects": row["total_subjects"],
                "completed_subjects": row["completed_subjects"],
            }
        result.update({
            "student_id": row["student_id"],
            "class_id": row["class_id"],
            "trimester": trimester,
            "academic_year": academic_year,
            "total_students": cohort_size,
            "subject_averages": row["subject_averages"],
        })
        return result

    def _save_snapshot(self, result: Dict[str, Any]) -> None:
        db = self.store.db
        snapshot = (
            db.query(Statistics)
            .filter(
                Statistics.student_id == result["student_id"],
                Statistics.trimester == result["trimester"],
                Statistics.academic_year == result["academic_year"],
            )
            .first()
        )
        if snapshot is None:
            snapshot = Statistics(
                student_id=result["student_id"],
                trimester=result["trimester"],
                academic_year=result["academic_year"],
            )
            db.add(snapshot)
        snapshot.class_id = result["class_id"]
        snapshot.average = result["average"]
        snapshot.rank = result["rank"]
        snapshot.class_average = result["class_average"]
        snapshot.min_score = result["min_score"]
        snapshot.max_score = result["max_score"]
        snapshot.mention = result["mention"]
        snapshot.total_subjects = result["total_subjects"]
        snapshot.completed_subjects = result["completed_subjects"]
        snapshot.subject_averages = result["subject_averages"]
        snapshot.computed_at = datetime.now(timezone.utc)

    # ==========================================================
    # [operations]
    # ==========================================================
    def compute_student_statistics(self, student_id: int, trimester: str, academic_year: str) -> Dict[str, Any]:
        validate_trimester(trimester)
        validate_academic_year(academic_year)
        student = self.store.get_student(student_id)

        students = self.store.class_students(student.class_id)
        rows = self._cohort(students, trimester, academic_year)
        aggregate = self._aggregate(rows)
        row = next(r for r in rows if r["student_id"] == student.id)

        result = self._student_result(row, aggregate, len(rows), trimester, academic_year)
        self._save_snapshot(result)
        self.store.db.commit()
        logger.info(
            "statistics student=%s %s %s average=%s rank=%s",
            student_id, trimester, academic_year, result["average"], result["rank"],
        )
        return result

    def compute_class_statistics(self, class_id: int, trimester: str, academic_year: str) -> Dict[str, Any]:
        validate_trimester(trimester)
        validate_academic_year(academic_year)
        classroom = self.store.get_class(class_id)

        students = self.store.class_students(classroom.id)
        rows = self._cohort(students, trimester, academic_year)
        aggregate = self._aggregate(rows)

        student_rows = []
        for row in rows:
            result = self._student_result(row, aggregate, len(rows), trimester, academic_year)
            self._save_snapshot(result)
            student_rows.append({
                "student_id": row["student_id"],
                "matricule": row["matricule"],
                "first_name": row["first_name"],
                "last_name": row["last_name"],
                "average": result["average"],
                "rank": result["rank"],
                "mention": result["mention"],
                "completed_subjects": result["completed_subjects"],
                "total_subjects": result["total_subjects"],
            })
        self.store.db.commit()

        logger.info("statistics class=%s %s %s: %s students", class_id, trimester, academic_year, len(rows))
        return {
            "class_id": classroom.id,
            "class_name": classroom.name,
            "trimester": trimester,
            "academic_year": academic_year,
            "total_students": len(rows),
            "evaluated_students": sum(1 for r in rows if r["average"] is not None),
            **aggregate,
            "students": student_rows,
        }

    def compute_subject_statistics(self, subject_id: int, class_id: int, trimester: str,
                                   academic_year: str) -> Dict[str, Any]:
        validate_trimester(trimester)
        validate_academic_year(academic_year)
        subject = self.store.get_subject(subject_id)
        classroom = self.store.get_class(class_id)

        grades = self.store.find(trimester, academic_year, subject_id=subject.id, class_id=classroom.id)
        averages = [g.average for g in grades if g.average is not None]
        total_students = len(self.store.class_students(classroom.id))

        result = {
            "subject_id": subject.id,
            "subject_name": subject.name,
            "class_id": classroom.id,
            "trimester": trimester,
            "academic_year": academic_year,
            "total_students": total_students,
            "evaluated_students": len(averages),
        }
        if not averages:
            result.update({"average": 0.0, "min_score": 0.0, "max_score": 0.0, "success_rate": 0.0})
            return result

        passed = sum(1 for a in averages if a >= PASS_MARK)
        result.update({
            "average": _round(sum(averages) / len(averages)),
            "min_score": _round(min(averages)),
            "max_score": _round(max(averages)),
            "success_rate": _round(passed / len(averages) * 100),
        })
        return result

    def compute_level_ranking(self, level: str, trimester: str, academic_year: str,
                              series: Optional[str] = None) -> Dict[str, Any]:
        """Ranking across every class of a level; does not touch the per-class snapshots."""
        validate_level(level)
        validate_trimester(trimester)
        validate_academic_year(academic_year)

        classes = self.store.classes_for_level(level, academic_year, series)
        class_names = {c.id: c.name for c in classes}
        students = []
        for classroom in classes:
            students.extend(self.store.class_students(classroom.id))

        rows = self._cohort(students, trimester, academic_year)
        ranking = [
            {
                "student_id": r["student_id"],
                "matricule": r["matricule"],
                "first_name": r["first_name"],
                "last_name": r["last_name"],
                "class_id": r["class_id"],
                "class_name": class_names[r["class_id"]],
                "average": r["average"],
                "rank": r["rank"],
                "mention": classify_mention(r["average"]),
            }
            for r in rows
        ]
        return {
            "level": level,
            "series": series,
            "trimester": trimester,
            "academic_year": academic_year,
            "total_students": len(ranking),
            "ranking": ranking,
        }
