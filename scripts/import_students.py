"""
CSV -> DB import of the school roster.

    python -m scripts.import_students

data/classes.csv   id,name,level,grade_name,series,academic_year
data/subjects.csv  id,name,code,level,series,coefficient     (series: "C;D" or empty, coefficient optional)
data/students.csv  id,matricule,first_name,last_name,gender,class_id
"""

import csv
import logging

from sqlalchemy.orm import Session

from database.db import SessionLocal, init_db
from models.classes import Classroom as ClassModel
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from services.curriculum import default_coefficient, validate_academic_year, validate_level
from services.grade_calculator import validate_coefficient

logger = logging.getLogger(__name__)

CLASSES_CSV = "data/classes.csv"
SUBJECTS_CSV = "data/subjects.csv"
STUDENTS_CSV = "data/students.csv"


def _rows(path):
    with open(path, newline="", encoding="utf-8-sig") as csvfile:
        yield from csv.DictReader(csvfile)


def import_classes(db: Session, path: str = CLASSES_CSV) -> int:
    count = 0
    for row in _rows(path):
        db.merge(ClassModel(
            id=int(row["id"]),
            name=row["name"].strip(),
            level=validate_level(row["level"].strip()),
            grade_name=row.get("grade_name") or None,
            series=row.get("series") or None,                           # lycee only
            academic_year=validate_academic_year(row["academic_year"].strip()),
        ))
        count += 1
    return count


def import_subjects(db: Session, path: str = SUBJECTS_CSV) -> int:
    count = 0
    for row in _rows(path):
        level = validate_level(row["level"].strip())
        series = [s.strip() for s in (row.get("series") or "").split(";") if s.strip()]
        if row.get("coefficient"):
            coefficient = validate_coefficient(float(row["coefficient"]))
        else:
            # one series -> its BAC table, otherwise the level default
            coefficient = default_coefficient(row["name"].strip(), level, series[0] if len(series) == 1 else None)
        db.merge(SubjectModel(
            id=int(row["id"]),
            name=row["name"].strip(),
            code=row["code"].strip().upper(),
            level=level,
            series=series,
            coefficient=coefficient,
        ))
        count += 1
    return count


def import_students(db: Session, path: str = STUDENTS_CSV) -> int:
    count = 0
    for row in _rows(path):
        db.merge(StudentModel(
            id=int(row["id"]),
            matricule=row["matricule"].strip().upper(),
            first_name=row["first_name"].strip(),
            last_name=row["last_name"].strip(),
            gender=row.get("gender") or None,
            class_id=int(row["class_id"]),
        ))
        count += 1
    return count


def migrate_roster():
    init_db()
    db: Session = SessionLocal()
    try:
        classes = import_classes(db)
        subjects = import_subjects(db)
        students = import_students(db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    logger.info("roster imported: %s classes, %s subjects, %s students", classes, subjects, students)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    migrate_roster()
