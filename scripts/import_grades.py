"""
CSV -> DB import of grades, through the Grade Record Store.

    python -m scripts.import_grades

data/grades.csv  student_id,subject_id,trimester,academic_year,interrogation1,interrogation2,interrogation3,composition,appreciation

Empty score cells are left untouched; rows that fail validation are reported
and skipped.
"""

import csv
import logging

from database.db import SessionLocal, init_db
from services.errors import InvalidInputError, NotFoundError
from services.grade_store import SCORE_FIELDS, GradeStore

logger = logging.getLogger(__name__)

CSV_PATH = "data/grades.csv"


def _fields(row: dict) -> dict:
    fields = {}
    for name in SCORE_FIELDS:
        value = (row.get(name) or "").strip()
        if value:
            fields[name] = float(value.replace(",", "."))     # "12,5" is common in exports
    if (row.get("appreciation") or "").strip():
        fields["appreciation"] = row["appreciation"].strip()
    return fields


def migrate_grades(path: str = CSV_PATH) -> dict:
    init_db()
    db = SessionLocal()
    store = GradeStore(db)
    imported, failed = 0, []
    try:
        with open(path, newline="", encoding="utf-8-sig") as csvfile:
            for line_no, row in enumerate(csv.DictReader(csvfile), start=2):
                try:
                    store.upsert(
                        int(row["student_id"]),
                        int(row["subject_id"]),
                        row["trimester"].strip(),
                        row["academic_year"].strip(),
                        **_fields(row),
                    )
                    imported += 1
                except (InvalidInputError, NotFoundError) as exc:
                    db.rollback()
                    failed.append(f"line {line_no}: {exc.message}")
                except ValueError as exc:
                    db.rollback()
                    failed.append(f"line {line_no}: {exc}")
    finally:
        db.close()

    for message in failed:
        logger.warning(message)
    logger.info("grades imported: %s ok, %s failed", imported, len(failed))
    return {"imported": imported, "failed": failed}


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    migrate_grades()
