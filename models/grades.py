from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from database.db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Grade(Base):
    __tablename__ = "grades"  # one evaluation record per student/subject/trimester/year
    __table_args__ = (
        UniqueConstraint("student_id", "subject_id", "trimester", "academic_year", name="uq_grade_key"),
        Index("ix_grades_class_trimester", "class_id", "trimester", "academic_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)   # class at entry time
    trimester = Column(String(10), nullable=False)                         # first / second / third
    academic_year = Column(String(9), nullable=False)                      # "2025-2026"

    interrogation1 = Column(Float)                  # 0 - 20
    interrogation2 = Column(Float)                  # 0 - 20
    interrogation3 = Column(Float)                  # 0 - 20, optional
    composition = Column(Float)                     # 0 - 20, counted twice
    average = Column(Float)                         # derived, None until computable
    appreciation = Column(Text)
    coefficient = Column(Float)                     # None -> inherit Subject.coefficient

    is_published = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    student = relationship("Student")
    subject = relationship("Subject")
