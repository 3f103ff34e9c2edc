from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from database.db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Bulletin(Base):
    __tablename__ = "bulletins"  # report card snapshot, detached from later grade changes
    __table_args__ = (
        UniqueConstraint("student_id", "trimester", "academic_year", name="uq_bulletin_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    trimester = Column(String(10), nullable=False)
    academic_year = Column(String(9), nullable=False)

    lines = Column(JSON, default=list)              # one entry per subject
    statistics = Column(JSON, default=dict)         # computed statistics bundle
    general_appreciation = Column(Text)

    is_published = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    student = relationship("Student")
