from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from database.db import Base


class Statistics(Base):
    __tablename__ = "statistics"  # last computed snapshot, overwritten on every computation
    __table_args__ = (
        UniqueConstraint("student_id", "trimester", "academic_year", name="uq_statistics_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)
    trimester = Column(String(10), nullable=False)
    academic_year = Column(String(9), nullable=False)

    average = Column(Float, nullable=False, default=0)
    rank = Column(Integer)                           # None when unranked
    class_average = Column(Float, nullable=False, default=0)
    min_score = Column(Float, nullable=False, default=0)
    max_score = Column(Float, nullable=False, default=0)
    mention = Column(String(30), nullable=False)
    total_subjects = Column(Integer, nullable=False, default=0)
    completed_subjects = Column(Integer, nullable=False, default=0)
    subject_averages = Column(JSON, default=list)    # [{subject_id, average, coefficient}]
    computed_at = Column(DateTime(timezone=True))
