from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database.db import Base


class Classroom(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)      # class id (PK)
    name = Column(String(100), nullable=False)              # display name, e.g. "6e A"
    level = Column(String(20), nullable=False, index=True)  # cycle: maternelle / primaire / college / lycee
    grade_name = Column(String(20))                         # class grade, e.g. 6e, 2nde, Tle
    series = Column(String(10))                             # lycee series (A4, C, D...), None elsewhere
    academic_year = Column(String(9), nullable=False)       # "2025-2026"
    capacity = Column(Integer, default=35)

    # ==========================================================
    # [relations]
    # ==========================================================

    # ✅ a class is the ranking cohort: every student belongs to exactly one
    students = relationship("Student", back_populates="classroom")
