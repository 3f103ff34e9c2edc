from sqlalchemy import JSON, Boolean, Column, Float, Integer, String
from database.db import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)       # subject id (PK)
    name = Column(String(100), nullable=False)               # e.g. Mathématiques
    code = Column(String(20), unique=True, nullable=False)   # upper-cased short code, e.g. MATH
    coefficient = Column(Float, nullable=False, default=1)   # default weight, 0.5 - 10
    level = Column(String(20), nullable=False)               # cycle the subject is taught in
    series = Column(JSON, default=list)                      # lycee series; [] or ["all"] = every series
    is_active = Column(Boolean, default=True)

    def applies_to(self, level: str, series: str = None) -> bool:
        """Whether the subject is taught to a class of this level/series."""
        if self.level != level:
            return False
        scope = self.series or []
        if not series or not scope or "all" in scope:
            return True
        return series in scope
