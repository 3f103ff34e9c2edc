from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from database.db import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)                              # student id (PK)
    matricule = Column(String(20), unique=True, nullable=False)                     # school registration number
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    gender = Column(String(10))                                                     # male / female
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)  # current class

    classroom = relationship("Classroom", back_populates="students")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
