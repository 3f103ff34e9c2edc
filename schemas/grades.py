from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Trimester = Literal["first", "second", "third"]
Score = Optional[float]


# ✅ score fields shared by single and bulk entry
class GradeScores(BaseModel):
    interrogation1: Score = Field(default=None, ge=0, le=20)
    interrogation2: Score = Field(default=None, ge=0, le=20)
    interrogation3: Score = Field(default=None, ge=0, le=20)
    composition: Score = Field(default=None, ge=0, le=20)
    appreciation: Optional[str] = None
    coefficient: Optional[float] = Field(default=None, ge=0.5, le=10)   # override of the subject coefficient

    def changes(self) -> dict:
        """Only the fields the client actually sent; an explicit null clears a score."""
        return self.model_dump(exclude_unset=True)


# ✅ input: PUT /grades (upsert)
class GradeUpsert(GradeScores):
    student_id: int
    subject_id: int
    trimester: Trimester
    academic_year: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{4}$")

    def changes(self) -> dict:
        return self.model_dump(
            exclude_unset=True, exclude={"student_id", "subject_id", "trimester", "academic_year"}
        )


class BulkGradeEntry(GradeScores):
    student_id: int

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        data["student_id"] = self.student_id
        return data


# ✅ input: POST /grades/bulk
class BulkGradeUpsert(BaseModel):
    class_id: int
    subject_id: int
    trimester: Trimester
    academic_year: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{4}$")
    grades: List[BulkGradeEntry] = Field(..., min_length=1)


# ✅ input: POST /grades/average (calculator only)
class AverageRequest(BaseModel):
    interrogation1: Score = Field(default=None, ge=0, le=20)
    interrogation2: Score = Field(default=None, ge=0, le=20)
    interrogation3: Score = Field(default=None, ge=0, le=20)
    composition: Score = Field(default=None, ge=0, le=20)
