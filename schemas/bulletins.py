from typing import Literal, Optional

from pydantic import BaseModel, Field


# ✅ input: POST /bulletins
class BulletinGenerate(BaseModel):
    student_id: int
    trimester: Literal["first", "second", "third"]
    academic_year: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{4}$")
    general_appreciation: Optional[str] = None     # defaults to "Moyenne générale: x/20 - mention"


# ✅ input: POST /bulletins/class/{class_id}
class ClassBulletinGenerate(BaseModel):
    trimester: Literal["first", "second", "third"]
    academic_year: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{4}$")


# ✅ input: PATCH /bulletins/{id}  (only the appreciation is editable)
class BulletinUpdate(BaseModel):
    general_appreciation: str = Field(..., min_length=1)
