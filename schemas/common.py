"""
schemas/common.py

- Schemas shared across the project
- Pydantic v2
- Contents:
  1) standard error body: ErrorDetail, ErrorResponse
  2) pagination params and meta: Pagination, MetaInfo, make_meta()
"""

from __future__ import annotations

from datetime import datetime, timezone
from math import ceil
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


# =========================================================
# 1) standard error body
# =========================================================

class ErrorDetail(BaseModel):
    code: str = Field(..., description="error code, e.g. NOT_FOUND, INVALID_INPUT")
    message: str = Field(..., description="human readable message")


class ErrorResponse(BaseModel):
    """Body returned by the global error handlers (middlewares/error_handler.py)."""
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    trace_id: Optional[str] = Field(default=None, description="copied from X-Request-ID")

    model_config = ConfigDict(extra="ignore")


# =========================================================
# 2) pagination
# =========================================================

class Pagination(BaseModel):
    """
    Paging parameters for list endpoints
    - page starts at 1
    - size between 1 and 200
    """
    page: int = Field(1, ge=1)
    size: int = Field(50, ge=1, le=200)

    model_config = ConfigDict(extra="ignore")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


class MetaInfo(BaseModel):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    size: int = Field(..., ge=1)
    pages: int = Field(..., ge=1)

    model_config = ConfigDict(extra="ignore")


def make_meta(total: int, page: int, size: int) -> MetaInfo:
    """pages is at least 1 even when total is 0"""
    pages = max(1, ceil(total / max(1, size)))
    return MetaInfo(total=total, page=page, size=size, pages=pages)
