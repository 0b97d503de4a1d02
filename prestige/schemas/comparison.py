"""Schemas for daily comparisons."""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field

from prestige.schemas.company import CompanyRead


class ComparisonRead(BaseModel):
    """Companies and theme shown on a UTC day."""

    date: dt.date
    theme: str
    scheduled: bool
    companies: list[CompanyRead]


class ComparisonScheduleRequest(BaseModel):
    date: dt.date
    theme: str = Field(..., min_length=1, max_length=255)
    company_ids: list[int] = Field(..., min_length=2, description="Companies in display order")


__all__ = ["ComparisonRead", "ComparisonScheduleRequest"]
