"""Schemas for vote submission and history."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class VoteCreate(BaseModel):
    """Vote payload. Authenticated callers omit ``anonymous_id``."""

    company_id: int = Field(..., gt=0)
    comparison_date: date
    company_ids: list[int] = Field(..., description="Every company shown in the comparison")
    anonymous_id: str | None = Field(default=None, min_length=1, max_length=128)


class EloChangeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    before: int
    after: int
    change: int
    votes: int
    win_percentage: int


class VoteResponse(BaseModel):
    vote_id: int
    comparison_date: date
    elo_changes: list[EloChangeRead]


class VoteHistoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    comparison_date: date
    created_at: datetime


__all__ = ["EloChangeRead", "VoteCreate", "VoteHistoryItem", "VoteResponse"]
