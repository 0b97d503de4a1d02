"""Schemas for administrative rating maintenance."""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class DailyUpdatesRequest(BaseModel):
    date: dt.date | None = Field(default=None, description="UTC day to snapshot; defaults to yesterday")


class DailyUpdateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    company_id: int
    name: str
    previous_rating: int
    current_rating: int
    daily_change: int
    votes: int
    win_percentage: int


class DailyUpdatesResponse(BaseModel):
    date: dt.date
    updates: list[DailyUpdateRead]


class VoteCountDiscrepancyRead(BaseModel):
    company_id: int
    name: str
    stored_votes: int
    actual_votes: int
    difference: int


class VoteCountAuditResponse(BaseModel):
    discrepancies: list[VoteCountDiscrepancyRead]


class VoteCountFixRequest(BaseModel):
    fix: bool = False


class VoteCountFixRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    company_id: int
    previous_votes: int
    votes: int


class VoteCountFixResponse(BaseModel):
    applied: bool
    updates: list[VoteCountFixRead]


__all__ = [
    "DailyUpdateRead",
    "DailyUpdatesRequest",
    "DailyUpdatesResponse",
    "VoteCountAuditResponse",
    "VoteCountDiscrepancyRead",
    "VoteCountFixRead",
    "VoteCountFixRequest",
    "VoteCountFixResponse",
]
