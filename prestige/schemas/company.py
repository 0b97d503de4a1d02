"""Schemas for company rankings and rating history."""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict


class CompanyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    logo: str | None
    rating: int
    votes: int
    win_percentage: int


class LeaderboardEntry(CompanyRead):
    rank: int


class RatingHistoryRead(BaseModel):
    """One end-of-day snapshot of a company."""

    model_config = ConfigDict(from_attributes=True)

    company_id: int
    date: dt.date
    rating: int
    votes: int
    win_percentage: int
    daily_change: int


__all__ = ["CompanyRead", "LeaderboardEntry", "RatingHistoryRead"]
