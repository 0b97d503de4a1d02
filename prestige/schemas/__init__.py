"""Pydantic schemas package."""

from .admin import (
    DailyUpdateRead,
    DailyUpdatesRequest,
    DailyUpdatesResponse,
    VoteCountAuditResponse,
    VoteCountDiscrepancyRead,
    VoteCountFixRead,
    VoteCountFixRequest,
    VoteCountFixResponse,
)
from .company import CompanyRead, LeaderboardEntry, RatingHistoryRead
from .comparison import ComparisonRead, ComparisonScheduleRequest
from .vote import EloChangeRead, VoteCreate, VoteHistoryItem, VoteResponse

__all__ = [
    "CompanyRead",
    "ComparisonRead",
    "ComparisonScheduleRequest",
    "DailyUpdateRead",
    "DailyUpdatesRequest",
    "DailyUpdatesResponse",
    "EloChangeRead",
    "LeaderboardEntry",
    "RatingHistoryRead",
    "VoteCountAuditResponse",
    "VoteCountDiscrepancyRead",
    "VoteCountFixRead",
    "VoteCountFixRequest",
    "VoteCountFixResponse",
    "VoteCreate",
    "VoteHistoryItem",
    "VoteResponse",
]
