"""ORM models package."""
from .audit_log import AuditLog
from .base import Base, TimestampMixin
from .company import Company
from .comparison import ComparisonCompany, ScheduledComparison
from .rating_history import RatingHistory
from .vote import Vote

__all__ = [
    "AuditLog",
    "Base",
    "Company",
    "ComparisonCompany",
    "RatingHistory",
    "ScheduledComparison",
    "TimestampMixin",
    "Vote",
]
