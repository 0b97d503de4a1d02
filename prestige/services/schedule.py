"""Scheduling of daily comparisons ahead of time."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from prestige.models import AuditLog, ComparisonCompany, ScheduledComparison
from prestige.services.rating_store import RatingStore
from prestige.services.selector import get_scheduled_comparison, today_utc

LOGGER = logging.getLogger(__name__)


class ScheduleError(RuntimeError):
    """Base exception for comparison scheduling errors."""


class InvalidComparisonError(ScheduleError):
    """Raised when the requested comparison is malformed."""


class ComparisonLockedError(ScheduleError):
    """Raised when touching a comparison whose day has already passed."""


class DuplicateComparisonError(ScheduleError):
    """Raised when a comparison already exists for the date."""


class ComparisonNotFoundError(ScheduleError):
    """Raised when no comparison is scheduled for the date."""


def _ensure_editable(comparison_date: date, today: date | None) -> None:
    current = today or today_utc()
    if comparison_date < current:
        raise ComparisonLockedError(f"Comparison for {comparison_date.isoformat()} is read-only")


def schedule_comparison(
    session: Session,
    *,
    comparison_date: date,
    theme: str,
    company_ids: Sequence[int],
    today: date | None = None,
    actor: str | None = None,
) -> ScheduledComparison:
    """Schedule ``company_ids`` (in display order) under ``theme`` for a day."""

    _ensure_editable(comparison_date, today)
    if not theme or not theme.strip():
        raise InvalidComparisonError("Theme is required")
    ordered_ids = list(dict.fromkeys(company_ids))
    if len(ordered_ids) != len(company_ids) or len(ordered_ids) < 2:
        raise InvalidComparisonError("A comparison needs at least two distinct companies")

    RatingStore(session).load(ordered_ids)

    comparison = ScheduledComparison(date=comparison_date, theme=theme.strip())
    comparison.entries = [
        ComparisonCompany(company_id=company_id, position=position)
        for position, company_id in enumerate(ordered_ids)
    ]
    session.add(comparison)
    session.add(
        AuditLog(
            actor=actor,
            action="comparison.schedule",
            resource_type="ScheduledComparison",
            resource_id=comparison_date.isoformat(),
            payload={"theme": comparison.theme, "company_ids": ordered_ids},
        )
    )
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise DuplicateComparisonError(
            f"A comparison is already scheduled for {comparison_date.isoformat()}"
        ) from exc
    session.refresh(comparison)
    LOGGER.info("comparison scheduled", extra={"date": comparison_date.isoformat(), "company_ids": ordered_ids})
    return comparison


def delete_comparison(
    session: Session,
    *,
    comparison_date: date,
    today: date | None = None,
    actor: str | None = None,
) -> None:
    _ensure_editable(comparison_date, today)
    comparison = get_scheduled_comparison(session, comparison_date)
    if comparison is None:
        raise ComparisonNotFoundError(f"No comparison scheduled for {comparison_date.isoformat()}")
    session.delete(comparison)
    session.add(
        AuditLog(
            actor=actor,
            action="comparison.delete",
            resource_type="ScheduledComparison",
            resource_id=comparison_date.isoformat(),
            payload=None,
        )
    )
    session.commit()
    LOGGER.info("comparison deleted", extra={"date": comparison_date.isoformat()})


__all__ = [
    "ComparisonLockedError",
    "ComparisonNotFoundError",
    "DuplicateComparisonError",
    "InvalidComparisonError",
    "ScheduleError",
    "delete_comparison",
    "schedule_comparison",
]
