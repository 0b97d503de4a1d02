"""Daily rating snapshots derived from the vote ledger."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from prestige.models import AuditLog, Company, RatingHistory, Vote
from prestige.obs.metrics import RATING_SNAPSHOT_COUNTER
from prestige.services.selector import yesterday_utc

LOGGER = logging.getLogger(__name__)


class AggregationError(RuntimeError):
    """Raised when a daily snapshot run cannot be completed."""


@dataclass(slots=True, frozen=True)
class DailyUpdate:
    """End-of-day state written for one company."""

    company_id: int
    name: str
    previous_rating: int
    current_rating: int
    daily_change: int
    votes: int
    win_percentage: int

    def to_dict(self) -> dict[str, int | str]:
        return asdict(self)


@dataclass(slots=True)
class _LedgerTotals:
    day_change: int = 0
    later_change: int = 0
    later_wins: int = 0
    touched_later: bool = False
    win_percentage: int | None = None


def _ledger_totals(session: Session, target_date: date) -> dict[int, _LedgerTotals]:
    """Fold every ledger entry dated on or after ``target_date`` per company.

    ``win_percentage`` ends up as the value recorded by the last vote on
    ``target_date`` that touched the company.
    """

    totals: dict[int, _LedgerTotals] = defaultdict(_LedgerTotals)
    statement = (
        select(Vote.company_id, Vote.comparison_date, Vote.rating_changes)
        .where(Vote.comparison_date >= target_date)
        .order_by(Vote.comparison_date, Vote.created_at, Vote.id)
        .execution_options(yield_per=500)
    )
    for winner_id, comparison_date, rating_changes in session.execute(statement):
        later = comparison_date > target_date
        if later:
            totals[winner_id].later_wins += 1
        for entry in rating_changes or []:
            company_totals = totals[int(entry["id"])]
            if later:
                company_totals.later_change += int(entry["change"])
                company_totals.touched_later = True
            else:
                company_totals.day_change += int(entry["change"])
                company_totals.win_percentage = int(entry["win_percentage"])
    return totals


def _last_win_percentages_before(
    session: Session, company_ids: set[int], target_date: date
) -> dict[int, int]:
    """Win percentage recorded by each company's latest ledger entry before ``target_date``.

    Walks the earlier ledger newest first in one pass and stops once every
    requested company has been seen.
    """

    found: dict[int, int] = {}
    if not company_ids:
        return found
    statement = (
        select(Vote.rating_changes)
        .where(Vote.comparison_date < target_date)
        .order_by(Vote.comparison_date.desc(), Vote.created_at.desc(), Vote.id.desc())
        .execution_options(yield_per=500)
    )
    result = session.scalars(statement)
    try:
        for rating_changes in result:
            for entry in rating_changes or []:
                company_id = int(entry["id"])
                if company_id in company_ids and company_id not in found:
                    found[company_id] = int(entry["win_percentage"])
            if len(found) == len(company_ids):
                break
    finally:
        result.close()
    return found


def _upsert_snapshot(session: Session, update: DailyUpdate, target_date: date) -> None:
    statement = select(RatingHistory).where(
        RatingHistory.company_id == update.company_id, RatingHistory.date == target_date
    )
    row = session.scalars(statement).first()
    if row is None:
        row = RatingHistory(company_id=update.company_id, date=target_date)
        session.add(row)
    row.rating = update.current_rating
    row.votes = update.votes
    row.win_percentage = update.win_percentage
    row.daily_change = update.daily_change


def build_daily_updates(session: Session, target_date: date) -> list[DailyUpdate]:
    """Compute the end-of-day state of every company for ``target_date``.

    Current aggregates minus whatever the ledger recorded after the day give
    the state at the end of the day, so running this late or twice produces
    the same numbers. Companies without votes that day get a zero change.
    """

    totals = _ledger_totals(session, target_date)
    companies = session.scalars(select(Company).order_by(Company.id)).all()
    # Stored win percentage already includes later votes for these companies.
    needs_history = {
        company.id
        for company in companies
        if company.id in totals
        and totals[company.id].win_percentage is None
        and totals[company.id].touched_later
    }
    earlier = _last_win_percentages_before(session, needs_history, target_date)

    updates: list[DailyUpdate] = []
    for company in companies:
        company_totals = totals.get(company.id, _LedgerTotals())
        end_rating = company.rating - company_totals.later_change
        end_votes = max(0, company.votes - company_totals.later_wins)
        win_percentage = company_totals.win_percentage
        if win_percentage is None and company.id in needs_history:
            win_percentage = earlier.get(company.id)
            if win_percentage is None and end_votes == 0:
                win_percentage = 0
        if win_percentage is None:
            win_percentage = company.win_percentage
        updates.append(
            DailyUpdate(
                company_id=company.id,
                name=company.name,
                previous_rating=end_rating - company_totals.day_change,
                current_rating=end_rating,
                daily_change=company_totals.day_change,
                votes=end_votes,
                win_percentage=win_percentage,
            )
        )
    return updates


def process_daily_updates(
    session: Session,
    target_date: date | None = None,
    *,
    actor: str | None = None,
) -> list[DailyUpdate]:
    """Write one rating snapshot per company for ``target_date`` (default: yesterday, UTC).

    Existing snapshots for the date are overwritten, which makes re-running
    the job after a partial failure safe.
    """

    day = target_date or yesterday_utc()
    try:
        updates = build_daily_updates(session, day)
        for update in updates:
            _upsert_snapshot(session, update, day)
        session.add(
            AuditLog(
                actor=actor,
                action="rating_history.process_daily_updates",
                resource_type="RatingHistory",
                resource_id=day.isoformat(),
                payload={
                    "companies": len(updates),
                    "changed": sum(1 for update in updates if update.daily_change),
                },
            )
        )
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise AggregationError(
            f"Snapshots for {day.isoformat()} were written concurrently; re-run the job"
        ) from exc
    except Exception:
        session.rollback()
        raise

    RATING_SNAPSHOT_COUNTER.inc(len(updates))
    LOGGER.info(
        "daily rating snapshots written",
        extra={"date": day.isoformat(), "companies": len(updates)},
    )
    return updates


def get_rating_history(
    session: Session,
    company_id: int,
    *,
    start: date | None = None,
    end: date | None = None,
) -> list[RatingHistory]:
    statement = select(RatingHistory).where(RatingHistory.company_id == company_id)
    if start is not None:
        statement = statement.where(RatingHistory.date >= start)
    if end is not None:
        statement = statement.where(RatingHistory.date <= end)
    return list(session.scalars(statement.order_by(RatingHistory.date)))


__all__ = [
    "AggregationError",
    "DailyUpdate",
    "build_daily_updates",
    "get_rating_history",
    "process_daily_updates",
]
