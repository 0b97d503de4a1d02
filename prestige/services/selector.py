"""Daily comparison selection."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from prestige.models import Company, ComparisonCompany, ScheduledComparison

THEMES: tuple[str, ...] = (
    "Innovation Leaders",
    "User Experience Champions",
    "Market Disruptors",
    "Tech Giants",
    "Cloud Computing Leaders",
    "AI Pioneers",
    "Hardware Innovators",
    "Software Powerhouses",
    "Consumer Tech Favorites",
    "Enterprise Solutions",
    "Social Media Titans",
    "E-commerce Leaders",
)

_SECOND_PICK_FACTOR = 13


class SelectionError(RuntimeError):
    """Base exception for comparison selection errors."""


class NotEnoughCompaniesError(SelectionError):
    """Raised when fewer than two companies are available for a date."""


@dataclass(slots=True, frozen=True)
class DailyComparison:
    """Theme and ordered companies shown on a UTC day."""

    date: date
    theme: str
    companies: tuple[Company, ...]
    scheduled: bool

    @property
    def company_ids(self) -> list[int]:
        return [company.id for company in self.companies]


def today_utc(now: datetime | None = None) -> date:
    """Return the current voting day, which always follows the UTC calendar."""

    current = now or datetime.now(UTC)
    if current.tzinfo is not None:
        current = current.astimezone(UTC)
    return current.date()


def yesterday_utc(now: datetime | None = None) -> date:
    return today_utc(now) - timedelta(days=1)


def theme_for(day: date) -> str:
    """Pick the fallback theme from the day of the year (1 January is day 1)."""

    return THEMES[day.timetuple().tm_yday % len(THEMES)]


def fallback_indices(day: date, company_count: int) -> tuple[int, int]:
    """Return two distinct positions into the id-ordered company list.

    Derived from the ISO date string alone so every caller asking about the
    same day gets the same pair.
    """

    if company_count < 2:
        raise NotEnoughCompaniesError(f"At least two companies are required, found {company_count}")

    date_hash = sum(ord(char) for char in day.isoformat())
    first = date_hash % company_count
    second = (date_hash * _SECOND_PICK_FACTOR) % company_count
    if second == first:
        second = (second + 1) % company_count
    return first, second


def pick_fallback_pair(day: date, companies: Sequence[Company]) -> tuple[Company, Company]:
    ordered = sorted(companies, key=lambda company: company.id)
    first, second = fallback_indices(day, len(ordered))
    return ordered[first], ordered[second]


def get_scheduled_comparison(session: Session, day: date) -> ScheduledComparison | None:
    statement = (
        select(ScheduledComparison)
        .where(ScheduledComparison.date == day)
        .options(selectinload(ScheduledComparison.entries).selectinload(ComparisonCompany.company))
    )
    return session.scalars(statement).first()


def get_comparison_for(session: Session, day: date) -> DailyComparison:
    """Return the comparison users see on ``day``.

    A scheduled comparison wins when one exists. Otherwise two companies and
    a theme are derived from the date.
    """

    scheduled = get_scheduled_comparison(session, day)
    if scheduled is not None:
        companies = tuple(scheduled.companies)
        if len(companies) < 2:
            raise NotEnoughCompaniesError(
                f"Scheduled comparison for {day.isoformat()} links {len(companies)} companies"
            )
        return DailyComparison(date=day, theme=scheduled.theme, companies=companies, scheduled=True)

    all_companies = session.scalars(select(Company).order_by(Company.id)).all()
    pair = pick_fallback_pair(day, all_companies)
    return DailyComparison(date=day, theme=theme_for(day), companies=pair, scheduled=False)


__all__ = [
    "DailyComparison",
    "NotEnoughCompaniesError",
    "SelectionError",
    "THEMES",
    "fallback_indices",
    "get_comparison_for",
    "get_scheduled_comparison",
    "pick_fallback_pair",
    "theme_for",
    "today_utc",
    "yesterday_utc",
]
