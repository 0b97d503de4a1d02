from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

from prestige.models import ComparisonCompany, ScheduledComparison
from prestige.services.selector import (
    THEMES,
    NotEnoughCompaniesError,
    fallback_indices,
    get_comparison_for,
    theme_for,
    today_utc,
)


def test_fallback_indices_follow_date_hash() -> None:
    # "2024-03-18" sums to 494.
    assert fallback_indices(date(2024, 3, 18), 8) == (6, 7)


@pytest.mark.parametrize("count", [2, 3])
def test_fallback_indices_never_pick_same_company(count: int) -> None:
    first, second = fallback_indices(date(2024, 3, 18), count)
    assert first != second


def test_fallback_indices_require_two_companies() -> None:
    with pytest.raises(NotEnoughCompaniesError):
        fallback_indices(date(2024, 3, 18), 1)


def test_theme_cycles_through_day_of_year() -> None:
    assert theme_for(date(2025, 1, 1)) == THEMES[1]
    assert theme_for(date(2024, 3, 18)) == "Hardware Innovators"
    assert theme_for(date(2025, 1, 12)) == THEMES[0]


def test_today_uses_utc_calendar() -> None:
    late_evening_west = datetime(2024, 3, 18, 22, 30, tzinfo=timezone(timedelta(hours=-5)))
    assert today_utc(late_evening_west) == date(2024, 3, 19)
    assert today_utc(datetime(2024, 3, 18, 0, 0, tzinfo=UTC)) == date(2024, 3, 18)


def test_fallback_comparison_is_stable(db_session: Session, make_company) -> None:
    for name in ("Google", "Apple", "Microsoft", "Amazon", "Meta", "Netflix", "Tesla", "Nvidia"):
        make_company(name)

    day = date(2024, 3, 18)
    first = get_comparison_for(db_session, day)
    second = get_comparison_for(db_session, day)

    assert first.company_ids == second.company_ids
    assert first.theme == second.theme == "Hardware Innovators"
    assert [company.name for company in first.companies] == ["Tesla", "Nvidia"]
    assert first.scheduled is False


def test_scheduled_comparison_is_returned_unmodified(db_session: Session, make_company) -> None:
    apple = make_company("Apple")
    google = make_company("Google")
    meta = make_company("Meta")
    day = date(2024, 3, 18)
    comparison = ScheduledComparison(date=day, theme="AI Pioneers")
    comparison.entries = [
        ComparisonCompany(company_id=meta.id, position=0),
        ComparisonCompany(company_id=apple.id, position=1),
        ComparisonCompany(company_id=google.id, position=2),
    ]
    db_session.add(comparison)
    db_session.commit()

    result = get_comparison_for(db_session, day)

    assert result.scheduled is True
    assert result.theme == "AI Pioneers"
    assert result.company_ids == [meta.id, apple.id, google.id]


def test_not_enough_companies(db_session: Session, make_company) -> None:
    make_company("Lonely Corp")
    with pytest.raises(NotEnoughCompaniesError):
        get_comparison_for(db_session, date(2024, 3, 18))
