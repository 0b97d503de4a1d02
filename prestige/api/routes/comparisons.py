"""Daily comparison endpoints."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from prestige.api.deps import get_db_session, get_voting_day
from prestige.schemas import CompanyRead, ComparisonRead
from prestige.services.selector import DailyComparison, NotEnoughCompaniesError, get_comparison_for

router = APIRouter(prefix="/comparisons")


def _serialize(comparison: DailyComparison) -> ComparisonRead:
    return ComparisonRead(
        date=comparison.date,
        theme=comparison.theme,
        scheduled=comparison.scheduled,
        companies=[CompanyRead.model_validate(company) for company in comparison.companies],
    )


def _load(session: Session, day: date) -> ComparisonRead:
    try:
        return _serialize(get_comparison_for(session, day))
    except NotEnoughCompaniesError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/today", response_model=ComparisonRead)
def todays_comparison(
    session: Session = Depends(get_db_session),
    day: date = Depends(get_voting_day),
) -> ComparisonRead:
    return _load(session, day)


@router.get("/{day}", response_model=ComparisonRead)
def comparison_for_day(day: date, session: Session = Depends(get_db_session)) -> ComparisonRead:
    """Comparison for any UTC day given as ``YYYY-MM-DD``."""

    return _load(session, day)


__all__ = ["comparison_for_day", "router", "todays_comparison"]
