"""Company leaderboard and rating history endpoints."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from prestige.api.deps import get_db_session
from prestige.models import Company
from prestige.schemas import CompanyRead, LeaderboardEntry, RatingHistoryRead
from prestige.services.aggregation import get_rating_history

router = APIRouter(prefix="/companies")


@router.get("", response_model=list[LeaderboardEntry])
def leaderboard(session: Session = Depends(get_db_session)) -> list[LeaderboardEntry]:
    """All companies ranked by rating, highest first."""

    statement = select(Company).order_by(Company.rating.desc(), Company.votes.desc(), Company.id)
    companies = session.scalars(statement).all()
    return [
        LeaderboardEntry(rank=position, **CompanyRead.model_validate(company).model_dump())
        for position, company in enumerate(companies, start=1)
    ]


@router.get("/{company_id}/history", response_model=list[RatingHistoryRead])
def rating_history(
    company_id: int,
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    session: Session = Depends(get_db_session),
) -> list[RatingHistoryRead]:
    if session.get(Company, company_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    rows = get_rating_history(session, company_id, start=start, end=end)
    return [RatingHistoryRead.model_validate(row) for row in rows]


__all__ = ["leaderboard", "rating_history", "router"]
