"""Administrative endpoints for rating maintenance and scheduling."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from prestige.api.deps import get_db_session, get_voting_day
from prestige.api.routes.auth import AuthenticatedUser, require_role
from prestige.schemas import (
    CompanyRead,
    ComparisonRead,
    ComparisonScheduleRequest,
    DailyUpdateRead,
    DailyUpdatesRequest,
    DailyUpdatesResponse,
    VoteCountAuditResponse,
    VoteCountDiscrepancyRead,
    VoteCountFixRead,
    VoteCountFixRequest,
    VoteCountFixResponse,
)
from prestige.services.aggregation import AggregationError, process_daily_updates
from prestige.services.rating_store import UnknownCompanyError
from prestige.services.reconciliation import ReconciliationError, audit_vote_counts, fix_vote_counts
from prestige.services.schedule import (
    ComparisonLockedError,
    ComparisonNotFoundError,
    DuplicateComparisonError,
    InvalidComparisonError,
    delete_comparison,
    schedule_comparison,
)
from prestige.services.selector import yesterday_utc

router = APIRouter(prefix="/admin")


@router.post("/daily-updates", response_model=DailyUpdatesResponse)
def run_daily_updates(
    payload: DailyUpdatesRequest | None = None,
    session: Session = Depends(get_db_session),
    user: AuthenticatedUser = Depends(require_role("ADMIN")),
) -> DailyUpdatesResponse:
    """Snapshot every company's rating for a day. Safe to call repeatedly."""

    target = (payload.date if payload else None) or yesterday_utc()
    try:
        updates = process_daily_updates(session, target, actor=user.user_id)
    except AggregationError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return DailyUpdatesResponse(
        date=target,
        updates=[DailyUpdateRead.model_validate(update) for update in updates],
    )


@router.get("/vote-counts", response_model=VoteCountAuditResponse)
def vote_count_audit(
    session: Session = Depends(get_db_session),
    user: AuthenticatedUser = Depends(require_role("ADMIN")),
) -> VoteCountAuditResponse:
    discrepancies = audit_vote_counts(session)
    return VoteCountAuditResponse(
        discrepancies=[VoteCountDiscrepancyRead(**item.to_dict()) for item in discrepancies]
    )


@router.post("/vote-counts/fix", response_model=VoteCountFixResponse)
def vote_count_fix(
    payload: VoteCountFixRequest,
    session: Session = Depends(get_db_session),
    user: AuthenticatedUser = Depends(require_role("ADMIN")),
) -> VoteCountFixResponse:
    """Reset stored vote counters to the ledger count; requires ``{"fix": true}``."""

    if not payload.fix:
        return VoteCountFixResponse(applied=False, updates=[])
    try:
        fixes = fix_vote_counts(session, actor=user.user_id)
    except ReconciliationError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return VoteCountFixResponse(applied=True, updates=[VoteCountFixRead.model_validate(fix) for fix in fixes])


@router.post("/comparisons", response_model=ComparisonRead, status_code=status.HTTP_201_CREATED)
def create_comparison(
    payload: ComparisonScheduleRequest,
    session: Session = Depends(get_db_session),
    today: date = Depends(get_voting_day),
    user: AuthenticatedUser = Depends(require_role("ADMIN")),
) -> ComparisonRead:
    try:
        comparison = schedule_comparison(
            session,
            comparison_date=payload.date,
            theme=payload.theme,
            company_ids=payload.company_ids,
            today=today,
            actor=user.user_id,
        )
    except InvalidComparisonError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except UnknownCompanyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (ComparisonLockedError, DuplicateComparisonError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return ComparisonRead(
        date=comparison.date,
        theme=comparison.theme,
        scheduled=True,
        companies=[CompanyRead.model_validate(company) for company in comparison.companies],
    )


@router.delete("/comparisons/{day}", status_code=status.HTTP_204_NO_CONTENT)
def remove_comparison(
    day: date,
    session: Session = Depends(get_db_session),
    today: date = Depends(get_voting_day),
    user: AuthenticatedUser = Depends(require_role("ADMIN")),
) -> Response:
    try:
        delete_comparison(session, comparison_date=day, today=today, actor=user.user_id)
    except ComparisonNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ComparisonLockedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = [
    "create_comparison",
    "remove_comparison",
    "router",
    "run_daily_updates",
    "vote_count_audit",
    "vote_count_fix",
]
