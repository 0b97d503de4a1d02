"""Vote submission endpoints."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from prestige.api.deps import get_db_session, get_voting_day
from prestige.api.routes.auth import AuthenticatedUser, get_optional_user
from prestige.schemas import EloChangeRead, VoteCreate, VoteHistoryItem, VoteResponse
from prestige.services.selector import NotEnoughCompaniesError, get_comparison_for
from prestige.services.votes import (
    DuplicateVoteError,
    InvalidVoteError,
    RatingConflictError,
    VoterIdentity,
    check_against_comparison,
    list_votes_for_identity,
    record_vote,
)

router = APIRouter(prefix="/votes")


def _identity(user: AuthenticatedUser | None, anonymous_id: str | None) -> VoterIdentity:
    if user is not None and anonymous_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Send either a bearer token or an anonymous_id, not both",
        )
    if user is not None:
        return VoterIdentity(user_id=user.user_id)
    if not anonymous_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A bearer token or an anonymous_id is required",
        )
    return VoterIdentity(anonymous_id=anonymous_id)


@router.post("", response_model=VoteResponse, status_code=status.HTTP_201_CREATED)
def submit_vote(
    payload: VoteCreate,
    session: Session = Depends(get_db_session),
    day: date = Depends(get_voting_day),
    user: AuthenticatedUser | None = Depends(get_optional_user),
) -> VoteResponse:
    """Record the caller's choice for today's comparison and return the rating changes."""

    identity = _identity(user, payload.anonymous_id)
    try:
        comparison = get_comparison_for(session, day)
    except NotEnoughCompaniesError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    try:
        check_against_comparison(
            comparison,
            comparison_date=payload.comparison_date,
            company_ids=payload.company_ids,
        )
        result = record_vote(
            session,
            identity=identity,
            company_id=payload.company_id,
            comparison_date=payload.comparison_date,
            company_ids=payload.company_ids,
        )
    except InvalidVoteError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DuplicateVoteError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except RatingConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Your vote could not be recorded right now, please try again later",
        ) from exc

    return VoteResponse(
        vote_id=result.vote_id,
        comparison_date=result.comparison_date,
        elo_changes=[EloChangeRead.model_validate(change) for change in result.elo_changes],
    )


@router.get("/mine", response_model=list[VoteHistoryItem])
def my_votes(
    anonymous_id: str | None = Query(default=None, max_length=128),
    limit: int = Query(default=100, ge=1, le=500),
    session: Session = Depends(get_db_session),
    user: AuthenticatedUser | None = Depends(get_optional_user),
) -> list[VoteHistoryItem]:
    identity = _identity(user, anonymous_id)
    votes = list_votes_for_identity(session, identity, limit=limit)
    return [VoteHistoryItem.model_validate(vote) for vote in votes]


__all__ = ["my_votes", "router", "submit_vote"]
