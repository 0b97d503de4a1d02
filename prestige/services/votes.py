"""Vote ledger: one vote per identity per day, applied to company ratings."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from prestige.core.config import Settings, get_settings
from prestige.models import Vote
from prestige.obs.metrics import DUPLICATE_VOTE_COUNTER, RATING_CONFLICT_COUNTER, VOTES_RECORDED_COUNTER
from prestige.obs.tracing import traced_span
from prestige.services.rating import compute_group_deltas, loser_win_percentage, winner_win_percentage
from prestige.services.rating_store import RatingStore, UnknownCompanyError
from prestige.services.selector import DailyComparison

LOGGER = logging.getLogger(__name__)

DUPLICATE_VOTE_CONSTRAINTS = frozenset({"uq_votes_user_date", "uq_votes_anonymous_date"})
# SQLite names the columns, not the constraint, in its error message.
_DUPLICATE_VOTE_COLUMNS = (
    "votes.user_id, votes.comparison_date",
    "votes.anonymous_id, votes.comparison_date",
)


class VoteError(RuntimeError):
    """Base class for vote ledger errors."""


class InvalidVoteError(VoteError):
    """Raised when a vote request is malformed. Nothing is written."""


class DuplicateVoteError(VoteError):
    """Raised when the identity already voted for the comparison date."""


class RatingConflictError(VoteError):
    """Raised when concurrent rating updates kept winning every retry."""


@dataclass(slots=True, frozen=True)
class VoterIdentity:
    """Either an authenticated user id or an anonymous client id, never both."""

    user_id: str | None = None
    anonymous_id: str | None = None

    def validate(self) -> None:
        if bool(self.user_id) == bool(self.anonymous_id):
            raise InvalidVoteError("Exactly one of user_id or anonymous_id must be supplied")

    def describe(self) -> str:
        if self.user_id:
            return f"user:{self.user_id}"
        return f"anonymous:{self.anonymous_id}"


@dataclass(slots=True, frozen=True)
class EloChange:
    """Before/after state of one company affected by a vote."""

    id: int
    name: str
    before: int
    after: int
    change: int
    votes: int
    win_percentage: int

    def to_dict(self) -> dict[str, int | str]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class VoteResult:
    vote_id: int
    comparison_date: date
    elo_changes: list[EloChange]


def is_duplicate_vote(exc: IntegrityError) -> bool:
    """Whether ``exc`` came from one of the one-vote-per-day unique constraints."""

    diag = getattr(exc.orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return constraint_name in DUPLICATE_VOTE_CONSTRAINTS
    message = str(exc.orig)
    return any(name in message for name in DUPLICATE_VOTE_CONSTRAINTS) or any(
        columns in message for columns in _DUPLICATE_VOTE_COLUMNS
    )


def check_against_comparison(
    comparison: DailyComparison,
    *,
    comparison_date: date,
    company_ids: Sequence[int],
) -> None:
    """Reject a vote that is not for ``comparison`` exactly as it was shown.

    Only the current day's comparison accepts votes; past days are read-only
    and future days have not been shown yet.
    """

    if comparison_date != comparison.date:
        raise InvalidVoteError(
            f"Votes are only accepted for {comparison.date.isoformat()}, not {comparison_date.isoformat()}"
        )
    if set(company_ids) != set(comparison.company_ids):
        raise InvalidVoteError("Company ids do not match the comparison shown for the day")


def _validate_request(identity: VoterIdentity, company_id: int | None, company_ids: Sequence[int]) -> list[int]:
    identity.validate()
    if not company_id:
        raise InvalidVoteError("company_id is required")
    unique_ids = list(dict.fromkeys(company_ids))
    if len(unique_ids) != len(company_ids):
        raise InvalidVoteError("Comparison company ids must be distinct")
    if len(unique_ids) < 2:
        raise InvalidVoteError("A comparison needs at least two companies")
    if company_id not in unique_ids:
        raise InvalidVoteError(f"Company {company_id} is not part of the comparison")
    return unique_ids


def _apply_vote(
    session: Session,
    *,
    identity: VoterIdentity,
    company_id: int,
    comparison_date: date,
    company_ids: list[int],
    k_factor: int,
) -> VoteResult:
    store = RatingStore(session)

    vote = Vote(
        company_id=company_id,
        user_id=identity.user_id or None,
        anonymous_id=None if identity.user_id else identity.anonymous_id,
        comparison_date=comparison_date,
    )
    session.add(vote)
    session.flush()

    companies = store.load(company_ids)
    before = {cid: store.freeze(company) for cid, company in companies.items()}
    changes = compute_group_deltas(
        company_id, {cid: snapshot.rating for cid, snapshot in before.items()}, k_factor=k_factor
    )

    for cid in company_ids:
        if cid == company_id:
            continue
        snapshot = before[cid]
        store.apply(
            companies[cid],
            rating=snapshot.rating + changes[cid],
            win_percentage=loser_win_percentage(snapshot.win_percentage, snapshot.votes),
        )

    winner = before[company_id]
    store.apply(
        companies[company_id],
        rating=winner.rating + changes[company_id],
        votes=winner.votes + 1,
        win_percentage=winner_win_percentage(winner.win_percentage, winner.votes),
    )

    elo_changes = [
        EloChange(
            id=cid,
            name=companies[cid].name,
            before=before[cid].rating,
            after=companies[cid].rating,
            change=companies[cid].rating - before[cid].rating,
            votes=companies[cid].votes,
            win_percentage=companies[cid].win_percentage,
        )
        for cid in company_ids
    ]
    vote.rating_changes = [item.to_dict() for item in elo_changes]
    session.flush()
    return VoteResult(vote_id=vote.id, comparison_date=comparison_date, elo_changes=elo_changes)


def record_vote(
    session: Session,
    *,
    identity: VoterIdentity,
    company_id: int,
    comparison_date: date,
    company_ids: Sequence[int],
    settings: Settings | None = None,
) -> VoteResult:
    """Record a vote and move the ratings of every company in the comparison.

    The vote row and the rating updates commit in a single transaction. The
    ``(identity, comparison_date)`` unique constraints decide duplicates, so
    two simultaneous submissions cannot both get through. Rating updates that
    lose a version race roll the whole attempt back and start again from
    fresh reads.
    """

    settings = settings or get_settings()
    ids = _validate_request(identity, company_id, company_ids)

    try:
        RatingStore(session).load(ids)
    except UnknownCompanyError as exc:
        session.rollback()
        raise InvalidVoteError(str(exc)) from exc

    with traced_span("votes.record", comparison_date=comparison_date.isoformat(), company_id=company_id) as span:
        for attempt in range(1, settings.vote_max_attempts + 1):
            try:
                result = _apply_vote(
                    session,
                    identity=identity,
                    company_id=company_id,
                    comparison_date=comparison_date,
                    company_ids=ids,
                    k_factor=settings.k_factor,
                )
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if not is_duplicate_vote(exc):
                    LOGGER.warning(
                        "vote rejected by a storage constraint",
                        extra={"company_ids": ids, "error": str(exc.orig)},
                    )
                    raise InvalidVoteError("The comparison changed while the vote was being recorded") from exc
                DUPLICATE_VOTE_COUNTER.inc()
                LOGGER.info(
                    "duplicate vote rejected",
                    extra={"identity": identity.describe(), "comparison_date": comparison_date.isoformat()},
                )
                raise DuplicateVoteError(
                    f"A vote for {comparison_date.isoformat()} was already recorded for this voter"
                ) from exc
            except StaleDataError:
                session.rollback()
                RATING_CONFLICT_COUNTER.inc()
                LOGGER.warning(
                    "rating update conflict, retrying vote",
                    extra={"attempt": attempt, "company_ids": ids},
                )
                continue
            except Exception:
                session.rollback()
                raise

            span.set_attribute("attempts", attempt)
            VOTES_RECORDED_COUNTER.inc()
            LOGGER.info(
                "vote recorded",
                extra={
                    "vote_id": result.vote_id,
                    "company_id": company_id,
                    "comparison_date": comparison_date.isoformat(),
                    "attempts": attempt,
                },
            )
            return result

    raise RatingConflictError(
        f"Could not apply rating changes after {settings.vote_max_attempts} attempts"
    )


def list_votes_for_identity(session: Session, identity: VoterIdentity, *, limit: int = 100) -> list[Vote]:
    """Return the identity's votes, newest comparison day first."""

    identity.validate()
    clauses = []
    if identity.user_id:
        clauses.append(Vote.user_id == identity.user_id)
    if identity.anonymous_id:
        clauses.append(Vote.anonymous_id == identity.anonymous_id)
    statement = (
        select(Vote)
        .where(or_(*clauses))
        .order_by(Vote.comparison_date.desc(), Vote.id.desc())
        .limit(limit)
    )
    return list(session.scalars(statement))


__all__ = [
    "DUPLICATE_VOTE_CONSTRAINTS",
    "DuplicateVoteError",
    "EloChange",
    "InvalidVoteError",
    "RatingConflictError",
    "VoteError",
    "VoteResult",
    "VoterIdentity",
    "check_against_comparison",
    "is_duplicate_vote",
    "list_votes_for_identity",
    "record_vote",
]
