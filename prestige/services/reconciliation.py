"""Detect and repair drift between stored vote counters and the vote ledger."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from prestige.models import AuditLog, Company, Vote
from prestige.obs.metrics import VOTE_COUNT_FIX_COUNTER
from prestige.services.rating_store import RatingStore

LOGGER = logging.getLogger(__name__)


class ReconciliationError(RuntimeError):
    """Raised when vote counters could not be repaired."""


@dataclass(slots=True, frozen=True)
class VoteCountDiscrepancy:
    company_id: int
    name: str
    stored_votes: int
    actual_votes: int

    @property
    def difference(self) -> int:
        return self.stored_votes - self.actual_votes

    def to_dict(self) -> dict[str, int | str]:
        payload = asdict(self)
        payload["difference"] = self.difference
        return payload


@dataclass(slots=True, frozen=True)
class VoteCountFix:
    company_id: int
    previous_votes: int
    votes: int


def ledger_vote_counts(session: Session) -> dict[int, int]:
    """Number of ledger rows naming each company as the winner."""

    statement = select(Vote.company_id, func.count(Vote.id)).group_by(Vote.company_id)
    return {company_id: int(count) for company_id, count in session.execute(statement)}


def vote_count_report(session: Session) -> list[VoteCountDiscrepancy]:
    """Stored and ledger-derived vote counts for every company."""

    actual = ledger_vote_counts(session)
    companies = session.scalars(select(Company).order_by(Company.id))
    return [
        VoteCountDiscrepancy(
            company_id=company.id,
            name=company.name,
            stored_votes=company.votes,
            actual_votes=actual.get(company.id, 0),
        )
        for company in companies
    ]


def audit_vote_counts(session: Session) -> list[VoteCountDiscrepancy]:
    """Companies whose stored vote counter disagrees with the ledger."""

    return [item for item in vote_count_report(session) if item.difference != 0]


def fix_vote_counts(session: Session, *, actor: str | None = None) -> list[VoteCountFix]:
    """Reset every drifting vote counter to the ledger count."""

    store = RatingStore(session)
    fixes: list[VoteCountFix] = []
    try:
        discrepancies = audit_vote_counts(session)
        companies = store.load(item.company_id for item in discrepancies) if discrepancies else {}
        for item in discrepancies:
            store.apply(companies[item.company_id], votes=item.actual_votes)
            fixes.append(
                VoteCountFix(company_id=item.company_id, previous_votes=item.stored_votes, votes=item.actual_votes)
            )
        if fixes:
            session.add(
                AuditLog(
                    actor=actor,
                    action="company.fix_vote_counts",
                    resource_type="Company",
                    resource_id=None,
                    payload={"fixes": [asdict(fix) for fix in fixes]},
                )
            )
        session.commit()
    except StaleDataError as exc:
        session.rollback()
        raise ReconciliationError("Vote counts changed while being fixed; run the fix again") from exc
    except Exception:
        session.rollback()
        raise

    if fixes:
        VOTE_COUNT_FIX_COUNTER.inc(len(fixes))
        LOGGER.warning("vote counters reset from ledger", extra={"companies": [fix.company_id for fix in fixes]})
    return fixes


__all__ = [
    "ReconciliationError",
    "VoteCountDiscrepancy",
    "VoteCountFix",
    "audit_vote_counts",
    "fix_vote_counts",
    "ledger_vote_counts",
    "vote_count_report",
]
