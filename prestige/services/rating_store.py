"""Per-company aggregate rating state."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from prestige.models import Company


class RatingStoreError(RuntimeError):
    """Base exception for rating store errors."""


class UnknownCompanyError(RatingStoreError):
    """Raised when a referenced company does not exist."""


@dataclass(slots=True, frozen=True)
class CompanySnapshot:
    """Rating state of a company read at a point in time."""

    id: int
    name: str
    rating: int
    votes: int
    win_percentage: int
    lock_version: int


class RatingStore:
    """Reads and writes company aggregates inside the caller's transaction.

    Every write is an ``UPDATE ... WHERE lock_version = <read version>``
    through SQLAlchemy's version counter, so a concurrent writer that got
    there first makes the flush raise ``StaleDataError`` instead of silently
    overwriting its update. Callers own the retry.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def load(self, company_ids: Iterable[int]) -> dict[int, Company]:
        wanted = list(dict.fromkeys(company_ids))
        statement = select(Company).where(Company.id.in_(wanted)).execution_options(populate_existing=True)
        companies = {company.id: company for company in self._session.scalars(statement)}
        missing = [company_id for company_id in wanted if company_id not in companies]
        if missing:
            raise UnknownCompanyError(f"Unknown company id(s): {', '.join(str(item) for item in missing)}")
        return companies

    def snapshot(self, company_ids: Iterable[int]) -> dict[int, CompanySnapshot]:
        return {company_id: self.freeze(company) for company_id, company in self.load(company_ids).items()}

    @staticmethod
    def freeze(company: Company) -> CompanySnapshot:
        return CompanySnapshot(
            id=company.id,
            name=company.name,
            rating=company.rating,
            votes=company.votes,
            win_percentage=company.win_percentage,
            lock_version=company.lock_version,
        )

    def apply(
        self,
        company: Company,
        *,
        rating: int | None = None,
        votes: int | None = None,
        win_percentage: int | None = None,
    ) -> Company:
        """Write new aggregate values for ``company`` and flush them."""

        if rating is not None:
            company.rating = rating
        if votes is not None:
            if votes < 0:
                raise RatingStoreError(f"Vote count cannot be negative for company {company.id}")
            company.votes = votes
        if win_percentage is not None:
            company.win_percentage = max(0, min(100, win_percentage))
        self._session.flush()
        return company


__all__ = ["CompanySnapshot", "RatingStore", "RatingStoreError", "UnknownCompanyError"]
