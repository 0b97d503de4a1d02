"""Vote ledger ORM model."""
from __future__ import annotations

from datetime import date

from sqlalchemy import JSON, CheckConstraint, Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prestige.models.base import Base, TimestampMixin


class Vote(TimestampMixin, Base):
    """One identity's choice for one comparison day.

    The unique constraints are the authoritative one-vote-per-day guarantee.
    SQL treats NULLs as distinct, so each constraint only binds rows that
    carry that kind of identity.
    """

    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("user_id", "comparison_date", name="uq_votes_user_date"),
        UniqueConstraint("anonymous_id", "comparison_date", name="uq_votes_anonymous_date"),
        CheckConstraint(
            "(user_id IS NULL) != (anonymous_id IS NULL)", name="single_identity"
        ),
        Index("ix_votes_comparison_date", "comparison_date"),
        Index("ix_votes_company_id", "company_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str | None] = mapped_column(String(128))
    anonymous_id: Mapped[str | None] = mapped_column(String(128))
    comparison_date: Mapped[date] = mapped_column(Date, nullable=False)
    rating_changes: Mapped[list | None] = mapped_column(JSON)

    company = relationship("Company", back_populates="ledger_entries")


__all__ = ["Vote"]
