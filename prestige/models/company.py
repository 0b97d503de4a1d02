"""Company ORM model."""
from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prestige.models.base import Base, TimestampMixin


class Company(TimestampMixin, Base):
    """A company ranked by prestige rating."""

    __tablename__ = "companies"
    __table_args__ = (
        CheckConstraint("votes >= 0", name="votes_non_negative"),
        CheckConstraint(
            "win_percentage >= 0 AND win_percentage <= 100", name="win_percentage_range"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    logo: Mapped[str | None] = mapped_column(String(512))
    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=1500)
    votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    win_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    ledger_entries = relationship("Vote", back_populates="company", passive_deletes=True)
    rating_history = relationship("RatingHistory", back_populates="company", passive_deletes=True)

    __mapper_args__ = {"version_id_col": lock_version}


__all__ = ["Company"]
