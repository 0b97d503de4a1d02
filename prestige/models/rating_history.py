"""Daily rating snapshot ORM model."""
from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prestige.models.base import Base, TimestampMixin


class RatingHistory(TimestampMixin, Base):
    """End-of-day state of a company, one row per company and date."""

    __tablename__ = "rating_history"
    __table_args__ = (
        UniqueConstraint("company_id", "date", name="uq_rating_history_company_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    votes: Mapped[int] = mapped_column(Integer, nullable=False)
    win_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_change: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    company = relationship("Company", back_populates="rating_history")


__all__ = ["RatingHistory"]
