"""Scheduled daily comparison ORM models."""
from __future__ import annotations

import datetime as dt

from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prestige.models.base import Base, TimestampMixin


class ScheduledComparison(TimestampMixin, Base):
    """Companies and theme presented on a given UTC day."""

    __tablename__ = "scheduled_comparisons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, unique=True)
    theme: Mapped[str] = mapped_column(String(255), nullable=False)

    entries = relationship(
        "ComparisonCompany",
        back_populates="comparison",
        cascade="all, delete-orphan",
        order_by="ComparisonCompany.position",
    )

    @property
    def companies(self) -> list:
        return [entry.company for entry in self.entries]


class ComparisonCompany(Base):
    """Link between a scheduled comparison and one of its companies."""

    __tablename__ = "comparison_companies"

    comparison_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("scheduled_comparisons.id", ondelete="CASCADE"), primary_key=True
    )
    company_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("companies.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    comparison = relationship("ScheduledComparison", back_populates="entries")
    company = relationship("Company")


__all__ = ["ComparisonCompany", "ScheduledComparison"]
