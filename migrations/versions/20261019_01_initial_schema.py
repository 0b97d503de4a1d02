"""Initial schema for companies, comparisons, the vote ledger and rating history."""
from __future__ import annotations

from collections.abc import Iterable

import sqlalchemy as sa
from alembic import op

revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on: Iterable[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:  # noqa: D401
    """Create tables, uniqueness guarantees and indexes."""

    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("logo", sa.String(length=512)),
        sa.Column("rating", sa.Integer(), nullable=False, server_default="1500"),
        sa.Column("votes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("win_percentage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lock_version", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_companies_name"),
        sa.CheckConstraint("votes >= 0", name="ck_companies_votes_non_negative"),
        sa.CheckConstraint(
            "win_percentage >= 0 AND win_percentage <= 100", name="ck_companies_win_percentage_range"
        ),
    )

    op.create_table(
        "scheduled_comparisons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("theme", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("date", name="uq_scheduled_comparisons_date"),
    )

    op.create_table(
        "comparison_companies",
        sa.Column("comparison_id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("comparison_id", "company_id", name="pk_comparison_companies"),
        sa.ForeignKeyConstraint(["comparison_id"], ["scheduled_comparisons.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "votes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128)),
        sa.Column("anonymous_id", sa.String(length=128)),
        sa.Column("comparison_date", sa.Date(), nullable=False),
        sa.Column("rating_changes", sa.JSON()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "comparison_date", name="uq_votes_user_date"),
        sa.UniqueConstraint("anonymous_id", "comparison_date", name="uq_votes_anonymous_date"),
        sa.CheckConstraint(
            "(user_id IS NULL) != (anonymous_id IS NULL)", name="ck_votes_single_identity"
        ),
    )
    op.create_index("ix_votes_comparison_date", "votes", ["comparison_date"])
    op.create_index("ix_votes_company_id", "votes", ["company_id"])

    op.create_table(
        "rating_history",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("votes", sa.Integer(), nullable=False),
        sa.Column("win_percentage", sa.Integer(), nullable=False),
        sa.Column("daily_change", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("company_id", "date", name="uq_rating_history_company_date"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("actor", sa.String(length=320)),
        sa.Column("action", sa.String(length=128), nullable=False),
        sa.Column("resource_type", sa.String(length=128), nullable=False),
        sa.Column("resource_id", sa.String(length=128)),
        sa.Column("payload", sa.JSON()),
        *_timestamps(),
    )
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])


def downgrade() -> None:  # noqa: D401
    """Drop every table created by :func:`upgrade`."""

    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("rating_history")
    op.drop_index("ix_votes_company_id", table_name="votes")
    op.drop_index("ix_votes_comparison_date", table_name="votes")
    op.drop_table("votes")
    op.drop_table("comparison_companies")
    op.drop_table("scheduled_comparisons")
    op.drop_table("companies")
