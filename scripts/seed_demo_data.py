"""Seed script for the demo company roster."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from prestige.core.config import get_settings
from prestige.db.session import engine, get_session
from prestige.models import Base, Company

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_COMPANIES: tuple[tuple[str, str], ...] = (
    ("Google", "/google-logo.png"),
    ("Apple", "/apple-logo.png"),
    ("Microsoft", "/microsoft-logo.png"),
    ("Amazon", "/amazon-logo.png"),
    ("Meta", "/meta-logo.png"),
    ("Netflix", "/netflix-logo.png"),
    ("Tesla", "/tesla-logo.png"),
    ("Nvidia", "/nvidia-logo.png"),
)


def seed(session: Session) -> None:
    """Add every demo company that is not already present, at the default rating."""

    settings = get_settings()
    existing = set(session.scalars(select(Company.name)))

    for name, logo in DEMO_COMPANIES:
        if name in existing:
            logger.info("Company %s already exists", name)
            continue
        session.add(
            Company(name=name, logo=logo, rating=settings.default_rating, votes=0, win_percentage=0)
        )
        logger.info("Added company %s", name)


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with get_session() as session:
        seed(session)


if __name__ == "__main__":
    main()
