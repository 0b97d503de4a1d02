from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from prestige.models import Company
from scripts.seed_demo_data import DEMO_COMPANIES, seed


def test_seed_is_idempotent(db_session: Session, make_company) -> None:
    make_company("Apple", rating=1620)

    seed(db_session)
    db_session.commit()
    seed(db_session)
    db_session.commit()

    companies = {company.name: company for company in db_session.scalars(select(Company))}
    assert set(companies) == {name for name, _ in DEMO_COMPANIES}
    assert companies["Apple"].rating == 1620
    assert companies["Google"].rating == 1500
    assert companies["Google"].logo == "/google-logo.png"
