from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.orm import Session


def _vote(client: TestClient, winner: int, ids: list[int], anonymous_id: str, day: str = "2024-03-18") -> None:
    response = client.post(
        "/api/votes",
        json={"company_id": winner, "comparison_date": day, "company_ids": ids, "anonymous_id": anonymous_id},
    )
    assert response.status_code == 201


def test_admin_routes_require_admin_role(client: TestClient, voter_headers) -> None:
    assert client.get("/api/admin/vote-counts").status_code in {401, 403}
    assert client.get("/api/admin/vote-counts", headers=voter_headers("user-1")).status_code == 403


def test_login_rejects_wrong_password(client: TestClient) -> None:
    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert response.status_code == 401


def test_daily_updates_snapshot_requested_day(client: TestClient, make_company, admin_headers) -> None:
    a = make_company("Alpha")
    b = make_company("Beta")
    _vote(client, a.id, [a.id, b.id], "anon-1")

    response = client.post("/api/admin/daily-updates", json={"date": "2024-03-18"}, headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["date"] == "2024-03-18"
    updates = {item["company_id"]: item for item in body["updates"]}
    assert updates[a.id]["daily_change"] == 16
    assert updates[b.id]["daily_change"] == -16

    history = client.get(f"/api/companies/{a.id}/history").json()
    assert history == [
        {
            "company_id": a.id,
            "date": "2024-03-18",
            "rating": 1516,
            "votes": 1,
            "win_percentage": 100,
            "daily_change": 16,
        }
    ]


def test_vote_count_audit_and_fix(
    client: TestClient, db_session: Session, make_company, admin_headers
) -> None:
    a = make_company("Alpha")
    b = make_company("Beta")
    _vote(client, a.id, [a.id, b.id], "anon-1")
    db_session.execute(text("UPDATE companies SET votes = 5 WHERE id = :id"), {"id": a.id})
    db_session.commit()

    audit = client.get("/api/admin/vote-counts", headers=admin_headers).json()
    assert audit["discrepancies"] == [
        {"company_id": a.id, "name": "Alpha", "stored_votes": 5, "actual_votes": 1, "difference": 4}
    ]

    dry_run = client.post("/api/admin/vote-counts/fix", json={}, headers=admin_headers).json()
    assert dry_run == {"applied": False, "updates": []}

    applied = client.post("/api/admin/vote-counts/fix", json={"fix": True}, headers=admin_headers).json()
    assert applied == {"applied": True, "updates": [{"company_id": a.id, "previous_votes": 5, "votes": 1}]}
    assert client.get("/api/admin/vote-counts", headers=admin_headers).json() == {"discrepancies": []}


def test_schedule_and_delete_comparison(client: TestClient, make_company, admin_headers) -> None:
    a = make_company("Alpha")
    b = make_company("Beta")
    c = make_company("Gamma")

    created = client.post(
        "/api/admin/comparisons",
        json={"date": "2024-03-19", "theme": "AI Pioneers", "company_ids": [c.id, a.id, b.id]},
        headers=admin_headers,
    )
    assert created.status_code == 201
    assert [company["id"] for company in created.json()["companies"]] == [c.id, a.id, b.id]

    shown = client.get("/api/comparisons/2024-03-19").json()
    assert shown["scheduled"] is True
    assert shown["theme"] == "AI Pioneers"

    duplicate = client.post(
        "/api/admin/comparisons",
        json={"date": "2024-03-19", "theme": "Tech Giants", "company_ids": [a.id, b.id]},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    assert client.delete("/api/admin/comparisons/2024-03-19", headers=admin_headers).status_code == 204
    assert client.get("/api/comparisons/2024-03-19").json()["scheduled"] is False


def test_past_comparisons_cannot_be_scheduled(client: TestClient, make_company, admin_headers) -> None:
    a = make_company("Alpha")
    b = make_company("Beta")

    response = client.post(
        "/api/admin/comparisons",
        json={"date": "2024-03-17", "theme": "Tech Giants", "company_ids": [a.id, b.id]},
        headers=admin_headers,
    )
    assert response.status_code == 409
