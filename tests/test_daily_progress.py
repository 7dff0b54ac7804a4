"""Tests for daily counters and the activity calendar."""
from __future__ import annotations

from fastapi.testclient import TestClient

from benglish.services.daily_progress import DailyProgressService


def _increment(client, headers, **payload):
    return client.post("/api/v1/daily-progress/increment", json=payload, headers=headers)


def _counts(client, headers, day):
    response = client.get("/api/v1/daily-progress", params={"date": day}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]


def test_counts_default_to_zero(client: TestClient, auth_headers) -> None:
    assert _counts(client, auth_headers, "2024-05-01") == {"learned": 0, "practiced": 0, "reviewed": 0}


def test_increment_accumulates(client: TestClient, auth_headers) -> None:
    assert _increment(client, auth_headers, date="2024-05-01", learnedDelta=3).json() == {"ok": True}
    _increment(client, auth_headers, date="2024-05-01", learnedDelta=2, reviewedDelta=4)

    assert _counts(client, auth_headers, "2024-05-01") == {"learned": 5, "practiced": 0, "reviewed": 4}
    assert _counts(client, auth_headers, "2024-05-02")["learned"] == 0


def test_non_positive_deltas_are_ignored(client: TestClient, auth_headers) -> None:
    _increment(client, auth_headers, date="2024-05-01", practicedDelta=2)

    response = _increment(
        client, auth_headers, date="2024-05-01", learnedDelta=0, practicedDelta=-5, reviewedDelta=-1
    )

    assert response.status_code == 200
    assert _counts(client, auth_headers, "2024-05-01") == {"learned": 0, "practiced": 2, "reviewed": 0}


def test_invalid_dates_are_rejected(client: TestClient, auth_headers) -> None:
    for day in ("2024-5-1", "01-05-2024", "2024-02-30", ""):
        assert _increment(client, auth_headers, date=day, learnedDelta=1).status_code == 400
        assert (
            client.get("/api/v1/daily-progress", params={"date": day}, headers=auth_headers).status_code
            == 400
        )
    assert client.get("/api/v1/daily-progress", headers=auth_headers).status_code == 400


def test_activity_days_lists_active_days_in_order(client: TestClient, auth_headers) -> None:
    _increment(client, auth_headers, date="2024-05-03", reviewedDelta=1)
    _increment(client, auth_headers, date="2024-04-28", learnedDelta=2)
    _increment(client, auth_headers, date="2024-05-01", learnedDelta=0)

    response = client.get("/api/v1/activity/days", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"data": ["2024-04-28", "2024-05-03"]}


def test_increment_returns_applied_deltas(db_session, current_user) -> None:
    service = DailyProgressService(db_session)

    applied = service.increment(
        user=current_user, day="2024-06-01", deltas={"learned": 2, "practiced": 0, "bogus": 9}
    )

    assert applied == {"learned": 2}
    assert service.increment(user=current_user, day="2024-06-01", deltas={"learned": -1}) == {}
    assert service.activity_days(user=current_user) == ["2024-06-01"]
