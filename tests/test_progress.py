"""Tests for the progress ledger endpoints and service."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from fastapi.testclient import TestClient
from sqlalchemy import text

from benglish.db.models import UserWordProgress
from benglish.db.models.progress import ProgressSource
from benglish.schemas import LearnItem
from benglish.services.progress import ProgressService
from tests.conftest import register_and_login


def _learn(client, headers, category_id, items, source=None):
    payload = {"categoryId": category_id, "items": items}
    if source is not None:
        payload["source"] = source
    return client.post("/api/v1/progress/learn", json=payload, headers=headers)


def _record(db_session, item_id: str) -> UserWordProgress:
    db_session.expire_all()
    return db_session.query(UserWordProgress).filter(UserWordProgress.item_id == item_id).one()


def test_progress_requires_authentication(client: TestClient, animals) -> None:
    response = _learn(client, {}, animals.id, [{"itemId": "a1"}])
    assert response.status_code == 401


def test_learning_twice_only_increments_streak(client: TestClient, auth_headers, animals, db_session) -> None:
    first = _learn(client, auth_headers, animals.id, [{"itemId": "a1", "english": "dog", "romanian": "câine"}])
    assert first.status_code == 200
    assert first.json() == {"ok": True}
    record = _record(db_session, "a1")
    assert (record.status, record.source, record.correct_streak) == ("learned", "learned", 1)
    learned_at = record.learned_at

    _learn(client, auth_headers, animals.id, [{"itemId": "a1", "english": "dog", "romanian": "câine"}])

    record = _record(db_session, "a1")
    assert (record.status, record.source, record.correct_streak) == ("learned", "learned", 2)
    assert record.learned_at == learned_at
    assert db_session.query(UserWordProgress).count() == 1


def test_learn_accepts_legacy_id_key_and_fills_text(client: TestClient, auth_headers, animals, db_session) -> None:
    response = _learn(client, auth_headers, animals.id, [{"id": "a2"}, {"itemId": 7}], source="known")

    assert response.status_code == 200
    cat = _record(db_session, "a2")
    assert (cat.english, cat.romanian, cat.source) == ("cat", "pisică", "known")
    assert _record(db_session, "7").english == ""


def test_learn_unknown_category_is_404(client: TestClient, auth_headers) -> None:
    response = _learn(client, auth_headers, 999, [{"itemId": "x"}])

    assert response.status_code == 404
    assert response.json()["detail"] == "Category not found"


def test_learn_rejects_empty_batch_and_bad_source(client: TestClient, auth_headers, animals) -> None:
    assert _learn(client, auth_headers, animals.id, []).status_code == 400
    assert _learn(client, auth_headers, animals.id, [{"itemId": "a1"}], source="guessed").status_code == 400


def test_wrong_answer_never_creates_records(client: TestClient, auth_headers, animals, db_session) -> None:
    response = client.post(
        "/api/v1/progress/difficult-wrong",
        json={"categoryId": animals.id, "itemId": "a1"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert db_session.query(UserWordProgress).count() == 0


def test_wrong_answers_accumulate(client: TestClient, auth_headers, animals, db_session) -> None:
    _learn(client, auth_headers, animals.id, [{"itemId": "a1"}, {"itemId": "a2"}])

    counts = []
    for _ in range(3):
        client.post(
            "/api/v1/progress/difficult-wrong",
            json={"categoryId": animals.id, "itemId": "a1"},
            headers=auth_headers,
        )
        counts.append(_record(db_session, "a1").difficult_count)

    assert counts == [1, 2, 3]
    response = client.get("/api/v1/progress/difficult", headers=auth_headers)
    assert response.json() == {"data": {"count": 1}}


def test_summary_counts_known_and_legacy_records(
    client: TestClient, auth_headers, current_user, animals, colors, db_session
) -> None:
    _learn(client, auth_headers, animals.id, [{"itemId": "a1"}])
    _learn(client, auth_headers, animals.id, [{"itemId": "a2"}, {"itemId": "a3"}], source="known")
    db_session.add(
        UserWordProgress(
            id=uuid.uuid4(),
            user_id=current_user.id,
            category_id=colors.id,
            item_id="c1",
            english="red",
            romanian="roșu",
            status="learned",
            source=None,
        )
    )
    db_session.commit()

    response = client.get("/api/v1/progress/summary", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "data": [
            {"_id": animals.id, "learned": 2},
            {"_id": colors.id, "learned": 1},
        ]
    }


def test_learned_list_filters_and_pages(client: TestClient, auth_headers, animals, colors) -> None:
    _learn(client, auth_headers, animals.id, [{"itemId": "a1"}, {"itemId": "a2"}])
    _learn(client, auth_headers, colors.id, [{"itemId": "c1"}])

    everything = client.get("/api/v1/progress/learned", headers=auth_headers).json()["data"]
    animals_only = client.get(
        "/api/v1/progress/learned", params={"categoryId": animals.id}, headers=auth_headers
    ).json()["data"]
    first_page = client.get(
        "/api/v1/progress/learned", params={"limit": 1}, headers=auth_headers
    ).json()["data"]

    assert len(everything) == 3
    assert {row["itemId"] for row in animals_only} == {"a1", "a2"}
    assert all(row["category"] == animals.id for row in animals_only)
    assert animals_only[0]["english"] in {"dog", "cat"}
    assert len(first_page) == 1


def test_progress_is_per_user(client: TestClient, auth_headers, animals) -> None:
    _learn(client, auth_headers, animals.id, [{"itemId": "a1"}])
    other = register_and_login(client, username="other", email="other@example.com")

    response = client.get("/api/v1/progress/learned", headers=other)

    assert response.json() == {"data": []}


def test_mark_learned_batch_reports_written_rows(db_session, current_user, animals) -> None:
    service = ProgressService(db_session)
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)

    written = service.mark_learned_batch(
        user=current_user,
        category_id=animals.id,
        items=[LearnItem(item_id="a1"), LearnItem(item_id="a3")],
        source=ProgressSource.KNOWN,
        now=now,
    )

    assert written == 2
    record = _record(db_session, "a3")
    assert record.english == "horse"
    assert record.source == "known"


def _reject_item(db_session, item_id: str) -> None:
    db_session.execute(
        text(
            "CREATE TRIGGER reject_item BEFORE INSERT ON user_word_progress "
            f"WHEN NEW.item_id = '{item_id}' "
            "BEGIN SELECT RAISE(ABORT, 'item rejected'); END"
        )
    )
    db_session.commit()


def test_failing_item_does_not_abort_batch(
    client: TestClient, auth_headers, animals, db_session
) -> None:
    _reject_item(db_session, "a2")

    response = _learn(
        client, auth_headers, animals.id, [{"itemId": "a1"}, {"itemId": "a2"}, {"itemId": "a3"}]
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    db_session.expire_all()
    stored = {row.item_id for row in db_session.query(UserWordProgress)}
    assert stored == {"a1", "a3"}


def test_mark_learned_batch_skips_failing_item(db_session, current_user, animals) -> None:
    _reject_item(db_session, "a1")

    written = ProgressService(db_session).mark_learned_batch(
        user=current_user,
        category_id=animals.id,
        items=[LearnItem(item_id="a1"), LearnItem(item_id="a2"), LearnItem(item_id="a3")],
    )

    assert written == 2
    assert _record(db_session, "a2").status == "learned"
    assert db_session.query(UserWordProgress).filter_by(item_id="a1").count() == 0
