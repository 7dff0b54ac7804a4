"""Tests for the category import tooling."""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from benglish.db.models import UserWordProgress, WordCategory
from benglish.schemas import CategoryImageUpdate, CategoryImport, LearnItem
from benglish.services.content_import import (
    ContentImportError,
    ContentImportService,
    load_json_file,
    normalize_ascii,
)
from benglish.services.progress import ProgressService


def _entry(name: str, words: list[tuple[str, str]], **extra) -> CategoryImport:
    return CategoryImport(
        category=name,
        items=[{"english": english, "romanian": romanian} for english, romanian in words],
        **extra,
    )


def test_total_must_match_item_count() -> None:
    with pytest.raises(ValidationError, match="Total must match number of items"):
        _entry("Food", [("bread", "pâine")], total=2)

    assert _entry("Food", [("bread", "pâine")], total=1).total == 1


def test_import_creates_categories_with_item_ids(db_session) -> None:
    report = ContentImportService(db_session).import_categories(
        [_entry("Food", [("bread", "pâine"), ("milk", "lapte")])]
    )

    category = db_session.query(WordCategory).filter_by(category="Food").one()
    assert (report.created, report.updated, report.words) == (1, 0, 2)
    assert category.total == 2
    assert all(len(item["id"]) == 32 for item in category.items)


def test_reimport_keeps_ids_of_matching_words(db_session) -> None:
    service = ContentImportService(db_session)
    service.import_categories([_entry("Food", [("Bread", "pâine"), ("milk", "lapte")])])
    original = {item["english"]: item["id"] for item in db_session.query(WordCategory).one().items}

    report = service.import_categories([_entry("Food", [("bread", "pâine"), ("egg", "ou")])])

    items = {item["english"]: item["id"] for item in db_session.query(WordCategory).one().items}
    assert report.updated == 1
    assert items["bread"] == original["Bread"]
    assert items["egg"] not in original.values()


def test_import_rejects_duplicate_names(db_session) -> None:
    with pytest.raises(ContentImportError):
        ContentImportService(db_session).import_categories(
            [_entry("Food", [("bread", "pâine")]), _entry("Food", [("egg", "ou")])]
        )


def test_reset_removes_missing_categories(db_session, animals) -> None:
    report = ContentImportService(db_session).import_categories(
        [_entry("Food", [("bread", "pâine")])], reset=True
    )

    assert report.removed == 1
    assert [c.category for c in db_session.query(WordCategory)] == ["Food"]


def test_backfill_item_ids_is_idempotent(db_session) -> None:
    db_session.add(
        WordCategory(
            category="Legacy",
            total=2,
            items=[{"english": "tree", "romanian": "copac"}, {"id": "kept", "english": "leaf", "romanian": "frunză"}],
        )
    )
    db_session.commit()
    service = ContentImportService(db_session)

    dry = service.backfill_item_ids(dry_run=True)
    assert (dry.missing, dry.updated) == (1, 0)
    assert "id" not in db_session.query(WordCategory).one().items[0]

    first = service.backfill_item_ids()
    items = db_session.query(WordCategory).one().items
    second = service.backfill_item_ids()

    assert (first.missing, first.updated) == (1, 1)
    assert items[0]["id"] and items[1]["id"] == "kept"
    assert (second.missing, second.updated) == (0, 0)
    assert db_session.query(WordCategory).one().items == items


def test_update_images_reports_unknown_categories(db_session, animals) -> None:
    report = ContentImportService(db_session).update_images(
        [
            CategoryImageUpdate(category="Animals", image="https://cdn.example.com/new.png"),
            CategoryImageUpdate(category="Plants", image="https://cdn.example.com/plants.png"),
        ]
    )

    db_session.refresh(animals)
    assert report.updated == 1
    assert report.missing == ["Plants"]
    assert animals.image == "https://cdn.example.com/new.png"


def test_image_urls_must_be_http() -> None:
    with pytest.raises(ValidationError):
        CategoryImageUpdate(category="Animals", image="ftp://cdn.example.com/a.png")


def test_replace_item_text_ignores_case_and_diacritics(db_session, animals, colors) -> None:
    service = ContentImportService(db_session)

    dry = service.replace_item_text(source="CÂT", target="kitten", dry_run=True)
    db_session.refresh(animals)
    assert dry.items_changed == 1
    assert animals.items[1]["english"] == "cat"

    report = service.replace_item_text(source="Cat", target="kitten")

    db_session.refresh(animals)
    assert (report.inspected, report.categories_matched, report.items_changed) == (2, 1, 1)
    assert animals.items[1] == {"id": "a2", "english": "kitten", "romanian": "pisică"}


def test_find_words_ignores_case_and_diacritics(db_session, animals, colors) -> None:
    db_session.add(
        WordCategory(
            category="Places",
            total=2,
            items=[
                {"id": "p1", "english": "Café", "romanian": "cafenea"},
                {"id": "p2", "english": "park", "romanian": "parc"},
            ],
        )
    )
    db_session.commit()
    service = ContentImportService(db_session)

    matches = service.find_words("CAFE")
    in_animals = service.find_words("o", category_ids=[animals.id])

    assert [(m.category, m.item_id, m.english, m.romanian) for m in matches] == [
        ("Places", "p1", "Café", "cafenea")
    ]
    assert [m.item_id for m in in_animals] == ["a1", "a3"]
    assert service.find_words("zebra") == []


def test_normalize_ascii() -> None:
    assert normalize_ascii("Pâine Ședință") == "paine sedinta"
    assert normalize_ascii(None) == ""


def test_load_json_file(tmp_path) -> None:
    path = tmp_path / "categories.json"
    path.write_text(
        json.dumps([{"category": "Food", "total": 1, "items": [{"english": "bread", "romanian": "pâine"}]}]),
        encoding="utf-8",
    )

    entries = load_json_file(path, CategoryImport)

    assert entries[0].category == "Food"
    assert entries[0].items[0].english == "bread"


def test_reset_import_keeps_progress(db_session, current_user, animals, colors) -> None:
    ProgressService(db_session).mark_learned_batch(
        user=current_user,
        category_id=animals.id,
        items=[LearnItem(item_id="a1")],
    )
    ProgressService(db_session).mark_learned_batch(
        user=current_user,
        category_id=colors.id,
        items=[LearnItem(item_id="c1")],
    )

    report = ContentImportService(db_session).import_categories(
        [_entry("Animals", [("dog", "câine"), ("wolf", "lup")])], reset=True
    )

    db_session.expire_all()
    assert (report.removed, report.kept) == (0, 1)
    assert sorted(c.category for c in db_session.query(WordCategory)) == ["Animals", "Colors"]
    assert db_session.query(UserWordProgress).count() == 2
    dog = db_session.query(WordCategory).filter_by(category="Animals").one().items[0]
    assert dog["id"] == "a1"


def test_deleting_category_with_progress_is_restricted(db_session, current_user, animals) -> None:
    ProgressService(db_session).mark_learned_batch(
        user=current_user,
        category_id=animals.id,
        items=[LearnItem(item_id="a2")],
    )

    with pytest.raises(IntegrityError):
        db_session.execute(delete(WordCategory).where(WordCategory.id == animals.id))
    db_session.rollback()

    assert db_session.query(UserWordProgress).count() == 1
