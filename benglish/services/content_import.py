"""Import tooling and one-off migrations for word categories."""
from __future__ import annotations

import json
import unicodedata
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from loguru import logger
from pydantic import TypeAdapter
from sqlalchemy import delete, exists, select
from sqlalchemy.orm import Session

from benglish.db.models.progress import UserWordProgress
from benglish.db.models.vocabulary import WordCategory
from benglish.schemas.vocabulary import CategoryImageUpdate, CategoryImport
from benglish.utils.cache import cache_backend
from benglish.utils.exceptions import BadRequestError

CATEGORY_CACHE_NAMESPACES = ("categories:list", "categories:item")


class ContentImportError(BadRequestError):
    """An import file could not be applied."""


def new_item_id() -> str:
    return uuid.uuid4().hex


def normalize_ascii(value: str | None) -> str:
    """Lower-case ``value`` and strip diacritics ("Cafée" -> "cafee")."""

    nfkd = unicodedata.normalize("NFKD", value or "")
    return "".join(c for c in nfkd if not unicodedata.combining(c)).lower()


def load_json_file(path: str | Path, schema) -> list:
    """Parse a JSON array file into a list of ``schema`` instances."""

    raw = Path(path).read_text(encoding="utf-8")
    return TypeAdapter(list[schema]).validate_python(json.loads(raw))


def invalidate_category_cache() -> None:
    for namespace in CATEGORY_CACHE_NAMESPACES:
        cache_backend.invalidate(namespace, prefix="")


@dataclass
class ImportReport:
    created: int = 0
    updated: int = 0
    words: int = 0
    removed: int = 0
    kept: int = 0


@dataclass
class BackfillReport:
    inspected: int = 0
    updated: int = 0
    missing: int = 0
    dry_run: bool = False


@dataclass
class ImageUpdateReport:
    updated: int = 0
    missing: list[str] = field(default_factory=list)
    dry_run: bool = False


@dataclass
class WordMatch:
    category_id: int
    category: str
    item_id: str | None
    english: str
    romanian: str


@dataclass
class ReplaceReport:
    inspected: int = 0
    categories_matched: int = 0
    items_changed: int = 0
    dry_run: bool = False


class ContentImportService:
    """Write side of the vocabulary store, used by the CLI scripts."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def import_categories(
        self, entries: Sequence[CategoryImport], *, reset: bool = False
    ) -> ImportReport:
        """Upsert categories by name.

        Items keep the id of an existing item with the same english text, so
        progress rows stay attached across re-imports. With ``reset`` the
        categories missing from the import are removed, except those that
        progress rows still reference.
        """

        names = [entry.category for entry in entries]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ContentImportError(f"Duplicate categories in import: {', '.join(duplicates)}")

        report = ImportReport()
        if reset:
            report.removed, report.kept = self._remove_categories_except(names)

        existing = {
            category.category: category
            for category in self.db.scalars(
                select(WordCategory).where(WordCategory.category.in_(names))
            )
        }
        for entry in entries:
            category = existing.get(entry.category)
            previous_ids: dict[str, str] = {}
            if category is not None:
                for item in category.items or []:
                    if item.get("id") and item.get("english"):
                        previous_ids.setdefault(normalize_ascii(item["english"]), str(item["id"]))

            items = [
                {
                    "id": previous_ids.pop(normalize_ascii(item.english), None) or new_item_id(),
                    "english": item.english,
                    "romanian": item.romanian,
                }
                for item in entry.items
            ]
            if category is None:
                category = WordCategory(category=entry.category)
                self.db.add(category)
                report.created += 1
            else:
                report.updated += 1
            category.items = items
            category.total = len(items)
            if entry.image is not None:
                category.image = entry.image or None
            report.words += len(items)

        self.db.commit()
        invalidate_category_cache()
        logger.info(
            "Imported categories",
            created=report.created,
            updated=report.updated,
            words=report.words,
            removed=report.removed,
            kept=report.kept,
        )
        return report

    def _remove_categories_except(self, names: Sequence[str]) -> tuple[int, int]:
        stale = select(WordCategory.id).where(WordCategory.category.notin_(names))
        referenced = set(
            self.db.scalars(
                select(UserWordProgress.category_id)
                .where(UserWordProgress.category_id.in_(stale))
                .distinct()
            )
        )
        if referenced:
            logger.warning(
                "Keeping categories that still have progress rows",
                category_ids=sorted(referenced),
            )

        result = self.db.execute(
            delete(WordCategory)
            .where(
                WordCategory.category.notin_(names),
                ~exists().where(UserWordProgress.category_id == WordCategory.id),
            )
            .execution_options(synchronize_session="fetch")
        )
        return int(result.rowcount or 0), len(referenced)

    def backfill_item_ids(self, *, dry_run: bool = False) -> BackfillReport:
        """Give every item without an id a fresh one.

        Only categories with at least one missing id are written, so running
        it again on migrated data changes nothing.
        """

        report = BackfillReport(dry_run=dry_run)
        for category in self.db.scalars(select(WordCategory).order_by(WordCategory.id)):
            report.inspected += 1
            items = [dict(item) for item in category.items or []]
            missing = 0
            for item in items:
                if not item.get("id"):
                    item["id"] = new_item_id()
                    missing += 1
            if not missing:
                continue
            report.missing += missing
            logger.debug("Category has items without ids", category_id=category.id, missing=missing)
            if not dry_run:
                category.items = items
                report.updated += 1

        if dry_run:
            self.db.rollback()
        else:
            self.db.commit()
            if report.updated:
                invalidate_category_cache()
        logger.info(
            "Item id backfill finished",
            inspected=report.inspected,
            updated=report.updated,
            missing=report.missing,
            dry_run=dry_run,
        )
        return report

    def update_images(
        self, entries: Sequence[CategoryImageUpdate], *, dry_run: bool = False
    ) -> ImageUpdateReport:
        """Set image URLs on existing categories; unknown names are reported."""

        names = [entry.category for entry in entries]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ContentImportError(f"Duplicate categories in import: {', '.join(duplicates)}")

        report = ImageUpdateReport(dry_run=dry_run)
        existing = {
            category.category: category
            for category in self.db.scalars(
                select(WordCategory).where(WordCategory.category.in_(names))
            )
        }
        for entry in entries:
            category = existing.get(entry.category)
            if category is None:
                report.missing.append(entry.category)
                continue
            report.updated += 1
            if not dry_run:
                category.image = entry.image

        if dry_run:
            self.db.rollback()
        else:
            self.db.commit()
            invalidate_category_cache()
        if report.missing:
            logger.warning("Skipped unknown categories", categories=report.missing)
        return report

    def replace_item_text(
        self,
        *,
        source: str,
        target: str,
        category_ids: Iterable[int] | None = None,
        dry_run: bool = False,
    ) -> ReplaceReport:
        """Rename an item's english text, ignoring case and diacritics."""

        report = ReplaceReport(dry_run=dry_run)
        wanted = normalize_ascii(source)
        stmt = select(WordCategory).order_by(WordCategory.id)
        ids = list(category_ids or [])
        if ids:
            stmt = stmt.where(WordCategory.id.in_(ids))

        for category in self.db.scalars(stmt):
            report.inspected += 1
            changed = 0
            items = []
            for item in category.items or []:
                item = dict(item)
                if item.get("english") == source or normalize_ascii(item.get("english")) == wanted:
                    item["english"] = target
                    changed += 1
                items.append(item)
            if not changed:
                continue
            report.categories_matched += 1
            report.items_changed += changed
            if not dry_run:
                category.items = items

        if dry_run:
            self.db.rollback()
        else:
            self.db.commit()
            if report.items_changed:
                invalidate_category_cache()
        return report

    def find_words(
        self, contains: str, *, category_ids: Iterable[int] | None = None
    ) -> list[WordMatch]:
        """Items whose english text contains ``contains``, ignoring case and diacritics."""

        needle = normalize_ascii(contains)
        stmt = select(WordCategory).order_by(WordCategory.id)
        ids = list(category_ids or [])
        if ids:
            stmt = stmt.where(WordCategory.id.in_(ids))

        matches: list[WordMatch] = []
        for category in self.db.scalars(stmt):
            for item in category.items or []:
                if needle not in normalize_ascii(item.get("english")):
                    continue
                matches.append(
                    WordMatch(
                        category_id=category.id,
                        category=category.category,
                        item_id=item.get("id"),
                        english=item.get("english") or "",
                        romanian=item.get("romanian") or "",
                    )
                )
        return matches
