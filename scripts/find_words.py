"""
Search the english side of every category for a fragment.

Matching ignores case and diacritics, so ``--contains=cafe`` also finds "Café".

  python scripts/find_words.py --contains=cafe
  python scripts/find_words.py --contains=cafe --category-id 12 --limit 10
"""
from __future__ import annotations

import argparse
import sys
from itertools import groupby
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent.parent))

from benglish.db.session import Database
from benglish.services.content_import import ContentImportService


def main() -> None:
    parser = argparse.ArgumentParser(description="Find words across categories")
    parser.add_argument("--contains", required=True, help="Text to look for in english items")
    parser.add_argument(
        "--category-id",
        type=int,
        action="append",
        default=None,
        help="Restrict to a category id (repeatable)",
    )
    parser.add_argument(
        "--limit", type=int, default=3, help="Matches to print per category (default: 3)"
    )
    args = parser.parse_args()

    if not args.contains.strip():
        raise SystemExit("--contains must not be empty")

    database = Database.from_url()
    try:
        with database.session_scope() as db:
            matches = ContentImportService(db).find_words(
                args.contains, category_ids=args.category_id
            )
    finally:
        database.dispose()

    categories = 0
    for (category_id, name), group in groupby(matches, key=lambda m: (m.category_id, m.category)):
        found = list(group)
        categories += 1
        print(f"- {category_id} ({name}): {len(found)} matches")
        for match in found[: args.limit]:
            print(f"    {match.english} -> {match.romanian}")
        if len(found) > args.limit:
            print(f"    ... {len(found) - args.limit} more")
    print(f"Done. Categories matched: {categories}, total matches: {len(matches)}")


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
