"""
Rename the english side of a word in every category that contains it.

Matching ignores case and diacritics.

  python scripts/replace_item_text.py --from="cafe" --to="coffee shop" --dry-run
  python scripts/replace_item_text.py --from="cafe" --to="coffee shop" --category-id 12
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent.parent))

from benglish.db.session import Database
from benglish.services.content_import import ContentImportService


def main() -> None:
    parser = argparse.ArgumentParser(description="Replace an item's english text")
    parser.add_argument("--from", dest="source", required=True, help="Current english text")
    parser.add_argument("--to", dest="target", required=True, help="Replacement text")
    parser.add_argument(
        "--category-id",
        type=int,
        action="append",
        default=None,
        help="Restrict to a category id (repeatable)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Report without writing")
    args = parser.parse_args()

    if not args.target.strip():
        raise SystemExit("--to must not be empty")

    database = Database.from_url()
    try:
        with database.session_scope() as db:
            report = ContentImportService(db).replace_item_text(
                source=args.source,
                target=args.target.strip(),
                category_ids=args.category_id,
                dry_run=args.dry_run,
            )
    finally:
        database.dispose()

    verb = "Would change" if args.dry_run else "Changed"
    print(
        f"{verb} {report.items_changed} items in {report.categories_matched} "
        f"of {report.inspected} categories."
    )


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
