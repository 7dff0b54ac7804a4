"""
Assign ids to category items that were imported without one.

Safe to run repeatedly: categories whose items all have ids are left alone.

  python scripts/backfill_item_ids.py --dry-run
  python scripts/backfill_item_ids.py
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent.parent))

from benglish.db.session import Database
from benglish.services.content_import import ContentImportService


def main() -> None:
    parser = argparse.ArgumentParser(description="Backfill missing category item ids")
    parser.add_argument("--dry-run", action="store_true", help="Report without writing")
    args = parser.parse_args()

    database = Database.from_url()
    try:
        with database.session_scope() as db:
            report = ContentImportService(db).backfill_item_ids(dry_run=args.dry_run)
    finally:
        database.dispose()

    if report.missing == 0:
        print(f"Nothing to update. Inspected {report.inspected} categories.")
    elif args.dry_run:
        print(f"Dry-run only. {report.missing} items without id in {report.inspected} categories.")
    else:
        print(f"Assigned {report.missing} ids across {report.updated} categories.")


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
