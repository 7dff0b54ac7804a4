"""Set category image URLs from a JSON array of ``{"category", "image"}`` objects."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parent.parent))

from benglish.db.session import Database
from benglish.schemas.vocabulary import CategoryImageUpdate
from benglish.services.content_import import (
    ContentImportError,
    ContentImportService,
    load_json_file,
)


def main() -> None:
    parser = argparse.ArgumentParser(description="Update category images")
    parser.add_argument("--file", required=True, help="Path to the images JSON file")
    parser.add_argument("--dry-run", action="store_true", help="Report without writing")
    args = parser.parse_args()

    try:
        entries = load_json_file(args.file, CategoryImageUpdate)
    except FileNotFoundError:
        raise SystemExit(f"File not found: {args.file}")
    except (ValidationError, ValueError) as exc:
        raise SystemExit(f"Invalid image file: {exc}")

    database = Database.from_url()
    try:
        with database.session_scope() as db:
            try:
                report = ContentImportService(db).update_images(entries, dry_run=args.dry_run)
            except ContentImportError as exc:
                raise SystemExit(f"Update failed: {exc.message}")
    finally:
        database.dispose()

    verb = "Would update" if args.dry_run else "Updated"
    print(f"{verb} {report.updated} categories.")
    for name in report.missing:
        print(f"  not found: {name}")


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
