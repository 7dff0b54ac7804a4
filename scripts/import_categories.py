"""
Import word categories from a JSON file.

The file holds an array of ``{"category", "total", "image", "items": [{"english", "romanian"}]}``
objects. Categories are matched by name; items keep their id when a word with
the same english text already exists, so learner progress survives re-imports.

Usage:

  python scripts/import_categories.py --file=categories.json
  python scripts/import_categories.py --file=categories.json --reset
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parent.parent))

from benglish.db.session import Database
from benglish.schemas.vocabulary import CategoryImport
from benglish.services.content_import import (
    ContentImportError,
    ContentImportService,
    load_json_file,
)


def main() -> None:
    parser = argparse.ArgumentParser(description="Import word categories from JSON")
    parser.add_argument("--file", required=True, help="Path to the categories JSON file")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete categories missing from the file unless learners have progress on them",
    )
    args = parser.parse_args()

    path = Path(args.file)
    if not path.exists():
        raise SystemExit(f"File not found: {path}")
    try:
        entries = load_json_file(path, CategoryImport)
    except (ValidationError, ValueError) as exc:
        raise SystemExit(f"Invalid import file: {exc}")

    database = Database.from_url()
    try:
        with database.session_scope() as db:
            try:
                report = ContentImportService(db).import_categories(entries, reset=args.reset)
            except ContentImportError as exc:
                raise SystemExit(f"Import failed: {exc.message}")
    finally:
        database.dispose()

    print("Import completed:")
    print(f"  created:  {report.created}")
    print(f"  updated:  {report.updated}")
    print(f"  words:    {report.words}")
    if args.reset:
        print(f"  removed:  {report.removed}")
        print(f"  kept:     {report.kept}")


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
