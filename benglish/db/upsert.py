"""Dialect-aware ``INSERT ... ON CONFLICT`` construction."""
from __future__ import annotations

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def upsert(db: Session, table: Table):
    """Return an insert construct that supports ``on_conflict_do_update``.

    Both supported backends expose the same ``on_conflict_do_*`` API, so
    callers can build a single statement and run it atomically.
    """

    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upserts are not supported on {dialect!r}")
