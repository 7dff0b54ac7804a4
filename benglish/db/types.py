"""Custom database column types for cross-database compatibility."""
from __future__ import annotations

from typing import Any

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON, TypeDecorator


class JSONDocumentList(TypeDecorator):
    """Persist a list of JSON objects as JSONB on PostgreSQL and JSON elsewhere."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):  # type: ignore[override]
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return []
        return [dict(entry) for entry in value]

    def process_result_value(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return []
        return list(value)
