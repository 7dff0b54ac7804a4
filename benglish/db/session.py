"""Database engine and session management."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from benglish.config import settings


class Database:
    """Own an engine and the session factory bound to it.

    One instance lives for the lifetime of the process (the FastAPI lifespan,
    a CLI script or a Celery task) and is passed to whoever needs sessions.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=engine,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, url: str | None = None) -> "Database":
        url = url or str(settings.DATABASE_URL)
        options: dict = {"pool_pre_ping": True}
        if url.startswith("sqlite"):
            options["connect_args"] = {"check_same_thread": False}
        else:
            options.update(pool_size=10, max_overflow=20, pool_recycle=3600)
        engine = create_engine(url, **options)
        logger.info(
            "Database engine created",
            backend=engine.url.get_backend_name(),
            url=engine.url.render_as_string(hide_password=True),
        )
        return cls(engine)

    def session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""

        db = self.session()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")
