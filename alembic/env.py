from sqlalchemy import create_engine, pool

from alembic import context

from benglish.config import settings
from benglish.db import models  # noqa: F401  # registers every table on Base.metadata
from benglish.db.base import Base

config = context.config
target_metadata = Base.metadata


def get_url() -> str:
    """DATABASE_URL from the application settings is the single source of truth."""
    return str(settings.DATABASE_URL)


def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(get_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
