"""Create users, word categories and progress tables"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=30), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=True),
        sa.Column("google_id", sa.String(length=255), nullable=True),
        sa.Column("google_email", sa.String(length=255), nullable=True),
        sa.Column("avatar_url", sa.String(length=1024), nullable=True),
        sa.Column("reset_token", sa.String(length=128), nullable=True),
        sa.Column("reset_expires", sa.DateTime(timezone=True), nullable=True),
        sa.Column("disabled", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_google_id", "users", ["google_id"], unique=True)
    op.create_index("ix_users_reset_token", "users", ["reset_token"])
    op.create_index("ix_users_disabled", "users", ["disabled"])

    op.create_table(
        "word_categories",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("category", sa.String(length=255), nullable=False),
        sa.Column("total", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("image", sa.String(length=1024), nullable=True),
        sa.Column(
            "items",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_word_categories_category", "word_categories", ["category"], unique=True)

    op.create_table(
        "user_word_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("word_categories.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("item_id", sa.String(length=64), nullable=False),
        sa.Column("english", sa.String(length=255), server_default=sa.text("''"), nullable=False),
        sa.Column("romanian", sa.String(length=255), server_default=sa.text("''"), nullable=False),
        sa.Column("status", sa.String(length=20), server_default=sa.text("'learned'"), nullable=False),
        sa.Column("source", sa.String(length=20), nullable=True),
        sa.Column("correct_streak", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("difficult_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("learned_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "category_id", "item_id", name="uq_user_word_progress_item"),
    )
    op.create_index("ix_user_word_progress_user_id", "user_word_progress", ["user_id"])
    op.create_index("ix_user_word_progress_category_id", "user_word_progress", ["category_id"])
    op.create_index("ix_user_word_progress_status", "user_word_progress", ["status"])
    op.create_index("ix_user_word_progress_source", "user_word_progress", ["source"])
    op.create_index("ix_user_word_progress_last_seen_at", "user_word_progress", ["last_seen_at"])
    # Review selection: user's learned rows by difficulty, then staleness
    op.create_index(
        "ix_user_word_progress_review",
        "user_word_progress",
        ["user_id", "status", "difficult_count", "last_seen_at"],
    )

    op.create_table(
        "daily_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("learned", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("practiced", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("reviewed", sa.Integer(), server_default=sa.text("0"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "date", name="uq_daily_progress_user_date"),
    )
    op.create_index("ix_daily_progress_user_id", "daily_progress", ["user_id"])
    op.create_index("ix_daily_progress_date", "daily_progress", ["date"])


def downgrade() -> None:
    op.drop_table("daily_progress")
    op.drop_table("user_word_progress")
    op.drop_table("word_categories")
    op.drop_table("users")
