"""Baseline: users, tokens, catalog, audit history and watchlists.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the full schema."""
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("first_name", sa.String(64), nullable=True),
        sa.Column("last_name", sa.String(64), nullable=True),
        sa.Column("bio", sa.String(512), nullable=True),
        sa.Column("birthdate", sa.Date(), nullable=True),
        sa.Column("avatar", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    # --- Refresh tokens ---
    op.create_table(
        "tokens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("token_hash", sa.String(256), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_tokens"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_tokens_user_id_users", ondelete="CASCADE"),
    )
    op.create_index("ix_tokens_user_id", "tokens", ["user_id"])

    # --- Series ---
    op.create_table(
        "serieses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date_started", sa.Date(), nullable=False),
        sa.Column("date_ended", sa.Date(), nullable=True),
        sa.Column("poster", sa.Text(), nullable=True),
        sa.Column("invalidation", sa.Text(), nullable=True),
        sa.Column("contributed_by", sa.Integer(), nullable=False),
        sa.Column("contributed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_serieses"),
        sa.ForeignKeyConstraint(["contributed_by"], ["users.id"], name="fk_serieses_contributed_by_users"),
    )
    op.create_table(
        "serieses_audit",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date_started", sa.Date(), nullable=False),
        sa.Column("date_ended", sa.Date(), nullable=True),
        sa.Column("poster", sa.Text(), nullable=True),
        sa.Column("invalidation", sa.Text(), nullable=True),
        sa.Column("contributed_by", sa.Integer(), nullable=False),
        sa.Column("contributed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", "contributed_by", "contributed_at", name="pk_serieses_audit"),
    )

    # --- Films (movies and episodes) ---
    op.create_table(
        "films",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date_released", sa.Date(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("poster", sa.Text(), nullable=True),
        sa.Column("series_id", sa.Integer(), nullable=True),
        sa.Column("season_number", sa.Integer(), nullable=True),
        sa.Column("episode_number", sa.Integer(), nullable=True),
        sa.Column("invalidation", sa.Text(), nullable=True),
        sa.Column("contributed_by", sa.Integer(), nullable=False),
        sa.Column("contributed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_films"),
        sa.ForeignKeyConstraint(["series_id"], ["serieses.id"], name="fk_films_series_id_serieses"),
        sa.ForeignKeyConstraint(["contributed_by"], ["users.id"], name="fk_films_contributed_by_users"),
        sa.UniqueConstraint(
            "series_id",
            "season_number",
            "episode_number",
            name="uq_films_series_id_season_number_episode_number",
        ),
        sa.CheckConstraint(
            "(series_id IS NULL AND season_number IS NULL AND episode_number IS NULL)"
            " OR (series_id IS NOT NULL AND season_number IS NOT NULL AND episode_number IS NOT NULL)",
            name="ck_films_episode_discriminators",
        ),
    )
    op.create_table(
        "films_audit",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date_released", sa.Date(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("poster", sa.Text(), nullable=True),
        sa.Column("series_id", sa.Integer(), nullable=True),
        sa.Column("season_number", sa.Integer(), nullable=True),
        sa.Column("episode_number", sa.Integer(), nullable=True),
        sa.Column("invalidation", sa.Text(), nullable=True),
        sa.Column("contributed_by", sa.Integer(), nullable=False),
        sa.Column("contributed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", "contributed_by", "contributed_at", name="pk_films_audit"),
    )

    # --- Watchlist ---
    op.create_table(
        "watchfilms",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("film_id", sa.Integer(), nullable=False),
        sa.Column("time_added", sa.DateTime(timezone=True), nullable=False),
        sa.Column("time_watched", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_watchfilms"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_watchfilms_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["film_id"], ["films.id"], name="fk_watchfilms_film_id_films", ondelete="CASCADE"),
    )
    op.create_index("ix_watchfilms_user_id", "watchfilms", ["user_id"])


def downgrade() -> None:
    """Drop the full schema."""
    op.drop_index("ix_watchfilms_user_id", table_name="watchfilms")
    op.drop_table("watchfilms")
    op.drop_table("films_audit")
    op.drop_table("films")
    op.drop_table("serieses_audit")
    op.drop_table("serieses")
    op.drop_index("ix_tokens_user_id", table_name="tokens")
    op.drop_table("tokens")
    op.drop_table("users")
