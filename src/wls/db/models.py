"""ORM models for the catalog, its audit history, users, tokens and watchlists.

A single ``films`` table holds both standalone movies and series episodes.
Movies leave the three discriminator columns (``series_id``,
``season_number``, ``episode_number``) NULL; episodes set all three.

``films_audit`` and ``serieses_audit`` hold verbatim snapshots of rows
as they were before being overwritten, keyed by
(id, contributed_by, contributed_at).
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from wls.db.base import Base


def utcnow() -> datetime:
    """Timezone-aware application clock used for every stored timestamp."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    bio: Mapped[str | None] = mapped_column(String(512), nullable=True)
    birthdate: Mapped[date | None] = mapped_column(Date, nullable=True)
    avatar: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Refresh tokens
# ---------------------------------------------------------------------------


class Token(Base):
    """Hashed refresh credential. ``expires_at`` is the soft validity filter."""

    __tablename__ = "tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Series
# ---------------------------------------------------------------------------


class SeriesFields:
    """Content columns shared by the live table and its audit table."""

    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_started: Mapped[date] = mapped_column(Date, nullable=False)
    date_ended: Mapped[date | None] = mapped_column(Date, nullable=True)
    poster: Mapped[str | None] = mapped_column(Text, nullable=True)
    invalidation: Mapped[str | None] = mapped_column(Text, nullable=True)


class Series(SeriesFields, Base):
    """Parent aggregate for episodes."""

    __tablename__ = "serieses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contributed_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    contributed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class SeriesAudit(SeriesFields, Base):
    """Snapshot of a series row taken just before it was overwritten."""

    __tablename__ = "serieses_audit"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    contributed_by: Mapped[int] = mapped_column(Integer, primary_key=True)
    contributed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), primary_key=True)


# ---------------------------------------------------------------------------
# Films (movies and episodes)
# ---------------------------------------------------------------------------


class FilmFields:
    """Content columns shared by the live table and its audit table."""

    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_released: Mapped[date] = mapped_column(Date, nullable=False)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    poster: Mapped[str | None] = mapped_column(Text, nullable=True)
    season_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    episode_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    invalidation: Mapped[str | None] = mapped_column(Text, nullable=True)


class Film(FilmFields, Base):
    """A standalone movie or a series episode."""

    __tablename__ = "films"
    __table_args__ = (
        UniqueConstraint("series_id", "season_number", "episode_number"),
        CheckConstraint(
            "(series_id IS NULL AND season_number IS NULL AND episode_number IS NULL)"
            " OR (series_id IS NOT NULL AND season_number IS NOT NULL AND episode_number IS NOT NULL)",
            name="episode_discriminators",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    series_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("serieses.id"), nullable=True)
    contributed_by: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    contributed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def is_episode(self) -> bool:
        return self.series_id is not None


class FilmAudit(FilmFields, Base):
    """Snapshot of a film row taken just before it was overwritten."""

    __tablename__ = "films_audit"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    series_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    contributed_by: Mapped[int] = mapped_column(Integer, primary_key=True)
    contributed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), primary_key=True)


# ---------------------------------------------------------------------------
# Watchlist
# ---------------------------------------------------------------------------


class WatchFilm(Base):
    """A film on a user's watchlist."""

    __tablename__ = "watchfilms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    film_id: Mapped[int] = mapped_column(Integer, ForeignKey("films.id", ondelete="CASCADE"), nullable=False)
    time_added: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    time_watched: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
