"""Typed partial-update values.

A patch writes exactly the fields that were explicitly set on it, so
``FilmPatch(duration=120)`` touches one column and ``FilmPatch(description=None)``
clears one. Unknown fields are rejected at construction, so no column outside
the patch's declared set can be reached through an update.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_validator


class Patch(BaseModel):
    """Base for per-entity patches."""

    model_config = ConfigDict(extra="forbid")

    # Columns that are NOT NULL in the table: they may be omitted but not set to None
    not_null: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def check_not_null(self) -> Patch:
        for name in self.model_fields_set & self.not_null:
            if getattr(self, name) is None:
                msg = f"{name} cannot be set to null"
                raise ValueError(msg)
        return self

    def to_columns(self) -> dict[str, Any]:
        """Column/value pairs for the explicitly-set fields only."""
        return self.model_dump(exclude_unset=True)

    def is_empty(self) -> bool:
        return not self.model_fields_set


class UserPatch(Patch):
    not_null: ClassVar[frozenset[str]] = frozenset({"email", "password_hash"})

    email: str | None = None
    password_hash: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    birthdate: date | None = None
    avatar: str | None = None


class TokenPatch(Patch):
    not_null: ClassVar[frozenset[str]] = frozenset({"expires_at"})

    expires_at: datetime | None = None


class FilmPatch(Patch):
    not_null: ClassVar[frozenset[str]] = frozenset({"title", "date_released"})

    title: str | None = None
    description: str | None = None
    date_released: date | None = None
    duration: int | None = None
    poster: str | None = None


class SeriesPatch(Patch):
    not_null: ClassVar[frozenset[str]] = frozenset({"title", "date_started"})

    title: str | None = None
    description: str | None = None
    date_started: date | None = None
    date_ended: date | None = None
    poster: str | None = None
