"""Request schemas for catalog operations."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Films (movies and episodes)
# ---------------------------------------------------------------------------


class FilmCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=256)
    description: str | None = Field(None, min_length=1, max_length=4096)
    date_released: date
    duration: int | None = Field(None, gt=0)


class FilmUpdateRequest(BaseModel):
    """Partial film update. Only the fields present in the request are written."""

    title: str | None = Field(None, min_length=1, max_length=256)
    description: str | None = Field(None, min_length=1, max_length=4096)
    date_released: date | None = None
    duration: int | None = Field(None, gt=0)


MovieCreateRequest = FilmCreateRequest
MovieUpdateRequest = FilmUpdateRequest
EpisodePutRequest = FilmCreateRequest
EpisodeUpdateRequest = FilmUpdateRequest


class EpisodesPutAllBySeasonRequest(BaseModel):
    """A whole season. Episode numbers are the 1-based positions in ``episodes``."""

    episodes: list[EpisodePutRequest] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Series
# ---------------------------------------------------------------------------


class SeriesCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=256)
    description: str | None = Field(None, min_length=1, max_length=4096)
    date_started: date
    date_ended: date | None = None


class SeriesUpdateRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=256)
    description: str | None = Field(None, min_length=1, max_length=4096)
    date_started: date | None = None
    date_ended: date | None = None


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class InvalidationRequest(BaseModel):
    invalidation: str = Field(..., min_length=1, max_length=1024)
