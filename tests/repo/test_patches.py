"""Typed partial-update values."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from wls.repo.patches import FilmPatch, SeriesPatch, UserPatch


class TestPatch:
    def test_only_set_fields_are_written(self):
        assert FilmPatch(duration=120).to_columns() == {"duration": 120}

    def test_explicit_none_clears_nullable_column(self):
        assert FilmPatch(description=None).to_columns() == {"description": None}

    def test_required_column_cannot_be_cleared(self):
        with pytest.raises(ValidationError, match="cannot be set to null"):
            FilmPatch(title=None)
        with pytest.raises(ValidationError):
            SeriesPatch(date_started=None)

    def test_unknown_column_rejected(self):
        with pytest.raises(ValidationError):
            FilmPatch(contributed_by=1)  # type: ignore[call-arg]
        with pytest.raises(ValidationError):
            UserPatch(id=5)  # type: ignore[call-arg]

    def test_empty_patch(self):
        assert UserPatch().is_empty()
        assert not SeriesPatch(date_ended=date(2020, 6, 27)).is_empty()
