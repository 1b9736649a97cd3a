"""Pydantic schemas for inbound mood requests."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]

Energy = Literal["low", "medium", "high"]
Tempo = Literal["slow", "medium", "fast"]
Era = Literal["40s", "50s", "60s", "70s", "80s", "90s", "00s", "10s", "20s"]
Language = Literal["en", "es", "fr", "de", "it", "pt", "ru", "zh", "ja", "ko"]


class MoodPreferences(BaseModel):
    """Optional listening preferences that refine the mood."""

    model_config = ConfigDict(populate_by_name=True)

    genres: list[NonEmptyStr] | None = Field(
        default=None,
        min_length=1,
        description="Genres the listener wants (at least one when provided).",
    )
    exclude_genres: list[NonEmptyStr] | None = Field(
        default=None,
        alias="excludeGenres",
        min_length=1,
        description="Genres the listener wants to avoid (at least one when provided).",
    )
    energy: Energy | None = Field(default=None, description="Desired energy level.")
    tempo: Tempo | None = Field(default=None, description="Desired tempo.")
    era: Era | None = Field(default=None, description="Preferred decade.")
    language: list[Language] | None = Field(
        default=None,
        description="Preferred lyric languages (ISO 639-1).",
    )


class MoodRequest(BaseModel):
    """Body of ``POST /mood``."""

    mood: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Free-text description of how the listener feels.",
    )
    preferences: MoodPreferences | None = None

    @model_validator(mode="after")
    def _genres_do_not_overlap(self) -> "MoodRequest":
        prefs = self.preferences
        if prefs and prefs.genres and prefs.exclude_genres:
            overlap = set(prefs.genres) & set(prefs.exclude_genres)
            if overlap:
                raise ValueError(
                    "preferences: genres cannot appear in both genres and excludeGenres "
                    f"({', '.join(sorted(overlap))})"
                )
        return self
