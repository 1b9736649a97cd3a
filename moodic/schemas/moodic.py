"""Pydantic schemas for LLM-generated search descriptors (moodics)."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]


class Moodic(BaseModel):
    """Spotify search terms derived from a mood.

    Produced by the LLM and echoed back by the frontend on ``/playlists``,
    so it is validated on both paths.
    """

    genres: list[NonEmptyStr] = Field(
        ...,
        min_length=1,
        max_length=10,
        description="Genres matching the mood.",
    )
    mood: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Short mood label.",
    )
    keywords: list[NonEmptyStr] = Field(
        ...,
        min_length=1,
        max_length=15,
        description="Search keywords.",
    )
    tempo: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Tempo descriptor (e.g., 'slow', 'upbeat').",
    )


class MoodProcessedResponse(BaseModel):
    """Response of ``POST /mood``."""

    message: str = Field(default="Mood processed")
    moodic: Moodic
