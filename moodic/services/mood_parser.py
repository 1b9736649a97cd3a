"""Render a mood request as the plain-text description fed to the prompt."""

from __future__ import annotations

from moodic.schemas.mood import MoodRequest

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
}


def describe_mood(request: MoodRequest) -> str:
    """Describe the mood and any preferences, one fact per line.

    Examples:
        >>> describe_mood(MoodRequest(mood="  tired but hopeful "))
        'User: tired but hopeful'
    """
    lines = [f"User: {request.mood.strip()}"]

    prefs = request.preferences
    if prefs is None:
        return lines[0]

    if prefs.genres:
        lines.append(f"Preferred genres: {', '.join(prefs.genres)}")
    if prefs.exclude_genres:
        lines.append(f"Genres to avoid: {', '.join(prefs.exclude_genres)}")
    if prefs.energy:
        lines.append(f"Energy: {prefs.energy}")
    if prefs.tempo:
        lines.append(f"Tempo: {prefs.tempo}")
    if prefs.era:
        lines.append(f"Era: {prefs.era}")
    if prefs.language:
        names = ", ".join(LANGUAGE_NAMES.get(code, code) for code in prefs.language)
        lines.append(f"Languages: {names}")

    return "\n".join(lines)
