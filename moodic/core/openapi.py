"""OpenAPI metadata and customization utilities.

Enriches the generated schema with tags metadata and a Spotify bearer-token
security scheme applied to the routes that call Spotify on the user's behalf.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

# Paths whose operations require ``Authorization: Bearer <spotify token>``
BEARER_PROTECTED_PATHS = ("/playlists", "/me")

TAGS_METADATA = [
    {"name": "Mood", "description": "Mood to moodic translation (LLM)."},
    {"name": "Playlists", "description": "Spotify playlist search for a moodic."},
    {"name": "Auth", "description": "Spotify OAuth authorization-code flow."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and security metadata."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "SpotifyBearer",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Spotify access token obtained through /login.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        tags.extend(t for t in TAGS_METADATA if t["name"] not in existing_tag_names)

        for path, methods in schema.get("paths", {}).items():
            if path not in BEARER_PROTECTED_PATHS:
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = [{"SpotifyBearer": []}]

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
