import json
import logging
from typing import Annotated, Any
from urllib.parse import unquote

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError

from moodic.api.dependencies import get_playlist_service, require_bearer_token
from moodic.core.errors import ValidationAppError
from moodic.core.rate_limit import RateLimit, playlists_policy
from moodic.schemas.moodic import Moodic
from moodic.services.playlist_service import PlaylistService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Playlists"])


def parse_moodic_param(raw: str | None) -> Moodic:
    """Decode the ``moodic`` query parameter (URL-encoded JSON).

    Raises:
        ValidationAppError: If the parameter is missing, not JSON, or not a valid moodic.
    """
    if not raw:
        raise ValidationAppError(
            code="moodic_required",
            message="The moodic query parameter is required",
        )

    try:
        return Moodic.model_validate(json.loads(unquote(raw)))
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.info("playlists.invalid_moodic", extra={"error_type": type(exc).__name__})
        raise ValidationAppError(
            code="moodic_invalid",
            message="Invalid moodic format",
        ) from exc


@router.get(
    "/playlists",
    dependencies=[Depends(RateLimit(playlists_policy))],
)
async def get_playlists(
    token: Annotated[str, Depends(require_bearer_token)],
    service: Annotated[PlaylistService, Depends(get_playlist_service)],
    moodic: Annotated[str | None, Query(description="URL-encoded moodic JSON")] = None,
) -> dict[str, Any]:
    """Search Spotify playlists for a moodic on behalf of the signed-in user.

    Raises:
        RateLimitExceededError: 429 when the client is over quota.
        AuthenticationAppError: 401 without a valid bearer token.
        ValidationAppError: 400 when ``moodic`` is missing or invalid.
        SpotifyAppError: 502 when the search fails upstream.
    """
    parsed = parse_moodic_param(moodic)
    return await service.search(token, parsed)
