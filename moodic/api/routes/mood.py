from typing import Annotated

from fastapi import APIRouter, Depends

from moodic.api.dependencies import get_moodic_service
from moodic.core.rate_limit import RateLimit, mood_policy
from moodic.schemas.mood import MoodRequest
from moodic.schemas.moodic import MoodProcessedResponse
from moodic.services.moodic_service import MoodicService

router = APIRouter(tags=["Mood"])


@router.post(
    "/mood",
    response_model=MoodProcessedResponse,
    dependencies=[Depends(RateLimit(mood_policy))],
)
async def process_mood(
    body: MoodRequest,
    service: Annotated[MoodicService, Depends(get_moodic_service)],
) -> MoodProcessedResponse:
    """Translate a free-text mood into Spotify search terms.

    The rate limit is checked before the body is validated, so malformed
    requests still consume quota.

    Raises:
        RateLimitExceededError: 429 when the client is over quota.
        LLMAppError: 500 when the model fails or returns an invalid moodic.
    """
    moodic = await service.generate(body)
    return MoodProcessedResponse(moodic=moodic)
