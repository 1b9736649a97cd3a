"""Moodic generation: mood text in, validated Spotify search terms out.

Pipeline:
- Render the mood request as text
- Fill the fixed prompt template
- Call the LLM in JSON mode
- Validate the result against the ``Moodic`` schema
"""

import logging

from pydantic import ValidationError

from moodic.adapters.llm.base import AbstractLLMClient
from moodic.core.errors import LLMAppError
from moodic.schemas.mood import MoodRequest
from moodic.schemas.moodic import Moodic
from moodic.services.mood_parser import describe_mood

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are an expert in music and psychology. You analyse moods and suggest "
    "music that fits them."
)


def build_prompt(mood_description: str) -> str:
    """Build the moodic prompt for a rendered mood description."""
    return f"""
Analyse this mood and return search terms for Spotify.
Mood: {mood_description}
Return ONLY a JSON object with this format:
{{
  "genres": ["genre1", "genre2", "genre3"],
  "mood": "mood1",
  "keywords": ["keyword1", "keyword2", "keyword3"],
  "tempo": "tempo1"
}}
""".strip()


class MoodicService:
    """Turns mood requests into moodics using an LLM.

    Attributes:
        llm: LLM client adapter for generating structured JSON.
    """

    def __init__(self, llm: AbstractLLMClient) -> None:
        self.llm = llm

    async def generate(self, request: MoodRequest) -> Moodic:
        """Generate a moodic for ``request``.

        Args:
            request: Validated mood request.

        Returns:
            Validated Moodic.

        Raises:
            LLMAppError: If the LLM call fails or its output violates the schema.
        """
        prompt = build_prompt(describe_mood(request))

        try:
            raw = await self.llm.generate_json(prompt, system_instruction=SYSTEM_INSTRUCTION)
        except RuntimeError as exc:
            logger.error("moodic.llm_failed", extra={"error_msg": str(exc)})
            raise LLMAppError(
                code="llm_request_failed",
                message="Could not generate a moodic for this mood",
            ) from exc

        try:
            moodic = Moodic.model_validate(raw)
        except ValidationError as exc:
            logger.error(
                "moodic.invalid_llm_output",
                extra={"error_count": exc.error_count(), "errors": exc.errors(include_input=False)},
            )
            raise LLMAppError(
                code="llm_invalid_output",
                message="The language model returned an invalid moodic",
            ) from exc

        logger.info(
            "moodic.generated",
            extra={"genre_count": len(moodic.genres), "keyword_count": len(moodic.keywords)},
        )
        return moodic
