"""OpenAI LLM client adapter."""

import json
from typing import Any

from openai import AsyncOpenAI

from moodic.adapters.llm.base import AbstractLLMClient

DEFAULT_SYSTEM_INSTRUCTION = "Output JSON only. No extra text or markdown formatting."

# Options forwarded verbatim to chat.completions.create
_PASSTHROUGH_PARAMS = ("max_tokens", "top_p", "frequency_penalty", "presence_penalty", "seed")


class OpenAIClient(AbstractLLMClient):
    """Client for calling OpenAI chat completions in JSON mode."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 30.0,
        temperature: float = 0.7,
    ) -> None:
        """Initialize OpenAI async client.

        Args:
            api_key: OpenAI API key for authentication.
            model: Model name (e.g., "gpt-4o-mini").
            base_url: Optional custom base URL for OpenAI-compatible APIs.
            timeout_seconds: Timeout for requests in seconds.
            temperature: Default sampling temperature.
        """
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self.model = model
        self.temperature = temperature

    async def generate_json(
        self,
        prompt: str,
        *,
        system_instruction: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Generate a JSON object using OpenAI chat completions.

        The request always uses ``response_format={"type": "json_object"}``.

        Raises:
            RuntimeError: If the API call fails or the response is not a JSON object.
        """
        system_content = DEFAULT_SYSTEM_INSTRUCTION
        if system_instruction:
            system_content = f"{system_instruction}\n{DEFAULT_SYSTEM_INSTRUCTION}"

        request_params: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_content},
                {"role": "user", "content": prompt},
            ],
            "temperature": kwargs.pop("temperature", self.temperature),
            "response_format": {"type": "json_object"},
        }
        for param in _PASSTHROUGH_PARAMS:
            if param in kwargs:
                request_params[param] = kwargs[param]

        try:
            response = await self.client.chat.completions.create(**request_params)
        except Exception as exc:
            raise RuntimeError(f"OpenAI API error: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RuntimeError("LLM returned empty response")

        try:
            parsed = json.loads(content.strip())
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"LLM returned invalid JSON: {exc}") from exc

        if not isinstance(parsed, dict):
            raise RuntimeError("LLM returned invalid JSON: expected an object")
        return parsed

    async def close(self) -> None:
        await self.client.close()
