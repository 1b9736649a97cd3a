from abc import ABC, abstractmethod
from typing import Any


class AbstractLLMClient(ABC):
    """Interface for LLM clients that produce structured JSON outputs."""

    model: str

    @abstractmethod
    async def generate_json(
        self,
        prompt: str,
        *,
        system_instruction: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Generate a JSON object from the model.

        Args:
            prompt: User prompt to send to the model.
            system_instruction: Optional system message framing the model.
            **kwargs: Provider-specific options (e.g., temperature, max_tokens).

        Returns:
            dict[str, Any]: Parsed JSON object returned by the model.

        Raises:
            RuntimeError: If the provider call fails or the response is not a JSON object.
        """
        ...

    async def close(self) -> None:
        """Release HTTP resources held by the client."""
        return None
