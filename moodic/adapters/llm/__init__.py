"""LLM adapter layer."""

from moodic.adapters.llm.base import AbstractLLMClient
from moodic.adapters.llm.factory import create_llm_client
from moodic.adapters.llm.openai_client import OpenAIClient

__all__ = [
    "AbstractLLMClient",
    "OpenAIClient",
    "create_llm_client",
]
