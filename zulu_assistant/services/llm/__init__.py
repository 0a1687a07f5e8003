from zulu_assistant.services.llm.base import LLMProvider, LLMProviderError, LLMResponse
from zulu_assistant.services.llm.openai_provider import OpenAIProvider

__all__ = ["LLMProvider", "LLMProviderError", "LLMResponse", "OpenAIProvider"]
