from typing import List, Optional

import httpx

from zulu_assistant.logging_config import get_logger
from zulu_assistant.services.llm.base import LLMProvider, LLMProviderError, LLMResponse

logger = get_logger("llm.openai")


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions over plain HTTP."""

    def __init__(self, api_key: str, default_model: str = "gpt-4o-mini", default_timeout: float = 8.0):
        self.api_key = api_key
        self.default_model = default_model
        self.default_timeout = default_timeout
        self.base_url = "https://api.openai.com/v1/chat/completions"

    def generate(
        self,
        messages: List[dict],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 300,
        timeout_seconds: Optional[float] = None,
    ) -> LLMResponse:
        model = model or self.default_model
        if not self.api_key:
            raise LLMProviderError("OPENAI_API_KEY is not configured")

        payload = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        timeout = timeout_seconds if timeout_seconds is not None else self.default_timeout
        logger.debug(f"OpenAI request: model={model}, messages_count={len(messages)}")

        try:
            with httpx.Client(timeout=timeout) as client:
                response = client.post(
                    self.base_url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
        except httpx.TimeoutException as e:
            raise LLMProviderError(f"OpenAI timeout after {timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMProviderError(f"OpenAI transport error: {e}") from e

        if response.status_code != 200:
            logger.error(f"OpenAI error: status={response.status_code}, body={response.text[:300]}")
            raise LLMProviderError(f"OpenAI API error: {response.status_code}")

        try:
            data = response.json()
            content = ""
            if data.get("choices"):
                message = data["choices"][0].get("message") or {}
                content = message.get("content") or ""
            if not isinstance(content, str):
                raise TypeError(f"content is {type(content).__name__}")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"OpenAI malformed response: {response.text[:300]}")
            raise LLMProviderError(f"OpenAI malformed response: {e}") from e

        logger.debug(f"OpenAI content: {content[:100] if content else 'EMPTY'}")

        return LLMResponse(
            content=content,
            model=data.get("model", model),
            usage=data.get("usage"),
        )
