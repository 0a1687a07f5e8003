from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


class LLMProviderError(Exception):
    """The provider could not produce a completion (transport, status or timeout)."""


@dataclass
class LLMResponse:
    content: str
    model: str
    usage: Optional[dict] = None


class LLMProvider(ABC):
    """Chat-completion backend used for replies and employee classification."""

    @abstractmethod
    def generate(
        self,
        messages: List[dict],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 300,
        timeout_seconds: Optional[float] = None,
    ) -> LLMResponse:
        """Return the first choice's message content."""
        pass
