import json
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from zulu_assistant.config import settings
from zulu_assistant.logging_config import get_logger
from zulu_assistant.services.llm import LLMProvider, LLMProviderError, OpenAIProvider

logger = get_logger("ai_service")

FALLBACK_REPLY = "Hi! Welcome to Zulu Club 🛍️ What are you looking for today?"

SYSTEM_PROMPT = """You are Zulu Club's friendly WhatsApp shopping assistant.

About Zulu Club: premium lifestyle products delivered in 100 minutes. Shop fashion,
home decor, wellness, beauty & more. Now live in Gurgaon. Website: zulu.club

Rules:
- Answer in 1-3 short sentences, warm and conversational.
- For company questions use only the facts above.
- For product questions ask what they are looking for and who it is for (men, women or kids).
- Never invent prices, stock levels or order details."""

EMPLOYEE_CLASSIFY_PROMPT = """Classify this internal employee WhatsApp message into exactly one intent:
- "empgreeting" → hello / hi / casual small talk
- "billing" → invoice, GST, payment, operations or order issues to be logged

Respond ONLY JSON:
{{"intent": "billing", "reason": "short why"}}
User message: "{message}"
"""


class ClassifierUnavailableError(Exception):
    """The language model failed or answered with something unusable."""


class EmployeeIntent(str, Enum):
    GREETING = "greeting"
    BILLING = "billing"
    PARSE_FAILURE = "parse_failure"


@dataclass(frozen=True)
class EmployeeClassification:
    intent: EmployeeIntent
    reason: str = ""


_llm_provider: Optional[LLMProvider] = None


def get_llm_provider() -> LLMProvider:
    """Get or create LLM provider instance."""
    global _llm_provider
    if _llm_provider is None:
        _llm_provider = OpenAIProvider(
            api_key=settings.openai_api_key,
            default_model=settings.chat_model,
            default_timeout=settings.llm_timeout_seconds,
        )
    return _llm_provider


def _complete(
    provider: LLMProvider,
    messages: List[dict],
    *,
    model: str,
    timeout_seconds: float,
    stage: str,
    temperature: float = 0.7,
    max_tokens: int = 300,
) -> str:
    started = time.monotonic()
    try:
        response = provider.generate(
            messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout_seconds=timeout_seconds,
        )
    except LLMProviderError as e:
        raise ClassifierUnavailableError(str(e)) from e
    finally:
        logger.info(
            "Timing",
            extra={
                "context": {
                    "stage": stage,
                    "elapsed_ms": round((time.monotonic() - started) * 1000, 2),
                    "model_name": model,
                }
            },
        )

    content = (response.content or "").strip()
    if not content:
        raise ClassifierUnavailableError("empty completion")
    return content


def generate_reply(
    user_message: str,
    history: Optional[List[dict]] = None,
    provider: Optional[LLMProvider] = None,
) -> str:
    """Free-text reply for a customer message; FALLBACK_REPLY on any failure."""
    provider = provider or get_llm_provider()
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    for entry in history or []:
        if entry.get("role") in ("user", "assistant") and entry.get("content"):
            messages.append({"role": entry["role"], "content": entry["content"]})
    if not history or history[-1].get("content") != user_message:
        messages.append({"role": "user", "content": user_message})

    try:
        return _complete(
            provider,
            messages,
            model=settings.chat_model,
            timeout_seconds=settings.llm_timeout_seconds,
            stage="reply_llm_ms",
        )
    except ClassifierUnavailableError as e:
        logger.warning(f"Reply generation failed, using fallback: {e}")
        return FALLBACK_REPLY


def _strip_code_fence(text: str) -> str:
    match = re.search(r"```(?:json)?\s*(.*?)```", text, re.DOTALL)
    return match.group(1).strip() if match else text


def parse_employee_intent(raw: str) -> EmployeeClassification:
    try:
        data = json.loads(_strip_code_fence(raw or ""))
    except json.JSONDecodeError:
        logger.warning(f"Unparseable employee classification: {raw!r}")
        return EmployeeClassification(EmployeeIntent.PARSE_FAILURE, reason="invalid json")
    if not isinstance(data, dict):
        return EmployeeClassification(EmployeeIntent.PARSE_FAILURE, reason="not an object")

    intent = str(data.get("intent") or "").strip().lower()
    reason = str(data.get("reason") or "")
    if intent in ("empgreeting", "greeting"):
        return EmployeeClassification(EmployeeIntent.GREETING, reason=reason)
    if intent == "billing":
        return EmployeeClassification(EmployeeIntent.BILLING, reason=reason)
    return EmployeeClassification(EmployeeIntent.PARSE_FAILURE, reason=f"unexpected intent {intent!r}")


def classify_employee_message(
    message: str,
    provider: Optional[LLMProvider] = None,
) -> EmployeeClassification:
    provider = provider or get_llm_provider()
    messages = [
        {"role": "system", "content": "Internal employee intent classifier"},
        {"role": "user", "content": EMPLOYEE_CLASSIFY_PROMPT.format(message=message)},
    ]
    try:
        raw = _complete(
            provider,
            messages,
            model=settings.classifier_model,
            timeout_seconds=settings.classifier_timeout_seconds,
            stage="employee_intent_llm_ms",
            temperature=0,
            max_tokens=200,
        )
    except ClassifierUnavailableError as e:
        logger.warning(f"Employee classifier unavailable: {e}")
        return EmployeeClassification(EmployeeIntent.PARSE_FAILURE, reason="classifier unavailable")
    return parse_employee_intent(raw)
