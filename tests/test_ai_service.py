from unittest.mock import Mock

from zulu_assistant.services.ai_service import (
    FALLBACK_REPLY,
    SYSTEM_PROMPT,
    EmployeeIntent,
    classify_employee_message,
    generate_reply,
    parse_employee_intent,
)
from zulu_assistant.services.llm import LLMProviderError, LLMResponse


class TestParseEmployeeIntent:
    def test_billing(self):
        result = parse_employee_intent('{"intent": "billing", "reason": "invoice issue"}')
        assert result.intent == EmployeeIntent.BILLING
        assert result.reason == "invoice issue"

    def test_empgreeting(self):
        assert parse_employee_intent('{"intent": "empgreeting"}').intent == EmployeeIntent.GREETING

    def test_intent_is_case_insensitive(self):
        assert parse_employee_intent('{"intent": "Billing"}').intent == EmployeeIntent.BILLING

    def test_code_fenced_json(self):
        raw = '```json\n{"intent": "billing", "reason": "gst"}\n```'
        assert parse_employee_intent(raw).intent == EmployeeIntent.BILLING

    def test_invalid_json(self):
        assert parse_employee_intent("billing please").intent == EmployeeIntent.PARSE_FAILURE

    def test_non_object_json(self):
        assert parse_employee_intent('["billing"]').intent == EmployeeIntent.PARSE_FAILURE

    def test_unexpected_intent(self):
        assert parse_employee_intent('{"intent": "refund"}').intent == EmployeeIntent.PARSE_FAILURE

    def test_empty(self):
        assert parse_employee_intent("").intent == EmployeeIntent.PARSE_FAILURE


class TestClassifyEmployeeMessage:
    def test_uses_provider_response(self, llm_provider):
        llm_provider.generate.return_value = LLMResponse(content='{"intent":"billing"}', model="test-model")

        result = classify_employee_message("operation delay issue", llm_provider)

        assert result.intent == EmployeeIntent.BILLING
        messages = llm_provider.generate.call_args[0][0]
        assert "operation delay issue" in messages[-1]["content"]
        assert llm_provider.generate.call_args.kwargs["temperature"] == 0

    def test_provider_error_is_parse_failure(self, llm_provider):
        llm_provider.generate.side_effect = LLMProviderError("timeout")

        result = classify_employee_message("hello", llm_provider)

        assert result.intent == EmployeeIntent.PARSE_FAILURE


class TestGenerateReply:
    def test_returns_model_content(self, llm_provider):
        assert generate_reply("what is zulu club?", provider=llm_provider) == "Happy to help!"

    def test_builds_messages_from_history(self, llm_provider):
        history = [
            {"role": "user", "content": "hello"},
            {"role": "assistant", "content": "Hey there"},
            {"role": "user", "content": "what is zulu club?"},
        ]

        generate_reply("what is zulu club?", history, llm_provider)

        messages = llm_provider.generate.call_args[0][0]
        assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert messages[1:] == history

    def test_appends_message_missing_from_history(self, llm_provider):
        generate_reply("delivery time?", [{"role": "user", "content": "hello"}], llm_provider)

        messages = llm_provider.generate.call_args[0][0]
        assert messages[-1] == {"role": "user", "content": "delivery time?"}

    def test_provider_error_returns_fallback(self, llm_provider):
        llm_provider.generate.side_effect = LLMProviderError("HTTP 500")

        assert generate_reply("hello there", provider=llm_provider) == FALLBACK_REPLY

    def test_empty_completion_returns_fallback(self):
        provider = Mock()
        provider.generate.return_value = LLMResponse(content="   ", model="test-model")

        assert generate_reply("hello there", provider=provider) == FALLBACK_REPLY
