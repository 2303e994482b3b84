from __future__ import annotations

import pytest

from persona import CRISIS_KEYWORDS, CRISIS_RESPONSE
from services.safety_service import SafetyService


@pytest.mark.parametrize("keyword", CRISIS_KEYWORDS)
def test_every_crisis_keyword_is_detected(keyword: str) -> None:
    assert SafetyService().is_crisis(f"Lately I {keyword.upper()} and I don't know") is True


def test_ordinary_text_is_not_crisis() -> None:
    service = SafetyService()

    assert service.is_crisis("I had a rough day at work") is False
    assert service.is_crisis("") is False


def test_crisis_response_is_fixed() -> None:
    service = SafetyService()

    assert service.crisis_response == CRISIS_RESPONSE
    assert "000" in service.crisis_response
    assert "13 11 14" in service.crisis_response


def test_filter_replaces_vendor_terms_case_insensitively() -> None:
    result = SafetyService().filter_reply("As an openai Large Language Model built on GPT-4, I can't say.")

    lowered = result.text.lower()
    assert "openai" not in lowered
    assert "language model" not in lowered
    assert "gpt-4" not in lowered
    assert set(result.replaced) >= {"OpenAI", "large language model", "GPT-4"}


def test_filter_matches_whole_words_only() -> None:
    result = SafetyService().filter_reply("Claudette made rapid progress with her therapist.")

    assert result.text == "Claudette made rapid progress with her therapist."
    assert result.replaced == ()


def test_filter_with_custom_terms() -> None:
    service = SafetyService(disallowed_terms={"backend": "behind the scenes"})

    assert service.filter_reply("My Backend is busy").text == "My behind the scenes is busy"


def test_protected_words_survive_filtering() -> None:
    service = SafetyService()

    result = service.filter_reply("Claude, Google says ChatGPT is busy.", protected=["Claude", ""])

    assert result.text == "Claude, the team behind Talbot says Talbot is busy."
    assert "Claude" not in result.replaced


def test_protected_full_name_covers_each_word() -> None:
    result = SafetyService().filter_reply("Hi Gemini, nice to see you.", protected=["Gemini Rose"])

    assert result.text == "Hi Gemini, nice to see you."
