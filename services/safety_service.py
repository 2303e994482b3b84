"""Crisis interception and reply disclosure filtering."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Mapping

from persona import CRISIS_KEYWORDS, CRISIS_RESPONSE


# Vendor and technical terms Talbot should never disclose, with their
# neutral replacements. Matched case-insensitively on whole words.
DISALLOWED_TERMS: Mapping[str, str] = {
    "large language model": "companion",
    "language model": "companion",
    "AI model": "companion",
    "LLM": "companion",
    "chatbot": "companion",
    "Anthropic": "the team behind Talbot",
    "OpenAI": "the team behind Talbot",
    "Google": "the team behind Talbot",
    "ElevenLabs": "my voice",
    "Netlify": "my setup",
    "Claude": "Talbot",
    "ChatGPT": "Talbot",
    "GPT-4": "Talbot",
    "GPT-3.5": "Talbot",
    "Gemini": "Talbot",
    "Whisper": "my listening",
    "API": "connection",
    "system prompt": "approach",
}


def _term_pattern(term: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![\w-]){re.escape(term)}(?![\w-])", re.IGNORECASE)


@dataclass(frozen=True)
class FilterResult:
    text: str
    replaced: tuple[str, ...]


class SafetyService:
    """Fixed-vocabulary crisis detection and reply filtering."""

    def __init__(
        self,
        *,
        crisis_keywords: Iterable[str] | None = None,
        disallowed_terms: Mapping[str, str] | None = None,
    ) -> None:
        keywords = {keyword.strip().lower() for keyword in (crisis_keywords or CRISIS_KEYWORDS)}
        self._crisis_keywords = tuple(sorted(keyword for keyword in keywords if keyword))
        terms = dict(disallowed_terms or DISALLOWED_TERMS)
        # Longest first so "large language model" wins over "language model".
        self._term_patterns = [
            (term, _term_pattern(term), replacement)
            for term, replacement in sorted(terms.items(), key=lambda item: len(item[0]), reverse=True)
        ]

    @property
    def crisis_response(self) -> str:
        return CRISIS_RESPONSE

    def is_crisis(self, text: str) -> bool:
        lowered = (text or "").lower()
        return any(keyword in lowered for keyword in self._crisis_keywords)

    def filter_reply(self, text: str, *, protected: Iterable[str] = ()) -> FilterResult:
        """Replace disallowed terms, leaving any term found in ``protected`` alone.

        ``protected`` carries words that must survive verbatim, such as the
        user's own name when it happens to match a vendor term.
        """

        cleaned = text or ""
        keep = [word.strip() for word in protected if word and word.strip()]
        replaced: list[str] = []
        for term, pattern, replacement in self._term_patterns:
            if any(pattern.search(word) for word in keep):
                continue
            cleaned, count = pattern.subn(replacement, cleaned)
            if count:
                replaced.append(term)
        return FilterResult(text=cleaned, replaced=tuple(replaced))


__all__ = ["DISALLOWED_TERMS", "FilterResult", "SafetyService"]
