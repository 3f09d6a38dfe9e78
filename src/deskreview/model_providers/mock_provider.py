"""Mock draft source for local development and testing.

Returns canned drafts. No real LLM calls.
"""

from __future__ import annotations

from deskreview.core.exceptions import GenerationError
from deskreview.models.decision import GeneratedDraft, Sentiment
from deskreview.models.review import LearningExample
from deskreview.services.curator import format_few_shot


class MockDraftSource:
    """IDraftSource implementation that returns deterministic drafts."""

    def __init__(
        self,
        default_content: str = "Thanks for your message. Here is what we found.",
        default_confidence: float = 0.9,
        default_intent: str = "general_inquiry",
    ) -> None:
        self._default = GeneratedDraft(
            content=default_content,
            confidence=default_confidence,
            intent=default_intent,
        )
        self._canned: dict[str, GeneratedDraft] = {}
        self._fail_on: set[str] = set()
        self.calls: list[tuple[str, list[LearningExample]]] = []
        self.prompts: list[str] = []

    def set_response(
        self,
        message_contains: str,
        content: str,
        confidence: float,
        intent: str = "unknown",
        sentiment: Sentiment = Sentiment.NEUTRAL,
    ) -> None:
        """Register a canned draft for messages containing a keyword."""
        self._canned[message_contains] = GeneratedDraft(
            content=content, confidence=confidence, intent=intent, sentiment=sentiment,
        )

    def fail_on(self, message_contains: str) -> None:
        """Raise GenerationError for messages containing a keyword."""
        self._fail_on.add(message_contains)

    def generate(self, message: str, examples: list[LearningExample]) -> GeneratedDraft:
        self.calls.append((message, list(examples)))
        self.prompts.append(f"{format_few_shot(examples)}\n\nCustomer: {message}".lstrip())
        for keyword in self._fail_on:
            if keyword in message:
                raise GenerationError(f"mock generation failure for {keyword!r}")
        for keyword, draft in self._canned.items():
            if keyword in message:
                return draft
        return self._default
