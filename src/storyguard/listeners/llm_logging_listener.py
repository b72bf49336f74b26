"""LLM Event Listener for logging scene generation calls.

Records, per LLM call made by the scene writer:
- start (model, estimated prompt tokens)
- completion (response length, estimated tokens)
- failure (error message)

Failures are also counted so a run summary can report how often the
retry wrapper had to step in.
"""

import logging

from crewai.events import BaseEventListener
from crewai.events.types.llm_events import (
    LLMCallStartedEvent,
    LLMCallCompletedEvent,
    LLMCallFailedEvent,
)

from storyguard.tools.word_counter import count_chinese_words

logger = logging.getLogger("StoryGuard")


def estimate_tokens(text: str) -> int:
    """Rough token estimate: Chinese ~2 chars/token, other text ~4 chars/token."""
    if not text:
        return 0
    chinese_chars = sum(1 for c in text if '\u4e00' <= c <= '\u9fff')
    return int(chinese_chars / 2 + (len(text) - chinese_chars) / 4)


def _messages_text(messages) -> str:
    if isinstance(messages, str):
        return messages
    if isinstance(messages, list):
        parts = []
        for msg in messages:
            content = msg.get('content', '') if isinstance(msg, dict) else ''
            if isinstance(content, str):
                parts.append(content)
        return "\n".join(parts)
    return ""


class LLMLoggingListener(BaseEventListener):
    """Logs LLM calls and keeps simple counters for the run summary."""

    def __init__(self):
        super().__init__()
        self.call_count = 0
        self.failure_count = 0
        self.prompt_tokens = 0

    def setup_listeners(self, crewai_event_bus):

        @crewai_event_bus.on(LLMCallStartedEvent)
        def on_llm_call_started(source, event: LLMCallStartedEvent):
            self.call_count += 1
            tokens = estimate_tokens(_messages_text(getattr(event, 'messages', None)))
            self.prompt_tokens += tokens
            logger.info(
                f"[LLM EVENT] Call #{self.call_count} started "
                f"(model={getattr(event, 'model', None)}, ~{tokens:,} prompt tokens)"
            )

        @crewai_event_bus.on(LLMCallCompletedEvent)
        def on_llm_call_completed(source, event: LLMCallCompletedEvent):
            content = str(getattr(event, 'response', '') or '')
            logger.info(
                f"[LLM EVENT] Call #{self.call_count} completed: "
                f"{count_chinese_words(content):,} words, ~{estimate_tokens(content):,} tokens"
            )

        @crewai_event_bus.on(LLMCallFailedEvent)
        def on_llm_call_failed(source, event: LLMCallFailedEvent):
            self.failure_count += 1
            logger.error(f"[LLM EVENT] Call #{self.call_count} FAILED: {event.error}")

    def summary(self) -> str:
        return (
            f"{self.call_count} LLM calls, {self.failure_count} failed, "
            f"~{self.prompt_tokens:,} prompt tokens"
        )


# Instantiated at import time so the listener registers with the event bus
llm_logging_listener = LLMLoggingListener()
