"""OpenAI-compatible middleware — drop-in for any proxy that uses the
chat completions format.

Usage:

    mw = ScanMiddleware(Pipeline(EnvCredential()))

    # Before sending to provider (every message scanned concurrently)
    safe_messages = await mw.apre_send(messages)

    # After receiving response
    safe_response = await mw.apost_receive(response_text)

Unlike PII tokenization, secret redaction is one-way: the model never
sees the value and nothing is restored in its response.
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass, field

from .pipeline import Pipeline
from .types import ScanOutcome

RESPONSE_NAME = "response.txt"


def _message_name(i: int) -> str:
    return f"message-{i}.txt"


@dataclass
class ScanMiddleware:
    """Middleware that sits between client and LLM provider.

    ``last_outcomes`` and ``stats`` describe the most recent call only.  An
    instance shared between concurrent requests should use scan_messages /
    ascan_messages, which hand each caller its own outcomes.
    """

    pipeline: Pipeline
    content_key: str = "content"
    last_outcomes: list[ScanOutcome] = field(default_factory=list)

    def scan_messages(self, messages: list[dict]) -> tuple[list[dict], list[ScanOutcome]]:
        """Scan outbound messages one after another; return them with their outcomes."""
        outcomes = {
            i: self.pipeline.process(content, _message_name(i))
            for i, content in self._scannable(messages)
        }
        return self._rebuild(messages, outcomes), list(outcomes.values())

    async def ascan_messages(self, messages: list[dict]) -> tuple[list[dict], list[ScanOutcome]]:
        """Scan outbound messages concurrently; return them with their outcomes."""
        scannable = self._scannable(messages)
        results = await asyncio.gather(*(
            self.pipeline.aprocess(content, _message_name(i))
            for i, content in scannable
        ))
        outcomes = {i: outcome for (i, _), outcome in zip(scannable, results)}
        return self._rebuild(messages, outcomes), list(results)

    def pre_send(self, messages: list[dict]) -> list[dict]:
        """Scan and redact outbound messages one after another."""
        redacted, self.last_outcomes = self.scan_messages(messages)
        return redacted

    async def apre_send(self, messages: list[dict]) -> list[dict]:
        """Scan and redact outbound messages concurrently."""
        redacted, self.last_outcomes = await self.ascan_messages(messages)
        return redacted

    def post_receive(self, text: str) -> str:
        """Scan and redact the model's response."""
        outcome = self.pipeline.process(text, RESPONSE_NAME)
        self.last_outcomes = [outcome]
        return outcome.content

    async def apost_receive(self, text: str) -> str:
        outcome = await self.pipeline.aprocess(text, RESPONSE_NAME)
        self.last_outcomes = [outcome]
        return outcome.content

    @property
    def stats(self) -> dict:
        return {
            "scanned": sum(1 for o in self.last_outcomes if o.scanned),
            "failed": sum(1 for o in self.last_outcomes if not o.scanned),
            "redactions": sum(len(o.redactions) for o in self.last_outcomes),
        }

    # ------------------------------------------------------------------

    def _scannable(self, messages: list[dict]) -> list[tuple[int, str]]:
        out: list[tuple[int, str]] = []
        for i, msg in enumerate(messages):
            content = msg.get(self.content_key)
            if isinstance(content, str) and content:
                out.append((i, content))
        return out

    def _rebuild(self, messages: list[dict], outcomes: dict[int, ScanOutcome]) -> list[dict]:
        """New message dicts with redacted content.  Originals are untouched."""
        out: list[dict] = []
        for i, msg in enumerate(messages):
            outcome = outcomes.get(i)
            if outcome is not None and outcome.content != msg[self.content_key]:
                out.append({**msg, self.content_key: outcome.content})
            else:
                out.append(msg)
        return out
