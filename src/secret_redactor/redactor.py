"""Redactor — turn a detector verdict into replacements on the content.

Usage:
    from secret_redactor import Redactor

    redactor = Redactor()          # reusable, stateless
    result = redactor.redact("token ghp_abc...", scan_result)
    print(result.content)          # "token REDACTED"
    print(result.redactions)       # audit trail, highest offset first

Replacements are planned first, then applied right-to-left so the offsets
of the remaining (lower) spans stay valid after each splice.
"""

from __future__ import annotations
import json
import re
from dataclasses import dataclass
from typing import NamedTuple, Sequence

from .types import RedactedContent, Redaction, ScanResult

DEFAULT_MARKER = "REDACTED"

# One JSON scalar: string (escapes included), number, or literal
_JSON_SCALAR = re.compile(
    r'"(?:[^"\\]|\\.)*"|-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?|true|false|null'
)


@dataclass
class RedactorConfig:
    """Configuration for the Redactor."""
    marker: str = DEFAULT_MARKER      # literal substituted for every span


class _Span(NamedTuple):
    start: int
    end: int                          # exclusive
    kind: str
    policy: str


class Redactor:
    """Applies detector matches to content, one marker per distinct span."""

    def __init__(self, config: RedactorConfig | None = None) -> None:
        self.config = config or RedactorConfig()

    def redact(
        self,
        content: str,
        scan_result: ScanResult | None,
        *,
        document: str | None = None,
    ) -> RedactedContent:
        """Redact every span reported in ``scan_result``.

        Offsets must be in ``content``'s coordinate space.  ``document`` is
        copied onto each Redaction for the audit trail.
        """
        if scan_result is None or not scan_result.policy_breaks:
            return RedactedContent(content=content)

        plan = self.plan(scan_result)
        redactions = [
            Redaction(
                kind=span.kind,
                policy=span.policy,
                start=span.start,
                end=span.end,
                original=content[span.start:span.end],
                document=document,
            )
            for span in plan
        ]
        return RedactedContent(content=self.apply(content, plan), redactions=redactions)

    def plan(self, scan_result: ScanResult) -> list[_Span]:
        """Return the replacements to make, highest start offset first.

        Spans without offsets are dropped, and an exact (start, end) pair is
        only replaced once even when several policies report it.  Spans that
        merely overlap are all kept.
        """
        candidates: list[_Span] = []
        for pb in scan_result.policy_breaks:
            for m in pb.matches:
                if m.start is None or m.end is None:
                    continue
                # detector end offsets are inclusive
                candidates.append(_Span(m.start, m.end + 1, pb.kind, pb.policy))

        candidates.sort(key=lambda s: s.start, reverse=True)

        seen: set[str] = set()
        plan: list[_Span] = []
        for span in candidates:
            key = f"{span.start}-{span.end}"
            if key in seen:
                continue
            seen.add(key)
            plan.append(span)
        return plan

    def apply(self, content: str, plan: list[_Span]) -> str:
        result = content
        for span in plan:
            result = result[:span.start] + self.config.marker + result[span.end:]
        return result

    def redact_json_tokens(self, body: str, redactions: Sequence[Redaction]) -> str:
        """Replace every JSON scalar that a redacted span touches.

        Used when splicing the marker into serialized JSON broke its syntax:
        each overlapped string, number or literal becomes the marker as a
        JSON string, so ``body`` stays parseable.  Offsets refer to ``body``.
        """
        spans = [(r.start, r.end) for r in redactions]
        hits = [
            m for m in _JSON_SCALAR.finditer(body)
            if any(m.start() < end and m.end() > start for start, end in spans)
        ]
        quoted = json.dumps(self.config.marker, ensure_ascii=False)
        result = body
        for m in reversed(hits):
            result = result[:m.start()] + quoted + result[m.end():]
        return result
