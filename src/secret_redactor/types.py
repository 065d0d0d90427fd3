"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Document:
    """A named unit of text submitted to the detector."""
    name: str
    body: str
    chunk_index: int | None = None      # set when built from a JSON chunk

    def to_api(self) -> dict[str, str]:
        return {"filename": self.name, "document": self.body}


@dataclass(frozen=True, slots=True)
class Chunk:
    """A structure-preserving fragment of a larger JSON value."""
    index: int
    total: int
    body: str


@dataclass(frozen=True, slots=True)
class Match:
    """A single span flagged by the detector.

    ``end`` is inclusive, as the detector reports it.
    """
    start: int | None
    end: int | None
    kind: str = ""
    policy: str = ""
    snippet: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any], *, policy: str = "") -> "Match":
        start = data.get("index_start")
        if start is None:
            start = data.get("start")
        end = data.get("index_end")
        if end is None:
            end = data.get("end")
        return cls(
            start=_offset(start),
            end=_offset(end),
            kind=data.get("type", ""),
            policy=policy,
            snippet=data.get("match", ""),
        )


def _offset(value: Any) -> int | None:
    """Non-negative integer offsets only; anything else is treated as absent."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


@dataclass(frozen=True, slots=True)
class PolicyBreak:
    """One detection rule's verdict on a document."""
    policy: str
    kind: str                            # detector's break "type", e.g. "GitHub Token"
    matches: tuple[Match, ...] = ()
    validity: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "PolicyBreak":
        policy = data.get("policy", "")
        return cls(
            policy=policy,
            kind=data.get("type", ""),
            matches=tuple(Match.from_api(m, policy=policy) for m in data.get("matches") or []),
            validity=data.get("validity"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "policy": self.policy,
            "type": self.kind,
            "matches": [
                {
                    "type": m.kind,
                    "match": m.snippet,
                    "index_start": m.start,
                    "index_end": m.end,
                }
                for m in self.matches
            ],
        }
        if self.validity is not None:
            out["validity"] = self.validity
        return out


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Detector verdict for one document (or the aggregate of several)."""
    policy_breaks: tuple[PolicyBreak, ...] = ()
    policy_break_count: int | None = None
    policies: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> "ScanResult":
        data = data or {}
        return cls(
            policy_breaks=tuple(PolicyBreak.from_api(b) for b in data.get("policy_breaks") or []),
            policy_break_count=data.get("policy_break_count"),
            policies=tuple(data.get("policies") or ()),
        )

    @property
    def has_policy_breaks(self) -> bool:
        return bool(self.policy_breaks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "policy_break_count": len(self.policy_breaks),
            "policies": list(self.policies),
            "policy_breaks": [b.to_dict() for b in self.policy_breaks],
        }


@dataclass(frozen=True, slots=True)
class Redaction:
    """One applied replacement, kept for the audit trail."""
    kind: str
    policy: str
    start: int
    end: int                             # exclusive
    original: str
    document: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.kind,
            "policy": self.policy,
            "start": self.start,
            "end": self.end,
            "original": self.original,
        }
        if self.document is not None:
            out["document"] = self.document
        return out


@dataclass(slots=True)
class RedactedContent:
    """Result of redacting one piece of content."""
    content: str
    redactions: list[Redaction] = field(default_factory=list)


@dataclass(slots=True)
class ScanOutcome:
    """Terminal result of the pipeline for one piece of content."""
    content: str
    redactions: list[Redaction] = field(default_factory=list)
    scan_result: ScanResult | None = None
    error: str | None = None

    @property
    def scanned(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "content": self.content,
            "redactions": [r.to_dict() for r in self.redactions],
        }
        if self.scan_result is not None:
            out["scan_result"] = self.scan_result.to_dict()
        if self.error is not None:
            out["error"] = self.error
        return out
