"""Pipeline — build documents, scan them, redact the content.

    pipeline = Pipeline(EnvCredential())
    outcome = pipeline.process(message_text, "chat.txt")
    outcome.content        # safe to forward
    outcome.redactions     # audit trail
    outcome.error          # set when the scan could not run

A scan that cannot run (detector down, content too large, oversized
non-JSON text) never raises from here: the outcome carries the original
content and an error message instead, so the surrounding request goes on
with unscanned content rather than failing.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Any, Iterator, Sequence

from .chunker import DEFAULT_MAX_BYTES, dumps, merge
from .credentials import CredentialProvider
from .detector import DetectorClient, aggregate
from .documents import DEFAULT_MAX_DOCUMENTS, build_documents
from .errors import ChunkingError, DetectorError
from .redactor import Redactor
from .types import Chunk, Document, RedactedContent, Redaction, ScanOutcome, ScanResult

logger = logging.getLogger(__name__)

DEFAULT_NAME = "document.txt"

# Errors that degrade the outcome to "unscanned" instead of propagating.
_ABSORBED = (ChunkingError, DetectorError, json.JSONDecodeError)


@dataclass
class PipelineConfig:
    """Limits and defaults for one Pipeline."""
    max_document_bytes: int = DEFAULT_MAX_BYTES
    max_documents: int = DEFAULT_MAX_DOCUMENTS
    redact: bool = True               # False = report only, leave content as-is


class Pipeline:
    """Scan-and-redact coordinator.  Stateless; safe to share."""

    def __init__(
        self,
        credentials: CredentialProvider,
        config: PipelineConfig | None = None,
        *,
        client: DetectorClient | None = None,
        redactor: Redactor | None = None,
    ) -> None:
        self.credentials = credentials
        self.config = config or PipelineConfig()
        self.client = client or DetectorClient()
        self.redactor = redactor or Redactor()

    def process(
        self, content: str, name: str = DEFAULT_NAME, *, redact: bool | None = None
    ) -> ScanOutcome:
        try:
            documents = self._build(content, name)
            results = self.client.scan(documents, self.credentials)
        except _ABSORBED as e:
            return _degraded(content, name, e)
        return self._finish(content, name, documents, results, redact)

    async def aprocess(
        self, content: str, name: str = DEFAULT_NAME, *, redact: bool | None = None
    ) -> ScanOutcome:
        try:
            documents = self._build(content, name)
            results = await self.client.ascan(documents, self.credentials)
        except _ABSORBED as e:
            return _degraded(content, name, e)
        return self._finish(content, name, documents, results, redact)

    # ------------------------------------------------------------------

    def _build(self, content: str, name: str) -> list[Document]:
        return build_documents(
            content,
            name,
            max_bytes=self.config.max_document_bytes,
            max_docs=self.config.max_documents,
        )

    def _finish(
        self,
        content: str,
        name: str,
        documents: Sequence[Document],
        results: Sequence[ScanResult],
        redact: bool | None,
    ) -> ScanOutcome:
        scan_result = aggregate(results)
        _log_policy_breaks(name, scan_result)

        if not (self.config.redact if redact is None else redact):
            return ScanOutcome(content=content, scan_result=scan_result)

        if len(documents) == 1 and documents[0].chunk_index is None:
            redacted = self.redactor.redact(content, scan_result)
        else:
            redacted = self._redact_chunked(content, documents, results)

        if redacted.redactions:
            logger.info(
                "Redacted %d span(s) from %s", len(redacted.redactions), name
            )
        return ScanOutcome(
            content=redacted.content,
            redactions=redacted.redactions,
            scan_result=scan_result,
        )

    def _redact_chunked(
        self,
        content: str,
        documents: Sequence[Document],
        results: Sequence[ScanResult],
    ) -> RedactedContent:
        """Redact each chunk in its own offsets, then rebuild the JSON."""
        if not any(r.policy_breaks for r in results):
            return RedactedContent(content=content)

        chunks: list[Chunk] = []
        redactions: list[Redaction] = []
        for doc, result in zip(documents, results):
            part = self.redactor.redact(doc.body, result, document=doc.name)
            body = part.content
            if part.redactions and not _parses(body):
                # A span crossed JSON syntax; blank the whole values it touches.
                logger.warning("Redacted %s no longer parses; redacting whole values", doc.name)
                body = self.redactor.redact_json_tokens(doc.body, part.redactions)
            chunks.append(Chunk(index=doc.chunk_index or 0, total=len(documents), body=body))
            redactions.extend(part.redactions)

        value = merge(chunks)
        strings = list(_strings(value))
        leftovers = {t for t in _flagged_text(redactions) if any(t in s for s in strings)}
        if leftovers:
            logger.warning("Flagged text survived chunk redaction; scrubbing %d value(s)", len(leftovers))
            value = _scrub(value, leftovers, self.redactor.config.marker)
        return RedactedContent(content=dumps(value), redactions=redactions)


def _parses(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def _flagged_text(redactions: Sequence[Redaction]) -> set[str]:
    """Flagged spans with surrounding JSON punctuation trimmed off."""
    return {t for t in (r.original.strip(' \t\r\n"{}[],:') for r in redactions) if t}


def _strings(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for k, v in value.items():
            yield k
            yield from _strings(v)
    elif isinstance(value, list):
        for v in value:
            yield from _strings(v)


def _scrub(value: Any, texts: set[str], marker: str) -> Any:
    """Replace every occurrence of ``texts`` inside string keys and values."""
    if isinstance(value, str):
        for t in sorted(texts, key=len, reverse=True):
            value = value.replace(t, marker)
        return value
    if isinstance(value, dict):
        return {_scrub(k, texts, marker): _scrub(v, texts, marker) for k, v in value.items()}
    if isinstance(value, list):
        return [_scrub(v, texts, marker) for v in value]
    return value


def _degraded(content: str, name: str, error: Exception) -> ScanOutcome:
    logger.warning("Scan of %s failed, passing content through unscanned: %s", name, error)
    return ScanOutcome(content=content, error=str(error))


def _log_policy_breaks(name: str, scan_result: ScanResult) -> None:
    for pb in scan_result.policy_breaks:
        logger.info(
            "Policy break in %s: %s (%s, %d match(es))",
            name, pb.policy, pb.kind, len(pb.matches),
            extra={"security_event": {
                "type": "sensitive_data_detected",
                "document": name,
                "policy": pb.policy,
                "break_type": pb.kind,
                "matches": len(pb.matches),
                "validity": pb.validity,
            }},
        )
