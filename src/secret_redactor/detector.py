"""Scan orchestrator — one batch call to the secret detector per content.

The detector is GitGuardian's multiscan endpoint by default: it accepts a
JSON array of ``{"filename", "document"}`` objects and answers with one
scan result per document, in order.

    client = DetectorClient()
    results = client.scan(documents, EnvCredential())
    merged = aggregate(results)

Failures are raised, never retried here:
  - DetectorUnavailable      non-2xx status (response body kept as context)
  - DetectorTransportError   connection failure, timeout, malformed reply
"""

from __future__ import annotations
import asyncio
import logging
from typing import Any, Sequence

import httpx

from .credentials import CredentialProvider, resolve
from .errors import DetectorTransportError, DetectorUnavailable
from .types import Document, ScanResult

logger = logging.getLogger(__name__)

MULTISCAN_URL = "https://api.gitguardian.com/v1/multiscan"
DEFAULT_TIMEOUT = 30.0


class DetectorClient:
    """Thin httpx wrapper around the detector's batch endpoint.

    Holds configuration only; a fresh connection is used per call so one
    instance can be shared across threads and event loops.
    """

    def __init__(
        self,
        endpoint: str = MULTISCAN_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport

    def scan(
        self, documents: Sequence[Document], credentials: CredentialProvider
    ) -> list[ScanResult]:
        """Scan a batch of documents synchronously."""
        headers = self._headers(credentials)
        payload = [d.to_api() for d in documents]
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(self.endpoint, json=payload, headers=headers)
        except httpx.TransportError as e:
            raise DetectorTransportError(f"Detector request failed: {e!r}") from e
        return self._parse(resp, len(documents))

    async def ascan(
        self, documents: Sequence[Document], credentials: CredentialProvider
    ) -> list[ScanResult]:
        """Scan a batch of documents without blocking the event loop."""
        # providers may do blocking I/O (parameter store)
        headers = await asyncio.to_thread(self._headers, credentials)
        payload = [d.to_api() for d in documents]
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.TransportError as e:
            raise DetectorTransportError(f"Detector request failed: {e!r}") from e
        return self._parse(resp, len(documents))

    # ------------------------------------------------------------------

    @staticmethod
    def _headers(credentials: CredentialProvider) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {resolve(credentials)}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _parse(resp: httpx.Response, expected: int) -> list[ScanResult]:
        if not resp.is_success:
            body = resp.text or resp.reason_phrase
            logger.warning("Detector returned HTTP %d", resp.status_code)
            raise DetectorUnavailable(resp.status_code, body)

        try:
            data: Any = resp.json()
        except ValueError as e:
            raise DetectorTransportError("Detector returned a non-JSON body") from e

        if not isinstance(data, list) or len(data) != expected:
            raise DetectorTransportError(
                f"Detector returned {type(data).__name__} "
                f"for a batch of {expected} documents"
            )
        try:
            return [ScanResult.from_api(item) for item in data]
        except (AttributeError, TypeError, ValueError) as e:
            raise DetectorTransportError(f"Detector returned a malformed result: {e}") from e


def aggregate(results: Sequence[ScanResult]) -> ScanResult:
    """Flatten all documents' policy breaks into one result.

    No deduplication: overlapping spans are the redactor's concern.
    """
    if len(results) == 1:
        return results[0]
    breaks = tuple(b for r in results for b in r.policy_breaks)
    policies = tuple(dict.fromkeys(p for r in results for p in r.policies))
    return ScanResult(
        policy_breaks=breaks,
        policy_break_count=len(breaks),
        policies=policies,
    )
