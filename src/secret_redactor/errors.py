"""Exception hierarchy.

Chunking errors are structural and abort a single scan call.  Detector
errors are operational; the pipeline absorbs them and hands back the
content unscanned.
"""

from __future__ import annotations


class SecretRedactorError(Exception):
    """Base class for all errors raised by this package."""


# ── Structural ───────────────────────────────────────────────────────

class ChunkingError(SecretRedactorError):
    """Content could not be turned into scannable documents."""


class UnsupportedRoot(ChunkingError):
    def __init__(self, type_name: str) -> None:
        super().__init__(
            f"Unsupported JSON root type {type_name!r}. Must be an object or array."
        )
        self.type_name = type_name


class UnsupportedChunkContent(ChunkingError):
    def __init__(self, type_name: str) -> None:
        super().__init__(f"Unsupported chunk content {type_name!r}")
        self.type_name = type_name


class TooManyChunks(ChunkingError):
    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"Content would need {count} chunks (>{limit}); aborting.")
        self.count = count
        self.limit = limit


# ── Operational ──────────────────────────────────────────────────────

class DetectorError(SecretRedactorError):
    """The external detector could not produce a verdict."""


class DetectorUnavailable(DetectorError):
    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Detector API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class DetectorTransportError(DetectorError):
    pass


class MissingCredential(DetectorError):
    pass
