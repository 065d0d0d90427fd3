"""Secret Redactor — scan content with a secret detector and redact what it finds."""

from .chunker import merge, split
from .config import create_middleware, create_pipeline, load_config, load_from_yaml
from .credentials import CachedCredential, EnvCredential, StaticCredential
from .detector import DetectorClient, aggregate
from .documents import build_documents
from .errors import (
    ChunkingError, DetectorError, DetectorTransportError, DetectorUnavailable,
    MissingCredential, SecretRedactorError, TooManyChunks,
    UnsupportedChunkContent, UnsupportedRoot,
)
from .middleware import ScanMiddleware
from .pipeline import Pipeline, PipelineConfig
from .redactor import Redactor, RedactorConfig
from .types import (
    Chunk, Document, Match, PolicyBreak, RedactedContent, Redaction,
    ScanOutcome, ScanResult,
)

__all__ = [
    "split", "merge", "build_documents",
    "DetectorClient", "aggregate",
    "Redactor", "RedactorConfig",
    "Pipeline", "PipelineConfig",
    "ScanMiddleware",
    "StaticCredential", "EnvCredential", "CachedCredential",
    "create_pipeline", "create_middleware", "load_config", "load_from_yaml",
    "Chunk", "Document", "Match", "PolicyBreak", "ScanResult",
    "Redaction", "RedactedContent", "ScanOutcome",
    "SecretRedactorError", "ChunkingError", "UnsupportedRoot",
    "UnsupportedChunkContent", "TooManyChunks", "DetectorError",
    "DetectorUnavailable", "DetectorTransportError", "MissingCredential",
]
__version__ = "0.1.0"
