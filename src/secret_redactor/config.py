"""YAML/dict config loader for secret-redactor.

Supports loading from a YAML file or a plain dict (for embedding in a
larger gateway config).

Example YAML:

    secret_redactor:
      enabled: true
      redact: true                  # false = report policy breaks only
      endpoint: https://api.gitguardian.com/v1/multiscan
      api_key_env: GITGUARDIAN_API_KEY
      credential_ttl: 300           # seconds to cache the key
      timeout: 30
      max_document_bytes: 1048576
      max_documents: 20
      marker: REDACTED
"""

from __future__ import annotations
from pathlib import Path
from typing import Any

import yaml

from .chunker import DEFAULT_MAX_BYTES
from .credentials import DEFAULT_ENV_VAR, CachedCredential, CredentialProvider, EnvCredential
from .detector import DEFAULT_TIMEOUT, MULTISCAN_URL, DetectorClient
from .documents import DEFAULT_MAX_DOCUMENTS
from .middleware import ScanMiddleware
from .pipeline import DEFAULT_NAME, Pipeline, PipelineConfig
from .redactor import DEFAULT_MARKER, Redactor, RedactorConfig
from .types import ScanOutcome


class _NoopPipeline:
    """Pass-through pipeline when scanning is disabled."""
    def process(self, content: str, name: str = DEFAULT_NAME, *, redact: bool | None = None) -> ScanOutcome:
        return ScanOutcome(content=content)
    async def aprocess(self, content: str, name: str = DEFAULT_NAME, *, redact: bool | None = None) -> ScanOutcome:
        return ScanOutcome(content=content)


def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    data = data or {}
    # Support nested under "secret_redactor" key or flat
    if "secret_redactor" in data:
        data = data["secret_redactor"] or {}

    return {
        "enabled": data.get("enabled", True),
        "redact": data.get("redact", True),
        "endpoint": data.get("endpoint", MULTISCAN_URL),
        "api_key_env": data.get("api_key_env", DEFAULT_ENV_VAR),
        "credential_ttl": float(data.get("credential_ttl", 300)),
        "timeout": float(data.get("timeout", DEFAULT_TIMEOUT)),
        "max_document_bytes": int(data.get("max_document_bytes", DEFAULT_MAX_BYTES)),
        "max_documents": int(data.get("max_documents", DEFAULT_MAX_DOCUMENTS)),
        "marker": data.get("marker", DEFAULT_MARKER),
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    with open(path) as f:
        return load_config(yaml.safe_load(f))


def create_pipeline(
    config: dict[str, Any],
    credentials: CredentialProvider | None = None,
    **client_kwargs: Any,
) -> Pipeline | _NoopPipeline:
    """Create a fully configured pipeline from a config dict.

    ``credentials`` overrides the environment-variable lookup; extra keyword
    arguments go to DetectorClient (e.g. ``transport`` in tests).
    """
    cfg = load_config(config)

    if not cfg["enabled"]:
        return _NoopPipeline()

    if credentials is None:
        credentials = CachedCredential(EnvCredential(cfg["api_key_env"]), ttl=cfg["credential_ttl"])

    return Pipeline(
        credentials,
        PipelineConfig(
            max_document_bytes=cfg["max_document_bytes"],
            max_documents=cfg["max_documents"],
            redact=cfg["redact"],
        ),
        client=DetectorClient(cfg["endpoint"], timeout=cfg["timeout"], **client_kwargs),
        redactor=Redactor(RedactorConfig(marker=cfg["marker"])),
    )


def create_middleware(
    config: dict[str, Any],
    credentials: CredentialProvider | None = None,
    **client_kwargs: Any,
) -> ScanMiddleware:
    """Create a middleware around ``create_pipeline(config)``."""
    return ScanMiddleware(pipeline=create_pipeline(config, credentials, **client_kwargs))
