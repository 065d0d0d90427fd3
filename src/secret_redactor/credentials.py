"""Credential providers for the detector API key.

A provider is any zero-argument callable that returns the key.  The
pipeline resolves it per call, so nothing is cached at module level:

    pipeline = Pipeline(EnvCredential())
    pipeline = Pipeline(CachedCredential(fetch_from_parameter_store, ttl=600))
"""

from __future__ import annotations
import os
import threading
import time
from typing import Callable

from .errors import MissingCredential

CredentialProvider = Callable[[], str]

DEFAULT_ENV_VAR = "GITGUARDIAN_API_KEY"


def resolve(provider: CredentialProvider) -> str:
    """Call the provider, rejecting empty keys.

    Any failure inside the provider surfaces as MissingCredential so that a
    broken key store degrades the scan like any other detector error.
    """
    try:
        key = provider()
    except MissingCredential:
        raise
    except Exception as e:
        raise MissingCredential(f"Credential lookup failed: {e}") from e
    if not key:
        raise MissingCredential("Detector API key is required")
    return key


class StaticCredential:
    """A fixed key (tests, CLI flags)."""

    __slots__ = ("_value",)

    def __init__(self, value: str) -> None:
        self._value = value

    def __call__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return "StaticCredential(***)"


class EnvCredential:
    """Read the key from an environment variable on every call."""

    __slots__ = ("var",)

    def __init__(self, var: str = DEFAULT_ENV_VAR) -> None:
        self.var = var

    def __call__(self) -> str:
        value = os.environ.get(self.var, "")
        if not value:
            raise MissingCredential(f"Environment variable {self.var} is not set")
        return value


class CachedCredential:
    """Wrap a slow fetch (parameter store, secrets manager) with a TTL cache.

    Safe to share between threads; concurrent callers block only while a
    refresh is in flight.
    """

    __slots__ = ("_fetch", "_ttl", "_value", "_expires", "_lock")

    def __init__(self, fetch: CredentialProvider, ttl: float = 300.0) -> None:
        self._fetch = fetch
        self._ttl = ttl
        self._value: str | None = None
        self._expires = 0.0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        now = time.monotonic()
        value = self._value
        if value is not None and now < self._expires:
            return value
        with self._lock:
            if self._value is None or time.monotonic() >= self._expires:
                self._value = self._fetch()
                self._expires = time.monotonic() + self._ttl
            return self._value

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._expires = 0.0
