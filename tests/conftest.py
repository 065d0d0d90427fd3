"""Shared fixtures: a fake detector served through httpx.MockTransport."""

import json
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import httpx
import pytest

from secret_redactor import DetectorClient, Pipeline, PipelineConfig, StaticCredential

GITHUB_TOKEN = "ghp_" + "X" * 36


def flagging_handler(secrets, calls=None, break_type="GitHub Token"):
    """Detector stand-in that flags every listed secret it finds."""
    def handler(request: httpx.Request) -> httpx.Response:
        docs = json.loads(request.content)
        if calls is not None:
            calls.append({"headers": dict(request.headers), "documents": docs})
        results = []
        for doc in docs:
            breaks = []
            for secret in secrets:
                i = doc["document"].find(secret)
                if i == -1:
                    continue
                breaks.append({
                    "policy": "Secrets detection",
                    "type": break_type,
                    "validity": "valid",
                    "matches": [{
                        "type": "apikey",
                        "match": secret,
                        "index_start": i,
                        "index_end": i + len(secret) - 1,
                    }],
                })
            results.append({
                "policy_break_count": len(breaks),
                "policies": ["Secrets detection"],
                "policy_breaks": breaks,
            })
        return httpx.Response(200, json=results)
    return handler


@pytest.fixture()
def detector_calls():
    return []


@pytest.fixture()
def make_pipeline(detector_calls):
    """Build a Pipeline whose detector flags ``secrets`` (or uses ``handler``)."""
    def factory(secrets=(GITHUB_TOKEN,), handler=None, **config):
        transport = httpx.MockTransport(handler or flagging_handler(secrets, detector_calls))
        return Pipeline(
            StaticCredential("test-key"),
            PipelineConfig(**config),
            client=DetectorClient(transport=transport),
        )
    return factory
