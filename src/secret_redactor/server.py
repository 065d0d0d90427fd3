"""HTTP sidecar server for secret-redactor.

Runs as a lightweight stdlib HTTP server on localhost.  A gateway calls
this over HTTP instead of embedding the pipeline.

Endpoints:
    POST /scan            — Scan/redact one piece of content
    POST /scan-messages   — Scan/redact an OpenAI message array
    GET  /health          — Health check

Bodies:
    /scan           {"content": "...", "name": "chat.txt", "redact": true}
    /scan-messages  {"messages": [...]}

All endpoints expect/return JSON.
"""

from __future__ import annotations
import json
import logging
import os
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from .config import create_pipeline, load_config, load_from_yaml
from .middleware import ScanMiddleware
from .pipeline import DEFAULT_NAME, Pipeline

logger = logging.getLogger(__name__)

DEFAULT_PORT = int(os.environ.get("SECRET_REDACTOR_PORT", "18792"))


class SidecarServer(ThreadingHTTPServer):
    """HTTP server that owns the pipeline and middleware its handlers share."""

    daemon_threads = True

    def __init__(self, address: tuple[str, int], pipeline: Pipeline) -> None:
        super().__init__(address, ScanHandler)
        self.pipeline = pipeline
        self.middleware = ScanMiddleware(pipeline)


class ScanHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the secret-redactor sidecar."""

    server: SidecarServer

    def _read_json(self) -> Any:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length).decode("utf-8")
        return json.loads(body) if body else {}

    def _respond(self, status: int, data: Any) -> None:
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - " + format, self.address_string(), *args)

    def do_GET(self) -> None:
        if self.path == "/health":
            self._respond(200, {"status": "ok"})
        else:
            self._respond(404, {"error": "not found"})

    def do_POST(self) -> None:
        try:
            body = self._read_json()
        except ValueError as e:
            self._respond(400, {"error": f"invalid JSON body: {e}"})
            return
        if not isinstance(body, dict):
            self._respond(400, {"error": "body must be a JSON object"})
            return

        try:
            pipeline = self.server.pipeline

            if self.path == "/scan":
                content = body.get("content")
                if not isinstance(content, str):
                    self._respond(400, {"error": "'content' must be a string"})
                    return
                outcome = pipeline.process(
                    content, body.get("name") or DEFAULT_NAME, redact=body.get("redact")
                )
                self._respond(200, outcome.to_dict())

            elif self.path == "/scan-messages":
                messages = body.get("messages")
                if not isinstance(messages, list):
                    self._respond(400, {"error": "'messages' must be an array"})
                    return
                redacted, outcomes = self.server.middleware.scan_messages(messages)
                self._respond(200, {
                    "messages": redacted,
                    "redactions": [
                        r.to_dict() for o in outcomes for r in o.redactions
                    ],
                    "errors": [o.error for o in outcomes if o.error],
                })

            else:
                self._respond(404, {"error": "not found"})

        except Exception as e:
            logger.exception("Unhandled error serving %s", self.path)
            self._respond(500, {"error": str(e)})


def serve(port: int = DEFAULT_PORT, config_path: str = "") -> None:
    """Start the secret-redactor HTTP sidecar."""
    config = load_from_yaml(config_path) if config_path else load_config({})
    server = SidecarServer(("127.0.0.1", port), create_pipeline(config))
    print(f"secret-redactor sidecar listening on http://127.0.0.1:{port}")
    print(f"  detector: {config['endpoint']}")
    print(f"  redact: {'enabled' if config['redact'] else 'report only'}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down...")
        server.shutdown()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="secret-redactor HTTP sidecar")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--config", default=os.environ.get("SECRET_REDACTOR_CONFIG", ""))
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper())
    serve(port=args.port, config_path=args.config)
