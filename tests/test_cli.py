"""Tests for the command-line interface and the HTTP sidecar."""

import io
import json
import threading

import httpx
import pytest

from secret_redactor import cli
from secret_redactor.server import SidecarServer

TOKEN = "ghp_" + "X" * 36


# ── split / reconstruct ──────────────────────────────────────────────

def test_split_then_reconstruct(tmp_path):
    data = [{"id": i, "pad": "p" * 40} for i in range(20)]
    src = tmp_path / "big.json"
    src.write_text(json.dumps(data))
    parts = tmp_path / "parts"

    cli.main(["split", str(src), "--out-dir", str(parts), "--max-bytes", "200"])

    files = sorted(parts.glob("big.chunk*.json"), key=lambda p: int(p.stem.split("chunk")[1]))
    assert len(files) > 1

    out = tmp_path / "out.json"
    cli.main(["reconstruct", str(out), *map(str, files)])
    assert json.loads(out.read_text()) == data


# ── scan ─────────────────────────────────────────────────────────────

@pytest.fixture()
def fake_pipeline(monkeypatch, make_pipeline):
    pipeline = make_pipeline()
    monkeypatch.setattr(cli, "create_pipeline", lambda config: pipeline)
    return pipeline


def test_scan_prints_outcome(monkeypatch, capsys, fake_pipeline):
    monkeypatch.setattr("sys.stdin", io.StringIO(f"token {TOKEN}"))
    cli.main(["scan", "--name", "chat.txt"])

    out = json.loads(capsys.readouterr().out)
    assert out["content"] == "token REDACTED"
    assert out["redactions"][0]["original"] == TOKEN


def test_scan_no_redact(monkeypatch, capsys, fake_pipeline):
    monkeypatch.setattr("sys.stdin", io.StringIO(f"token {TOKEN}"))
    cli.main(["scan", "--no-redact"])

    out = json.loads(capsys.readouterr().out)
    assert out["content"] == f"token {TOKEN}"
    assert out["scan_result"]["policy_break_count"] == 1


def test_scan_messages(monkeypatch, capsys, make_pipeline):
    from secret_redactor import ScanMiddleware
    monkeypatch.setattr(cli, "create_middleware", lambda config: ScanMiddleware(make_pipeline()))
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps([{"role": "user", "content": TOKEN}])))

    cli.main(["scan-messages"])

    assert json.loads(capsys.readouterr().out) == [{"role": "user", "content": "REDACTED"}]


# ── Sidecar ──────────────────────────────────────────────────────────

@pytest.fixture()
def sidecar(make_pipeline):
    server = SidecarServer(("127.0.0.1", 0), make_pipeline())
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    with httpx.Client(base_url=f"http://{host}:{port}", trust_env=False) as client:
        yield client
    server.shutdown()
    server.server_close()


def test_sidecar_health(sidecar):
    assert sidecar.get("/health").json() == {"status": "ok"}


def test_sidecar_scan(sidecar):
    resp = sidecar.post("/scan", json={"content": f"token {TOKEN}", "name": "chat.txt"})
    assert resp.status_code == 200
    assert resp.json()["content"] == "token REDACTED"


def test_sidecar_scan_messages(sidecar):
    resp = sidecar.post("/scan-messages", json={"messages": [{"role": "user", "content": TOKEN}]})
    body = resp.json()
    assert body["messages"] == [{"role": "user", "content": "REDACTED"}]
    assert len(body["redactions"]) == 1
    assert body["errors"] == []


def test_sidecar_rejects_bad_input(sidecar):
    assert sidecar.post("/scan", content=b"{not json").status_code == 400
    assert sidecar.post("/scan", json={"content": 5}).status_code == 400
    assert sidecar.post("/nope", json={}).status_code == 404
    assert sidecar.get("/nope").status_code == 404
