"""CLI interface for secret-redactor — designed to be called by a gateway or
by hand when preparing files.

Usage:
    # Scan and redact text (stdin: raw content, stdout: outcome JSON)
    echo 'token ghp_...' | python -m secret_redactor.cli scan --name chat.txt

    # Scan and redact OpenAI messages (stdin/stdout: JSON message array)
    echo '[{"role":"user","content":"key: ghp_..."}]' | \
        python -m secret_redactor.cli scan-messages

    # Split a large JSON file into detector-sized chunks and put it back
    python -m secret_redactor.cli split big.json --out-dir parts/
    python -m secret_redactor.cli reconstruct big.out.json parts/big.chunk*.json

The detector key is read from $GITGUARDIAN_API_KEY unless the config file
names another variable.
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from .chunker import DEFAULT_MAX_BYTES, merge, split
from .config import create_middleware, create_pipeline, load_config, load_from_yaml
from .types import Chunk

DEFAULT_CONFIG = os.environ.get("SECRET_REDACTOR_CONFIG", "")


def _load(args: argparse.Namespace) -> dict[str, Any]:
    if args.config:
        return load_from_yaml(args.config)
    return load_config({})


def cmd_split(args: argparse.Namespace) -> None:
    """Write <base>.chunk{i}.json files for a JSON input."""
    src = Path(args.input)
    out_dir = Path(args.out_dir) if args.out_dir else src.parent
    out_dir.mkdir(parents=True, exist_ok=True)

    chunks = split(src.read_text(encoding="utf-8"), args.max_bytes)
    for chunk in chunks:
        out = out_dir / f"{src.stem}.chunk{chunk.index}.json"
        out.write_text(chunk.body, encoding="utf-8")
        sys.stderr.write(f"wrote {out}\n")
    sys.stderr.write(f"Split complete: {len(chunks)} chunk(s) in {out_dir}\n")


def cmd_reconstruct(args: argparse.Namespace) -> None:
    """Merge chunk files, in the order given, into one JSON file."""
    chunks = [
        Chunk(index=i, total=len(args.chunks), body=Path(p).read_text(encoding="utf-8"))
        for i, p in enumerate(args.chunks)
    ]
    combined = merge(chunks)
    Path(args.output).write_text(
        json.dumps(combined, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    sys.stderr.write(f"Reconstruction complete: wrote {args.output}\n")


def cmd_scan(args: argparse.Namespace) -> None:
    """Scan (and by default redact) content from stdin."""
    pipeline = create_pipeline(_load(args))
    content = sys.stdin.read()
    outcome = pipeline.process(content, args.name, redact=False if args.no_redact else None)
    json.dump(outcome.to_dict(), sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_scan_messages(args: argparse.Namespace) -> None:
    """Redact secrets from OpenAI-format messages on stdin."""
    mw = create_middleware(_load(args))
    messages = json.loads(sys.stdin.read())
    redacted = mw.pre_send(messages)
    json.dump(redacted, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="secret_redactor",
        description="Secret scanning and redaction for LLM pipelines",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML config path")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("split", help="Split a JSON file into chunks")
    p.add_argument("input")
    p.add_argument("--out-dir", default="", help="Output directory (default: input's)")
    p.add_argument("--max-bytes", type=int, default=DEFAULT_MAX_BYTES, help="Chunk size limit")

    p = sub.add_parser("reconstruct", help="Merge chunk files back into one JSON file")
    p.add_argument("output")
    p.add_argument("chunks", nargs="+")

    p = sub.add_parser("scan", help="Scan and redact content (stdin)")
    p.add_argument("--name", default="document.txt", help="Document name sent to the detector")
    p.add_argument("--no-redact", action="store_true", help="Report only, leave content as-is")

    sub.add_parser("scan-messages", help="Scan and redact OpenAI messages (JSON stdin)")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmds = {
        "split": cmd_split,
        "reconstruct": cmd_reconstruct,
        "scan": cmd_scan,
        "scan-messages": cmd_scan_messages,
    }
    cmds[args.command](args)


if __name__ == "__main__":
    main()
