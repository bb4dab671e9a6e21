from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from quote_segmenter.config import get_settings
from quote_segmenter.services.body_segmenter import segment_body
from quote_segmenter.services.logging_config import configure_logging

logger = logging.getLogger(__name__)

EXIT_QUOTE_FOUND = 0
EXIT_NO_QUOTE = 1
EXIT_UNREADABLE = 2


def _read_body(path: str | None) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _looks_like_html(body: str) -> bool:
    return "<" in body and ">" in body and "</" in body


def _run(body: str, body_format: str) -> tuple[int, dict]:
    is_html = _looks_like_html(body) if body_format == "auto" else body_format == "html"
    segments = segment_body(body_html=body if is_html else None, body_text=None if is_html else body)
    payload = asdict(segments)
    payload["has_quote"] = segments.has_quote

    if segments.has_quote:
        return EXIT_QUOTE_FOUND, payload
    return EXIT_NO_QUOTE, payload


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Split an email body into authored and quoted content.")
    parser.add_argument("path", nargs="?", default="-", help="File holding the message body; '-' reads stdin.")
    parser.add_argument(
        "--format",
        dest="body_format",
        choices=["auto", "html", "text"],
        default="auto",
        help="Body representation; auto treats bodies containing closing tags as HTML.",
    )
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL from the environment.")
    args = parser.parse_args(argv)

    configure_logging(args.log_level or get_settings().log_level)

    try:
        body = _read_body(args.path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Unable to read message body", extra={"event": "body_read_failed", "path": args.path})
        print(f"error: cannot read {args.path}: {exc}", file=sys.stderr)
        return EXIT_UNREADABLE

    code, payload = _run(body, args.body_format)
    print(json.dumps(payload, indent=2, sort_keys=True))
    return code


if __name__ == "__main__":
    raise SystemExit(main())
