"""Count tokens from the command line against a running gateway."""
from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from pathlib import Path

import httpx

from claude_tokenizer.client.controller import TokenizerInput
from claude_tokenizer.client.metrics import render_metrics
from claude_tokenizer.common.config import ClientSettings
from claude_tokenizer.common.logging_setup import setup_logging

LOGGER = logging.getLogger("tokenizer.client.cli")


async def run(
    settings: ClientSettings,
    text: str | None = None,
    file: str | None = None,
    model: str | None = None,
    http: httpx.AsyncClient | None = None,
) -> TokenizerInput:
    """
    Count a text or a file and return the controller holding the result.

    Args:
        settings: Client settings (gateway URL, overhead correction).
        text: Text to count; ignored when `file` is given.
        file: Path of a file to upload.
        model: Model id from the catalog; defaults to the first entry.
        http: HTTP client to use instead of a new one.
    """
    ctrl = TokenizerInput(settings, http=http)
    try:
        if model:
            ctrl.select_model(model)
        if file:
            path = Path(file)
            if not path.exists():
                raise FileNotFoundError(f"File not found at {path}")
            kind = ctrl.select_file(path.name, path.read_bytes())
            LOGGER.info("Submitting %s as %s", path.name, kind.value)
            await ctrl.submit_file()
        else:
            await ctrl.analyze_text(text or "")
        await ctrl.settle()
    finally:
        await ctrl.aclose()
    return ctrl


def main() -> None:
    setup_logging(logging.WARNING, stream=sys.stderr)
    settings = ClientSettings.from_env()
    ap = argparse.ArgumentParser(description="Count Claude tokens for text or a file")
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--text", help="Text to count ('-' reads stdin)")
    src.add_argument("--file", help="Path to an image, PDF or text file")
    ap.add_argument("--model", default=None, choices=[m.id for m in settings.models], help="Model id")
    ap.add_argument("--url", default=None, help="Gateway URL, e.g. http://localhost:8000/api")
    args = ap.parse_args()

    if args.url:
        settings.api_url = args.url
    text = sys.stdin.read() if args.text == "-" else args.text

    ctrl = asyncio.run(run(settings, text=text, file=args.file, model=args.model))
    print(render_metrics(ctrl.metrics()))
    if ctrl.error:
        print(ctrl.error, file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":
    main()
