"""Launch the token counting gateway with uvicorn."""
from __future__ import annotations
import argparse
import logging
import os
import sys

import uvicorn

from claude_tokenizer.common.config import Settings
from claude_tokenizer.common.exceptions import StartupConfigurationError
from claude_tokenizer.common.logging_setup import setup_logging

LOGGER = logging.getLogger("tokenizer.gateway.serve")


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Serve the token counting API")
    ap.add_argument("--host", default=os.getenv("TOKENIZER_HOST", "127.0.0.1"))
    ap.add_argument("--port", type=int, default=int(os.getenv("TOKENIZER_PORT", "8000")))
    ap.add_argument("--config", default=None, help="YAML config path")
    args = ap.parse_args(argv)

    if args.config:
        os.environ["TOKENIZER_CONFIG"] = args.config
    try:
        settings = Settings.from_env()
        settings.validate()
    except StartupConfigurationError as e:
        setup_logging()
        LOGGER.error("Refusing to start: %s", e.message)
        sys.exit(1)
    setup_logging(settings.log_level)

    uvicorn.run(
        "claude_tokenizer.gateway.fastapi_app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_config=None,
    )

if __name__ == "__main__":
    main()
