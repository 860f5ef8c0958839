"""CLI entrypoint to run the LedgerLab FastAPI server."""

from __future__ import annotations

import argparse
import logging

import uvicorn

from ledgerlab.config import get_settings


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Serve the FanDuel bet parser over HTTP.")
    parser.add_argument("--host", default=settings.api_host)
    parser.add_argument("--port", type=int, default=settings.api_port)
    parser.add_argument("--reload", action="store_true", help="Restart on source changes (development only)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper())
    uvicorn.run(
        "ledgerlab.api.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":  # pragma: no cover
    main()
