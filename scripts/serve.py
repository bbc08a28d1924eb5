from __future__ import annotations

"""Run the connector HTTP app under uvicorn.

Usage:
  python -m scripts.serve [--host 0.0.0.0] [--port 8080] [--reload]

Host and port default to APP_HOST / APP_PORT. Auto-loads `.env` from the
project root (or parent dirs) using python-dotenv.
"""

import argparse

import uvicorn
from dotenv import find_dotenv, load_dotenv

from app.config.settings import Settings, get_settings


def build_parser(settings: Settings):
    p = argparse.ArgumentParser(description="Serve the Gladia connector")
    p.add_argument("--host", type=str, default=settings.app_host, help="Bind address")
    p.add_argument("--port", type=int, default=settings.app_port, help="Bind port")
    p.add_argument("--reload", action="store_true", help="Reload on code changes (dev)")
    return p


def main(argv: list[str] | None = None) -> None:
    load_dotenv(find_dotenv(), override=False)
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)
    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
