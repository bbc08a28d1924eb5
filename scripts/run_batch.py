from __future__ import annotations

"""Run a transcription batch in-process, without the HTTP layer.

Usage:
  python -m scripts.run_batch --input batch.json
  python -m scripts.run_batch --audio-url https://example.com/a.mp3 --no-wait

The batch file holds the same JSON the host POSTs to /gladia/execute.
`.env` is auto-loaded (python-dotenv), so GLADIA_API_KEY can live there.
"""

import argparse
import asyncio
import sys
from pathlib import Path

import orjson
from dotenv import find_dotenv, load_dotenv

from app.config.settings import get_settings
from app.connector.schemas.gladia_io import BatchRequest
from app.connector.services.batch import run_batch
from app.connector.services.errors import ConnectorError
from app.connector.services.gladia_client import open_client
from app.connector.services.logging import configure_logging


def build_parser():
    p = argparse.ArgumentParser(description="Submit audio to Gladia and print the results as JSON")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--input", type=Path, help="Path to a batch JSON file")
    src.add_argument("--audio-url", type=str, help="Single audio URL to transcribe")
    p.add_argument("--no-wait", action="store_true", help="Return the submission receipt without polling")
    p.add_argument("--continue-on-fail", action="store_true", help="Turn item failures into error results")
    return p


def load_request(args: argparse.Namespace) -> BatchRequest:
    if args.input:
        return BatchRequest.model_validate(orjson.loads(args.input.read_bytes()))
    return BatchRequest.model_validate(
        {
            "continue_on_fail": args.continue_on_fail,
            "items": [
                {
                    "parameters": {
                        "audio": {"source": "url", "audio_url": args.audio_url},
                        "wait_for_completion": not args.no_wait,
                    }
                }
            ],
        }
    )


async def main() -> int:
    load_dotenv(find_dotenv(), override=False)
    args = build_parser().parse_args()
    settings = get_settings()
    configure_logging(settings.log_level)

    request = load_request(args)
    if args.continue_on_fail:
        request.continue_on_fail = True
    try:
        async with open_client(settings) as client:
            results = await run_batch(request, client=client, settings=settings)
    except ConnectorError as exc:
        print(f"item {exc.item_index}: {exc.message}", file=sys.stderr)
        return 1
    out = [r.model_dump(by_alias=True) for r in results]
    sys.stdout.write(orjson.dumps(out, option=orjson.OPT_INDENT_2).decode() + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
