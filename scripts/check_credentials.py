from __future__ import annotations

"""Check that GLADIA_API_KEY is accepted by the Gladia API.

Usage:
  python -m scripts.check_credentials

Auto-loads `.env` from the project root (or parent dirs) using python-dotenv.
"""

import asyncio
import sys

from dotenv import find_dotenv, load_dotenv

from app.config.settings import get_settings
from app.connector.services.gladia_client import open_client


async def main() -> int:
    load_dotenv(find_dotenv(), override=False)
    async with open_client(get_settings()) as client:
        result = await client.test_credentials()
    print(result["status"], result["message"])
    return 0 if result["status"] == "OK" else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
