#!/usr/bin/env python3
"""
Create every MongoDB index the API relies on, including the partial unique
index that allows one pending job request per employer/developer pair.
"""

import asyncio
import sys
from pathlib import Path

from motor.motor_asyncio import AsyncIOMotorClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hamkar.config import settings  # noqa: E402
from hamkar.db.base import INDEXES, ensure_indexes  # noqa: E402


async def main() -> int:
    print(f"Connecting to {settings.MONGODB_DATABASE}...")
    client = AsyncIOMotorClient(settings.MONGODB_URI)
    db = client[settings.MONGODB_DATABASE]

    try:
        await client.admin.command("ping")
        await ensure_indexes(db)
        for collection_name in INDEXES:
            indexes = await db[collection_name].list_indexes().to_list(length=None)
            print(f"\n{collection_name}:")
            for index in indexes:
                print(f"   - {index['name']}: {dict(index.get('key', {}))}")
    finally:
        client.close()

    print("\nIndexes ensured")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
