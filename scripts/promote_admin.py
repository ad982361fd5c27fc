#!/usr/bin/env python3
"""
Promote a developer or employer account to Admin (or demote it back).

Usage:
    python scripts/promote_admin.py someone@example.com --kind Developer
    python scripts/promote_admin.py someone@example.com --kind Employer --revoke
"""

import argparse
import asyncio
import sys
from pathlib import Path

from motor.motor_asyncio import AsyncIOMotorClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hamkar.config import settings  # noqa: E402
from hamkar.db.base import utcnow  # noqa: E402
from hamkar.models.account import AccountKind, Role  # noqa: E402


async def set_role(email: str, kind: AccountKind, revoke: bool) -> int:
    client = AsyncIOMotorClient(settings.MONGODB_URI)
    collection = client[settings.MONGODB_DATABASE][kind.collection]
    role = Role.for_kind(kind) if revoke else Role.ADMIN

    try:
        result = await collection.update_one(
            {"email": email.strip().lower()},
            {"$set": {"role": role.value, "updated_at": utcnow()}},
        )
    finally:
        client.close()

    if result.matched_count == 0:
        print(f"No {kind.value} account found for {email}")
        return 1
    print(f"{email} ({kind.value}) now has role {role.value}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Grant or revoke the Admin role")
    parser.add_argument("email")
    parser.add_argument("--kind", choices=[kind.value for kind in AccountKind], default=AccountKind.DEVELOPER.value)
    parser.add_argument("--revoke", action="store_true", help="Restore the account's default role")
    args = parser.parse_args()
    return asyncio.run(set_role(args.email, AccountKind(args.kind), args.revoke))


if __name__ == "__main__":
    sys.exit(main())
