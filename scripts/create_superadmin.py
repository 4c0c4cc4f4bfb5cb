#!/usr/bin/env python3
"""
Create or reset a SUPERADMIN user
=================================
Prints a signed access token for the user so operators can call the API
right away.

Usage:
    python scripts/create_superadmin.py --username admin --password 'S3cret!'
"""

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import select

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

load_dotenv()

from cemse.core.security import create_access_token, get_password_hash  # noqa: E402
from cemse.db.session import AsyncSessionLocal, init_db  # noqa: E402
from cemse.models.user import User, UserRole  # noqa: E402


async def create_superadmin(username: str, password: str) -> str:
    await init_db()
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()

        if user is None:
            user = User(username=username, role=UserRole.SUPERADMIN.value)
            session.add(user)
            print(f"➕ Creating superadmin '{username}'")
        elif user.role != UserRole.SUPERADMIN.value:
            raise SystemExit(f"❌ User '{username}' exists with role {user.role}")
        else:
            print(f"🔁 Resetting password for '{username}'")

        user.password_hash = get_password_hash(password)
        user.is_active = True
        await session.commit()

        return create_access_token({"sub": user.id, "role": user.role, "username": user.username})


def main():
    parser = argparse.ArgumentParser(description="Create or reset a SUPERADMIN user")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args()

    if len(args.password) < 8:
        raise SystemExit("❌ Password must be at least 8 characters")

    token = asyncio.run(create_superadmin(args.username, args.password))
    print("\n✅ Done. Access token (send as the cemse-auth-token cookie):\n")
    print(token)


if __name__ == "__main__":
    main()
