#!/usr/bin/env python3
"""
Seed the default municipality catalog
=====================================
Creates every well-known municipality (and the municipal user that owns it)
that does not exist yet. Safe to run on every deploy.

Usage:
    python scripts/seed_defaults.py
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

load_dotenv()

from cemse.core.logging import setup_logging  # noqa: E402
from cemse.db.session import AsyncSessionLocal, init_db  # noqa: E402
from cemse.services.provisioning import ensure_default_municipalities  # noqa: E402


async def seed() -> int:
    await init_db()
    async with AsyncSessionLocal() as session:
        try:
            municipalities = await ensure_default_municipalities(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    for municipality in municipalities:
        print(f"✅ {municipality.id}: {municipality.name}")
    return len(municipalities)


if __name__ == "__main__":
    setup_logging()
    count = asyncio.run(seed())
    print(f"\n🌱 {count} default municipalities present")
