"""
Database seeding script for the initial admin.

Creates the ADMIN account from settings (ADMIN_USERNAME / ADMIN_PASSWORD).
Run this script after database is set up but before first use.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from parcel_tracker.app.core.config import settings
from parcel_tracker.app.db.session import AsyncSessionLocal, engine, init_models
from parcel_tracker.app.repositories.admin_repository import AdminRepository
from parcel_tracker.app.models.admin import Admin  # noqa: F401  (registers the table)


async def seed_admin():
    """
    Seed the initial admin user.

    Skips seeding if an admin with the configured username exists.
    """
    await init_models()

    async with AsyncSessionLocal() as db:
        print("🌱 Starting admin seeding...")

        admins = AdminRepository(db)
        if await admins.get_by_username(settings.admin_username):
            print(f"ℹ️  Admin '{settings.admin_username}' already exists, skipping seeding")
            return

        await admins.create_admin(settings.admin_username, settings.admin_password)
        print(f"✅ Created admin user (username: {settings.admin_username})")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_admin())
