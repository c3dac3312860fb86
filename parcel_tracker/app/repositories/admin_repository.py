"""
Admin repository.

Credential storage and verification for administrators.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parcel_tracker.app.core.security import get_password_hash, verify_password, dummy_verify
from parcel_tracker.app.models.admin import Admin


class AdminRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_username(self, username: str) -> Optional[Admin]:
        result = await self.db.execute(
            select(Admin).where(Admin.username == username)
        )
        return result.scalar_one_or_none()

    async def find_admin(self, username: str, password: str) -> bool:
        """Check a username/password pair against the stored hash."""
        admin = await self.get_by_username(username)
        if admin is None:
            dummy_verify()
            return False
        return verify_password(password, admin.hashed_password)

    async def create_admin(self, username: str, password: str) -> Admin:
        admin = Admin(username=username, hashed_password=get_password_hash(password))
        self.db.add(admin)
        await self.db.commit()
        return admin
