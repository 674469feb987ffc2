"""
Role persistence.

Write operations report success as a boolean; database errors are logged and
rolled back, never half-applied.
"""
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.roles.models import Role
from app.features.roles.schemas import RoleRecord
from app.utils import get_logger


log = get_logger(__name__)


class RoleRepository:
    """Roles looked up by exact name."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(self, name: str) -> Optional[Role]:
        result = await self.db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def list(self, skip: int = 0, limit: int = 100) -> List[Role]:
        result = await self.db.execute(select(Role).order_by(Role.name).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def insert(self, record: RoleRecord) -> bool:
        try:
            self.db.add(Role(**record.model_dump()))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            log.error("Failed to create role %s: %s", record.name, e)
            return False
        return True

    async def update(self, name: str, record: RoleRecord) -> bool:
        role = await self.find(name)
        if role is None:
            return False

        try:
            for key, value in record.model_dump().items():
                setattr(role, key, value)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            log.error("Failed to update role %s: %s", name, e)
            return False
        return True

    async def delete(self, name: str) -> bool:
        role = await self.find(name)
        if role is None:
            return False

        try:
            await self.db.delete(role)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            log.error("Failed to remove role %s: %s", name, e)
            return False
        return True
