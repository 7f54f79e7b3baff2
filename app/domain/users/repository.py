from typing import List, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_

from app.domain.users.models import User
from app.infrastructure.database import upsert_statement


class UserRepository:
    """Relational store access for users, always scoped by tenant"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_tenant_id(self, tenant_id: str) -> List[User]:
        result = await self.db.execute(
            select(User).where(User.tenant_id == tenant_id).order_by(User.id)
        )
        return list(result.scalars().all())

    async def find_by_tenant_id_and_id(self, tenant_id: str, user_id: int) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(and_(User.tenant_id == tenant_id, User.id == user_id))
        )
        return result.scalar_one_or_none()

    async def save(self, user: User) -> User:
        """Insert or replace the row keyed by (tenant_id, id)"""
        await self.db.execute(
            upsert_statement(
                self.db,
                User,
                {
                    "tenant_id": user.tenant_id,
                    "id": user.id,
                    "name": user.name,
                    "email": user.email,
                    "updated_at": datetime.utcnow(),
                },
                conflict_columns=("tenant_id", "id"),
            )
        )
        await self.db.commit()

        result = await self.db.execute(
            select(User)
            .where(and_(User.tenant_id == user.tenant_id, User.id == user.id))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def delete(self, user: User) -> None:
        await self.db.execute(
            delete(User).where(and_(User.tenant_id == user.tenant_id, User.id == user.id))
        )
        await self.db.commit()
