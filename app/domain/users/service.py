from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache_keys import entity_key, list_key
from app.core.config import settings
from app.core.tenant import get_tenant_id
from app.domain.users.models import User
from app.domain.users.repository import UserRepository
from app.api.users.schemas import UserUpsert
from app.infrastructure.redis import CacheService

LIST_OPERATION = "getAllUsers"
ENTITY = "user"


class UserService:
    """Service layer for users, scoped by the ambient tenant"""

    def __init__(self, db: AsyncSession, cache: Optional[CacheService] = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.cache = cache

    async def get_all_users(self) -> List[User]:
        key = list_key(LIST_OPERATION)
        if self.cache is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                return [User.from_dict(item) for item in cached]

        users = await self.user_repo.find_by_tenant_id(get_tenant_id())

        if self.cache is not None:
            await self.cache.set(key, [user.to_dict() for user in users], ttl=settings.CACHE_LIST_TTL_SECONDS)
        return users

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        key = entity_key(ENTITY, user_id)
        if self.cache is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                return User.from_dict(cached)

        user = await self.user_repo.find_by_tenant_id_and_id(get_tenant_id(), user_id)

        if user is not None and self.cache is not None:
            await self.cache.set(key, user.to_dict())
        return user

    async def upsert_user(self, user_id: int, user_details: UserUpsert) -> User:
        """Insert or replace a user; the payload's tenant id is never used"""
        saved = await self.user_repo.save(User(
            id=user_id,
            tenant_id=get_tenant_id(),
            name=user_details.name,
            email=user_details.email,
        ))

        if self.cache is not None:
            await self.cache.set(entity_key(ENTITY, user_id), saved.to_dict())
            await self.cache.delete(list_key(LIST_OPERATION))
        return saved

    async def delete_user(self, user_id: int) -> bool:
        user = await self.user_repo.find_by_tenant_id_and_id(get_tenant_id(), user_id)
        if user is None:
            return False

        await self.user_repo.delete(user)

        if self.cache is not None:
            await self.cache.delete(entity_key(ENTITY, user_id), list_key(LIST_OPERATION))
        return True
