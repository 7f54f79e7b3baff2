from typing import Optional
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.products.service import ProductService
from app.domain.users.service import UserService
from app.infrastructure.database import products_db, users_db
from app.infrastructure.redis import CacheService, get_cache_service


async def get_product_service(
    db: AsyncSession = Depends(products_db.get_session),
    cache: Optional[CacheService] = Depends(get_cache_service),
) -> ProductService:
    return ProductService(db, cache)


async def get_user_service(
    db: AsyncSession = Depends(users_db.get_session),
    cache: Optional[CacheService] = Depends(get_cache_service),
) -> UserService:
    return UserService(db, cache)
