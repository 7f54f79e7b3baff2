from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache_keys import entity_key, list_key
from app.core.config import settings
from app.core.tenant import get_tenant_id
from app.domain.products.models import Product
from app.domain.products.repository import ProductRepository
from app.api.products.schemas import ProductUpsert
from app.infrastructure.redis import CacheService

LIST_OPERATION = "getAllProducts"
ENTITY = "product"


class ProductService:
    """Service layer for products.

    The tenant is never a parameter: every method reads it from the tenant
    context and uses it to scope both the repository query and the cache key.
    """

    def __init__(self, db: AsyncSession, cache: Optional[CacheService] = None):
        self.db = db
        self.product_repo = ProductRepository(db)
        self.cache = cache

    async def get_all_products(self) -> List[Product]:
        """Products of the current tenant, read through the cache"""
        key = list_key(LIST_OPERATION)
        if self.cache is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                return [Product.from_dict(item) for item in cached]

        products = await self.product_repo.find_by_tenant_id(get_tenant_id())

        if self.cache is not None:
            await self.cache.set(key, [product.to_dict() for product in products], ttl=settings.CACHE_LIST_TTL_SECONDS)
        return products

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        """A product of the current tenant, or None.

        A product owned by another tenant is reported exactly like a missing one.
        """
        key = entity_key(ENTITY, product_id)
        if self.cache is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                return Product.from_dict(cached)

        product = await self.product_repo.find_by_tenant_id_and_id(get_tenant_id(), product_id)

        if product is not None and self.cache is not None:
            await self.cache.set(key, product.to_dict())
        return product

    async def upsert_product(self, product_id: str, product_details: ProductUpsert) -> Product:
        """Insert or replace a product under the path id and the current tenant.

        Any tenant id carried in the payload is ignored.
        """
        product = Product(
            id=product_id,
            tenant_id=get_tenant_id(),
            name=product_details.name,
            description=product_details.description,
            price=product_details.price,
        )
        saved = await self.product_repo.save(product)

        if self.cache is not None:
            await self.cache.set(entity_key(ENTITY, product_id), saved.to_dict())
            await self.cache.delete(list_key(LIST_OPERATION))
        return saved

    async def delete_product(self, product_id: str) -> bool:
        """Delete a product of the current tenant; False if there is none"""
        product = await self.product_repo.find_by_tenant_id_and_id(get_tenant_id(), product_id)
        if product is None:
            return False

        await self.product_repo.delete(product)

        if self.cache is not None:
            await self.cache.delete(entity_key(ENTITY, product_id), list_key(LIST_OPERATION))
        return True
