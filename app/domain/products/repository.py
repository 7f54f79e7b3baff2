from typing import List, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_

from app.domain.products.models import Product
from app.infrastructure.database import upsert_statement


class ProductRepository:
    """Document store access for products.

    Every query is scoped by tenant; there is deliberately no lookup by id
    alone.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_tenant_id(self, tenant_id: str) -> List[Product]:
        """All products owned by a tenant"""
        result = await self.db.execute(
            select(Product)
            .where(Product.tenant_id == tenant_id)
            .order_by(Product.id)
        )
        return list(result.scalars().all())

    async def find_by_tenant_id_and_id(self, tenant_id: str, product_id: str) -> Optional[Product]:
        """One product, only if the tenant owns it"""
        result = await self.db.execute(
            select(Product).where(
                and_(Product.tenant_id == tenant_id, Product.id == product_id)
            )
        )
        return result.scalar_one_or_none()

    async def save(self, product: Product) -> Product:
        """Insert or replace the document keyed by (tenant_id, id)"""
        await self.db.execute(
            upsert_statement(
                self.db,
                Product,
                {
                    "tenant_id": product.tenant_id,
                    "id": product.id,
                    "document": dict(product.document or {}),
                    "updated_at": datetime.utcnow(),
                },
                conflict_columns=("tenant_id", "id"),
            )
        )
        await self.db.commit()

        result = await self.db.execute(
            select(Product)
            .where(and_(Product.tenant_id == product.tenant_id, Product.id == product.id))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def delete(self, product: Product) -> None:
        await self.db.execute(
            delete(Product).where(
                and_(Product.tenant_id == product.tenant_id, Product.id == product.id)
            )
        )
        await self.db.commit()
