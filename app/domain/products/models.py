from decimal import Decimal
from typing import Any, Dict, Optional
from datetime import datetime

from sqlalchemy import Column, String, Text, DateTime, JSON

from app.infrastructure.database import ProductsBase


class Product(ProductsBase):
    """Product document.

    Each row holds one schemaless JSON document, addressed by the
    (tenant_id, id) pair. ``name``, ``description`` and ``price`` are views
    over the document; price is kept as a decimal string so no precision is
    lost in JSON.
    """
    __tablename__ = "products"

    # Opaque header value, no length limit
    tenant_id = Column(Text, primary_key=True)
    id = Column(String(255), primary_key=True)
    document = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def _set_field(self, field: str, value: Any) -> None:
        # Reassign the whole dict so the JSON column is flagged as changed
        document = dict(self.document or {})
        document[field] = value
        self.document = document

    @property
    def name(self) -> Optional[str]:
        return (self.document or {}).get("name")

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self._set_field("name", value)

    @property
    def description(self) -> Optional[str]:
        return (self.document or {}).get("description")

    @description.setter
    def description(self, value: Optional[str]) -> None:
        self._set_field("description", value)

    @property
    def price(self) -> Optional[Decimal]:
        price = (self.document or {}).get("price")
        return Decimal(price) if price is not None else None

    @price.setter
    def price(self, value: Optional[Decimal]) -> None:
        self._set_field("price", str(value) if value is not None else None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "description": self.description,
            "price": str(self.price) if self.price is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        price = data.get("price")
        return cls(
            id=data["id"],
            tenant_id=data["tenant_id"],
            name=data.get("name"),
            description=data.get("description"),
            price=Decimal(price) if price is not None else None,
        )

    def __repr__(self) -> str:
        return f"<Product {self.tenant_id}/{self.id}>"
