from decimal import Decimal
from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer


class ProductUpsert(BaseModel):
    """PUT body. ``tenantId`` is accepted for compatibility but never stored."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    price: Decimal = Field(..., ge=0)
    tenant_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("tenantId", "tenant_id"),
        exclude=True,
    )


class ProductResponse(BaseModel):
    id: str
    tenant_id: str = Field(
        ...,
        validation_alias=AliasChoices("tenantId", "tenant_id"),
        serialization_alias="tenantId",
    )
    name: str
    description: Optional[str] = None
    price: Decimal

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)
