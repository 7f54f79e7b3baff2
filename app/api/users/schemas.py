from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


class UserUpsert(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    # Ignored, the owning tenant always comes from the request header
    tenant_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("tenantId", "tenant_id"),
        exclude=True,
    )


class UserResponse(BaseModel):
    id: int
    tenant_id: str = Field(
        ...,
        validation_alias=AliasChoices("tenantId", "tenant_id"),
        serialization_alias="tenantId",
    )
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)
