from typing import Any, Dict
from datetime import datetime

from sqlalchemy import Column, String, Text, DateTime, BigInteger

from app.infrastructure.database import UsersBase


class User(UsersBase):
    """User row, owned by the tenant that wrote it"""
    __tablename__ = "users"

    # Opaque header value, no length limit
    tenant_id = Column(Text, primary_key=True)
    # Caller-supplied on upsert, unique per tenant only
    id = Column(BigInteger, primary_key=True, autoincrement=False)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=data["id"],
            tenant_id=data["tenant_id"],
            name=data["name"],
            email=data["email"],
        )

    def __repr__(self) -> str:
        return f"<User {self.tenant_id}/{self.id}>"
