"""Cache key construction.

Every key embeds the tenant read from the tenant context, so one tenant's
cached result can never be served to another:

    list-all:   "{operation}:{tenant}"       e.g. "getAllProducts:acme"
    get-by-id:  "{entity}:{tenant}:{id}"     e.g. "product:acme:42"
"""
from typing import Any

from app.core.tenant import get_tenant_id


def list_key(operation: str) -> str:
    return f"{operation}:{get_tenant_id()}"


def entity_key(entity: str, entity_id: Any) -> str:
    return f"{entity}:{get_tenant_id()}:{entity_id}"
