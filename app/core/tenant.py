"""Per-request tenant context.

The current tenant lives in a ContextVar. Every request is served on its own
asyncio task, and each task runs in a copy of the context it was started
from, so a value set while handling one request is never visible to another
request running at the same time.
"""
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Optional

from app.core.exceptions import TenantContextError

DEFAULT_TENANT_ID = "default"

tenant_context: ContextVar[Optional[str]] = ContextVar("tenant_context", default=None)


def get_tenant_id() -> str:
    """Return the tenant bound to the current request.

    Raises TenantContextError when called outside a request scope.
    """
    tenant_id = tenant_context.get()
    if tenant_id is None:
        raise TenantContextError()
    return tenant_id


def get_tenant_id_or_none() -> Optional[str]:
    return tenant_context.get()


def set_tenant_id(tenant_id: str) -> Token:
    return tenant_context.set(tenant_id)


def clear_tenant_id(token: Optional[Token] = None) -> None:
    if token is not None:
        tenant_context.reset(token)
    else:
        tenant_context.set(None)


@contextmanager
def tenant_scope(tenant_id: str) -> Iterator[str]:
    """Bind ``tenant_id`` for the duration of a block.

    Example:
        with tenant_scope("acme"):
            await product_service.get_all_products()
    """
    token = set_tenant_id(tenant_id)
    try:
        yield tenant_id
    finally:
        clear_tenant_id(token)
