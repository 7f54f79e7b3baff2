import time

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.core.config import settings
from app.core.exceptions import TenantHeaderError, error_json_response
from app.core.tenant import set_tenant_id, clear_tenant_id


class TenantMiddleware(BaseHTTPMiddleware):
    """Binds the request's tenant to the tenant context for the whole request.

    The tenant comes from the tenant header, falling back to the default
    tenant when it is missing or blank. The context is cleared once on every
    way out of the request, handler errors included.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        tenant_id = (request.headers.get(settings.TENANT_HEADER) or "").strip()
        if not tenant_id:
            if settings.REQUIRE_TENANT_HEADER:
                return error_json_response(
                    TenantHeaderError(details={"header": settings.TENANT_HEADER})
                )
            tenant_id = settings.DEFAULT_TENANT_ID

        started = time.perf_counter()
        set_tenant_id(tenant_id)
        try:
            response = await call_next(request)
        finally:
            clear_tenant_id()

        response.headers[settings.TENANT_HEADER] = tenant_id
        logger.bind(tenant_id=tenant_id).info(
            "{} {} tenant={} status={} duration_ms={:.1f}",
            request.method,
            request.url.path,
            tenant_id,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response
