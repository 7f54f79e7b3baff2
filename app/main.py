from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.api.router import api_router
from app.infrastructure.database import products_db, users_db
from app.infrastructure import redis as redis_infra
from app.middleware.tenant_middleware import TenantMiddleware
from app.middleware.timeout_middleware import RequestTimeoutMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.LOG_LEVEL)

    await users_db.connect(
        settings.USERS_DATABASE_URL,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        echo=settings.DEBUG,
    )
    await products_db.connect(
        settings.PRODUCTS_DATABASE_URL,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        echo=settings.DEBUG,
    )

    if settings.CACHE_ENABLED and settings.REDIS_URL:
        try:
            await redis_infra.init_redis_services(settings.REDIS_URL, settings.CACHE_TTL_SECONDS)
        except Exception as e:
            logger.warning(f"Running without cache, Redis unavailable: {e}")

    yield

    if redis_infra.redis_manager.is_connected:
        await redis_infra.close_redis_services()
    await products_db.disconnect()
    await users_db.disconnect()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(RequestTimeoutMiddleware)
# Added last so it wraps the deadline and clears the tenant after a timeout too
app.add_middleware(TenantMiddleware)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/health")
async def health_check():
    users_ok = await users_db.is_healthy()
    products_ok = await products_db.is_healthy()
    cache_ok = await redis_infra.redis_manager.is_healthy()
    return {
        "status": "ok" if users_ok and products_ok else "degraded",
        "users_db": users_ok,
        "products_db": products_ok,
        "cache": cache_ok,
    }
