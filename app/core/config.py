from typing import List, Union, Optional
from pydantic import AnyHttpUrl, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Tenant Data Service"
    API_PREFIX: str = "/api"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Relational store (users)
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_PORT: str = "5432"
    USERS_DATABASE_URL: Optional[str] = None

    # Document store (products)
    PRODUCTS_DATABASE_URL: str = "sqlite+aiosqlite:///./products.db"

    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10

    @model_validator(mode='after')
    def assemble_db_connection(self) -> 'Settings':
        if not self.USERS_DATABASE_URL:
            if all([self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_SERVER, self.POSTGRES_DB]):
                self.USERS_DATABASE_URL = str(
                    f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
                    f"{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
                )
            else:
                self.USERS_DATABASE_URL = "sqlite+aiosqlite:///./users.db"

        self.USERS_DATABASE_URL = _async_driver_url(self.USERS_DATABASE_URL)
        self.PRODUCTS_DATABASE_URL = _async_driver_url(self.PRODUCTS_DATABASE_URL)
        return self

    # Redis cache; unset runs the services uncached
    REDIS_URL: Optional[str] = None
    CACHE_ENABLED: bool = True
    CACHE_TTL_SECONDS: int = 3600
    # List entries can be repopulated from a read that raced a write
    CACHE_LIST_TTL_SECONDS: int = 60

    # Tenancy
    TENANT_HEADER: str = "X-Tenant-ID"
    DEFAULT_TENANT_ID: str = "default"
    REQUIRE_TENANT_HEADER: bool = False

    # Deadline applied to each request, None disables it
    REQUEST_TIMEOUT_SECONDS: Optional[float] = 30.0

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra='ignore')


def _async_driver_url(url: str) -> str:
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        # asyncpg takes ssl= rather than libpq's sslmode=
        url = url.replace("sslmode=require", "ssl=require")
    elif url.startswith("sqlite:///"):
        url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


settings = Settings()
