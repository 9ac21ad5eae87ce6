from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from listing_sync.config import settings


def _async_url(url: str) -> str:
    # Convert postgresql:// to postgresql+asyncpg://
    return url.replace("postgresql://", "postgresql+asyncpg://", 1)


def build_engine(url: str) -> AsyncEngine:
    return create_async_engine(
        _async_url(url),
        echo=False,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


engine = build_engine(settings.database_url)
products_engine = build_engine(settings.products_database_url)

AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
ProductsSessionLocal = async_sessionmaker(
    bind=products_engine, expire_on_commit=False, autoflush=False
)


class Base(DeclarativeBase):
    pass

