from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_sync.config import settings
from listing_sync.infrastructure.database.connection import AsyncSessionLocal, ProductsSessionLocal

router = APIRouter(tags=["health"])


async def _ping(session_factory: async_sessionmaker[AsyncSession]) -> str:
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        return f"error: {exc}"
    return "connected"


@router.get("/health")
async def health_check() -> dict:  # type: ignore[type-arg]
    """Liveness + dependency health check."""
    db_status = await _ping(AsyncSessionLocal)
    catalog_status = await _ping(ProductsSessionLocal)

    rabbitmq_status = "disabled"
    if settings.events_enabled:
        rabbitmq_status = "connected"
        try:
            import pika

            connection = pika.BlockingConnection(pika.URLParameters(settings.rabbitmq_url))
            connection.close()
        except Exception as exc:
            rabbitmq_status = f"error: {exc}"

    healthy = db_status == catalog_status == "connected" and rabbitmq_status in ("connected", "disabled")

    return {
        "status": "healthy" if healthy else "degraded",
        "database": db_status,
        "catalog_database": catalog_status,
        "rabbitmq": rabbitmq_status,
    }
