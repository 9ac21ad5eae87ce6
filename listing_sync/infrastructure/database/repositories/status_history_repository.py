import uuid
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_sync.application.interfaces.status_history_repository import (
    StatusHistoryRecord,
    StatusHistoryRepository,
)
from listing_sync.domain.enums.listing_status import ListingStatus
from listing_sync.infrastructure.database.models import ListingStatusHistoryModel


class SqlAlchemyStatusHistoryRepository(StatusHistoryRepository):
    """SQLAlchemy-backed implementation of StatusHistoryRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(
        self,
        *,
        listing_id: UUID,
        from_status: ListingStatus | None,
        to_status: ListingStatus,
        triggered_by: str,
        metadata: dict | None = None,  # type: ignore[type-arg]
    ) -> StatusHistoryRecord:
        record_id = uuid.uuid4()
        model = ListingStatusHistoryModel(
            id=record_id,
            listing_id=listing_id,
            from_status=from_status.value if from_status else None,
            to_status=to_status.value,
            triggered_by=triggered_by,
            metadata_=metadata or {},
        )
        async with self._session_factory() as session, session.begin():
            session.add(model)
            await session.flush()

        return StatusHistoryRecord(
            id=record_id,
            listing_id=listing_id,
            from_status=from_status,
            to_status=to_status,
            transitioned_at=model.transitioned_at,
            triggered_by=triggered_by,
            metadata=metadata or {},
        )

    async def get_history_for_listing(self, listing_id: UUID) -> list[StatusHistoryRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ListingStatusHistoryModel)
                .where(ListingStatusHistoryModel.listing_id == listing_id)
                .order_by(ListingStatusHistoryModel.transitioned_at.asc())
            )
            models = result.scalars().all()

        return [
            StatusHistoryRecord(
                id=m.id,
                listing_id=m.listing_id,
                from_status=ListingStatus(m.from_status) if m.from_status else None,
                to_status=ListingStatus(m.to_status),
                transitioned_at=m.transitioned_at,
                triggered_by=m.triggered_by,
                metadata=m.metadata_,
            )
            for m in models
        ]
