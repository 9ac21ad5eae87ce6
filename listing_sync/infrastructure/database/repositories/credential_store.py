from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_sync.application.interfaces.credential_store import CredentialStore
from listing_sync.domain.entities.platform import PlatformCredentials
from listing_sync.infrastructure.database.models import PlatformCredentialsModel


class SqlAlchemyCredentialStore(CredentialStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, user_id: str, platform_id: str) -> PlatformCredentials | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PlatformCredentialsModel).where(
                    PlatformCredentialsModel.user_id == user_id,
                    PlatformCredentialsModel.platform_id == platform_id,
                )
            )
            model = result.scalar_one_or_none()

        if model is None:
            return None
        return PlatformCredentials(
            id=str(model.id),
            user_id=model.user_id,
            platform_id=model.platform_id,
            credentials=dict(model.credentials or {}),
        )
