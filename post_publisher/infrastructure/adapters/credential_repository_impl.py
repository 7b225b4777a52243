import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.ports import CredentialRepository, ProviderCredential
from ..logging import sanitize_for_logging
from ..persistence.models import TeamCredentialModel
from ..persistence.unit_of_work import SqlAlchemyUnitOfWork

logger = structlog.get_logger()


class SqlAlchemyCredentialRepository(CredentialRepository):
    """Reads team credentials from the team_credentials table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for_team(self, team_id: str, provider: str) -> ProviderCredential | None:
        stmt = select(TeamCredentialModel).where(
            TeamCredentialModel.team_id == team_id,
            TeamCredentialModel.provider == provider,
        )
        async with SqlAlchemyUnitOfWork(self._session):
            result = await self._session.execute(stmt)
            model = result.scalars().first()

        if model is None or not model.access_token:
            logger.info("No usable credential", team_id=team_id, provider=provider)
            return None

        logger.debug(
            "Credential loaded",
            team_id=team_id,
            provider=provider,
            token=sanitize_for_logging(model.access_token),
        )
        return model.to_entity()
