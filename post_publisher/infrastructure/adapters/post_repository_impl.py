"""
SQLAlchemy implementation of the PostRepository port.
"""

from datetime import datetime

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.ports import PostRepository, PostStatus, ScheduledPost
from ..persistence.models import SocialPostModel
from ..persistence.unit_of_work import SqlAlchemyUnitOfWork

logger = structlog.get_logger()


class SqlAlchemyPostRepository(PostRepository):
    """
    PostgreSQL-backed store of scheduled posts.

    Every write commits immediately so a crash mid-pass never leaves an
    earlier post's outcome unsaved.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_due_posts(self, now: datetime, limit: int) -> list[ScheduledPost]:
        stmt = (
            select(SocialPostModel)
            .where(
                SocialPostModel.status == PostStatus.SCHEDULED.value,
                SocialPostModel.scheduled_at <= now,
            )
            .order_by(SocialPostModel.scheduled_at.asc(), SocialPostModel.id.asc())
            .limit(limit)
        )
        async with SqlAlchemyUnitOfWork(self._session):
            result = await self._session.execute(stmt)
            return [model.to_entity() for model in result.scalars().all()]

    async def claim(self, post_id: int) -> bool:
        """Conditional scheduled -> processing update; one winner per post."""
        async with SqlAlchemyUnitOfWork(self._session) as uow:
            result = await self._session.execute(
                update(SocialPostModel)
                .where(
                    SocialPostModel.id == post_id,
                    SocialPostModel.status == PostStatus.SCHEDULED.value,
                )
                .values(status=PostStatus.PROCESSING.value)
                .execution_options(synchronize_session=False)
            )
            await uow.commit()
        return result.rowcount == 1

    async def finalize(
        self,
        post_id: int,
        status: PostStatus,
        published_at: datetime,
        error_message: str | None = None,
    ) -> None:
        async with SqlAlchemyUnitOfWork(self._session) as uow:
            await self._session.execute(
                update(SocialPostModel)
                .where(SocialPostModel.id == post_id)
                .values(
                    status=status.value,
                    published_at=published_at,
                    error_message=error_message,
                )
                .execution_options(synchronize_session=False)
            )
            await uow.commit()

        logger.info("Post status updated", post_id=post_id, status=status.value)
