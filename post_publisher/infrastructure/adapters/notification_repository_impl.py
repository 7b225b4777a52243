from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.ports import Notification, NotificationRepository
from ..persistence.models import NotificationModel
from ..persistence.unit_of_work import SqlAlchemyUnitOfWork


class SqlAlchemyNotificationRepository(NotificationRepository):
    """Inserts rows into the notifications table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, notification: Notification) -> None:
        async with SqlAlchemyUnitOfWork(self._session) as uow:
            self._session.add(
                NotificationModel(
                    user_id=notification.user_id,
                    team_id=notification.team_id,
                    message=notification.message,
                    type=notification.type.value,
                    is_read=False,
                    created_at=notification.created_at,
                )
            )
            await uow.commit()
