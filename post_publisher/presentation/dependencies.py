import hmac
from typing import AsyncGenerator

import structlog
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from ..application.services import NotificationEmitter, PublishOrchestrator
from ..config import settings
from ..infrastructure.adapters import (
    ChannelGatewayRegistry,
    SqlAlchemyCredentialRepository,
    SqlAlchemyNotificationRepository,
    SqlAlchemyPostRepository,
)
from ..infrastructure.persistence.database import Database

logger = structlog.get_logger()

# Singleton database instance
_database: Database | None = None
_registry: ChannelGatewayRegistry | None = None


class UnauthorizedError(Exception):
    """Trigger called without the service-role secret."""

    pass


def get_database() -> Database:
    global _database
    if _database is None:
        _database = Database(settings.database_url, application_name=settings.service_name)
    return _database


async def get_session() -> AsyncGenerator:
    db = get_database()
    session = db.session()
    try:
        yield session
    finally:
        await session.close()


def get_gateway_registry() -> ChannelGatewayRegistry:
    global _registry
    if _registry is None:
        _registry = ChannelGatewayRegistry.from_settings(settings)
    return _registry


def build_orchestrator(session: AsyncSession, registry: ChannelGatewayRegistry) -> PublishOrchestrator:
    """Wire the orchestrator to SQLAlchemy adapters sharing one session."""
    notifier = NotificationEmitter(
        SqlAlchemyNotificationRepository(session),
        timezone=settings.notification_timezone,
        excerpt_length=settings.error_excerpt_length,
    )
    return PublishOrchestrator(
        posts=SqlAlchemyPostRepository(session),
        credentials=SqlAlchemyCredentialRepository(session),
        notifier=notifier,
        registry=registry,
        batch_size=settings.batch_size,
        provider_timeout=settings.provider_timeout_seconds,
    )


async def get_orchestrator(
    session=Depends(get_session),
    registry: ChannelGatewayRegistry = Depends(get_gateway_registry),
) -> PublishOrchestrator:
    return build_orchestrator(session, registry)


def verify_service_role(authorization: str | None = Header(default=None)) -> None:
    """Require the exact header `Authorization: Bearer <service_role_key>`.

    The scheme is case-sensitive and no other spacing is accepted. An unset
    key rejects every call.
    """
    expected = settings.service_role_key
    if not authorization or not expected:
        logger.warning("Trigger rejected", reason="missing credentials or key")
        raise UnauthorizedError()

    if not hmac.compare_digest(authorization.encode(), f"Bearer {expected}".encode()):
        logger.warning("Trigger rejected", reason="invalid service role key")
        raise UnauthorizedError()
