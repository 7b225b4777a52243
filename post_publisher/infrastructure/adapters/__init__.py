from .channel_gateway_registry import ChannelGatewayRegistry
from .credential_repository_impl import SqlAlchemyCredentialRepository
from .notification_repository_impl import SqlAlchemyNotificationRepository
from .post_repository_impl import SqlAlchemyPostRepository

__all__ = [
    "ChannelGatewayRegistry",
    "SqlAlchemyCredentialRepository",
    "SqlAlchemyNotificationRepository",
    "SqlAlchemyPostRepository",
]
