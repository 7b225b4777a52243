from .channel_gateway import ChannelGateway, ChannelType, PublishOutcome
from .credential_repository import CredentialRepository, ProviderCredential
from .notification_repository import Notification, NotificationRepository, NotificationType
from .post_repository import MediaKind, PostRepository, PostStatus, ScheduledPost

__all__ = [
    "ChannelGateway",
    "ChannelType",
    "CredentialRepository",
    "MediaKind",
    "Notification",
    "NotificationRepository",
    "NotificationType",
    "PostRepository",
    "PostStatus",
    "ProviderCredential",
    "PublishOutcome",
    "ScheduledPost",
]
