from .base import HttpChannelGateway
from .facebook import FacebookGateway, FacebookPhotoUploader
from .instagram import InstagramContainerUploader, InstagramGateway
from .linkedin import LinkedInAssetUploader, LinkedInGateway
from .media import ContainerState, MediaUploader, fetch_source_media, poll_until_ready

__all__ = [
    "ContainerState",
    "FacebookGateway",
    "FacebookPhotoUploader",
    "HttpChannelGateway",
    "InstagramContainerUploader",
    "InstagramGateway",
    "LinkedInAssetUploader",
    "LinkedInGateway",
    "MediaUploader",
    "fetch_source_media",
    "poll_until_ready",
]
