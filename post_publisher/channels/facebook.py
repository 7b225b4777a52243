import httpx
import structlog

from ..config import settings
from ..domain.errors import ConfigurationError
from ..domain.ports import ChannelType, MediaKind, ProviderCredential, ScheduledPost
from .base import HttpChannelGateway, raise_for_provider_error, require, response_id, response_json
from .media import MediaUploader

logger = structlog.get_logger()


class FacebookPhotoUploader(MediaUploader):
    """Uploads photos to a Page unpublished, to attach them to a feed post."""

    def __init__(self, page_url: str, access_token: str) -> None:
        self._page_url = page_url
        self._access_token = access_token

    async def upload(self, client: httpx.AsyncClient, url: str, kind: MediaKind) -> str:
        response = await client.post(
            f"{self._page_url}/photos",
            params={
                "url": url,
                "published": "false",
                "access_token": self._access_token,
            },
        )
        raise_for_provider_error("Facebook", response, "photo upload")
        return response_id("Facebook", response, "photo upload")


class FacebookGateway(HttpChannelGateway):
    """Facebook Graph API gateway for Page posts."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        super().__init__(base_url or settings.graph_base_url, timeout)

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.FACEBOOK

    async def publish(self, credential: ProviderCredential, post: ScheduledPost) -> str | None:
        """Post to the Facebook Page: text, single photo/video, or photo carousel."""
        page_id = require(credential.provider_page_id, "Facebook credential is missing provider_page_id")
        page_url = f"{self._base_url}/{page_id}"
        token = credential.access_token

        async with self._client() as client:
            if post.is_carousel:
                if post.media_kind != MediaKind.IMAGE:
                    raise ConfigurationError("Facebook multi-media posts must contain only images")
                uploader = FacebookPhotoUploader(page_url, token)
                photo_ids = await uploader.upload_all(client, post.media_urls, MediaKind.IMAGE)
                endpoint = "feed"
                payload = {
                    "message": post.text,
                    "attached_media": [{"media_fbid": photo_id} for photo_id in photo_ids],
                    "access_token": token,
                }
            elif post.has_media:
                kind = require(post.media_kind, "Facebook media posts need a media kind (image or video)")
                if kind == MediaKind.IMAGE:
                    endpoint = "photos"
                    payload = {"caption": post.text, "url": post.media_urls[0], "access_token": token}
                else:
                    endpoint = "videos"
                    payload = {"description": post.text, "file_url": post.media_urls[0], "access_token": token}
            else:
                endpoint = "feed"
                payload = {"message": post.text, "access_token": token}

            response = await client.post(f"{page_url}/{endpoint}", json=payload)
            raise_for_provider_error("Facebook", response, f"{endpoint} publish")

        data = response_json(response)
        post_id = data.get("post_id") or data.get("id")
        logger.info("Facebook post created", post_id=post_id, endpoint=endpoint)
        return post_id
