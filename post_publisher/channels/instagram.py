import asyncio
from collections.abc import Awaitable, Callable

import httpx
import structlog

from ..config import settings
from ..domain.errors import ConfigurationError, MediaProcessingError, MediaTimeoutError
from ..domain.ports import ChannelType, MediaKind, ProviderCredential, ScheduledPost
from .base import HttpChannelGateway, raise_for_provider_error, require, response_id, response_json
from .media import ContainerState, MediaUploader, poll_until_ready

logger = structlog.get_logger()

# Graph API container status_code -> readiness
CONTAINER_STATES = {
    "FINISHED": ContainerState.FINISHED,
    "PUBLISHED": ContainerState.FINISHED,
    "ERROR": ContainerState.ERROR,
    "EXPIRED": ContainerState.ERROR,
}


class InstagramContainerUploader(MediaUploader):
    """Creates one Instagram media container per media item."""

    def __init__(
        self,
        account_url: str,
        access_token: str,
        carousel_item: bool,
        caption: str | None = None,
    ) -> None:
        self._account_url = account_url
        self._access_token = access_token
        self._carousel_item = carousel_item
        self._caption = caption

    async def upload(self, client: httpx.AsyncClient, url: str, kind: MediaKind) -> str:
        params = {
            "access_token": self._access_token,
            "is_carousel_item": "true" if self._carousel_item else "false",
        }
        if kind == MediaKind.IMAGE:
            params["image_url"] = url
        else:
            params["video_url"] = url
            params["media_type"] = "VIDEO"
        if self._caption is not None:
            params["caption"] = self._caption

        response = await client.post(f"{self._account_url}/media", params=params)
        raise_for_provider_error("Instagram", response, "media container creation")
        return response_id("Instagram", response, "media container creation")


class InstagramGateway(HttpChannelGateway):
    """Instagram Graph API gateway for content publishing."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        poll_interval: float | None = None,
        max_poll_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        super().__init__(base_url or settings.graph_base_url, timeout)
        self._poll_interval = (
            poll_interval if poll_interval is not None else settings.media_poll_interval_seconds
        )
        self._max_poll_attempts = max_poll_attempts or settings.media_poll_max_attempts
        self._sleep = sleep

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.INSTAGRAM

    async def publish(self, credential: ProviderCredential, post: ScheduledPost) -> str | None:
        """
        Publish to Instagram (requires media).

        Creates one container per item, wraps several items in a carousel
        container, waits for the container to finish processing, then
        publishes it with a single media_publish call.
        """
        account_id = require(credential.provider_page_id, "Instagram credential is missing provider_page_id")
        if not post.has_media:
            raise ConfigurationError("Instagram posts require at least one image or video")
        kind = require(post.media_kind, "Instagram media posts need a media kind (image or video)")

        account_url = f"{self._base_url}/{account_id}"
        token = credential.access_token

        async with self._client() as client:
            uploader = InstagramContainerUploader(
                account_url,
                token,
                carousel_item=post.is_carousel,
                caption=None if post.is_carousel else post.text,
            )
            item_ids = await uploader.upload_all(client, post.media_urls, kind)

            if post.is_carousel:
                creation_id = await self._create_carousel(client, account_url, token, item_ids, post.text)
            else:
                creation_id = item_ids[0]

            await self._wait_until_ready(client, creation_id, token)

            response = await client.post(
                f"{account_url}/media_publish",
                params={"creation_id": creation_id, "access_token": token},
            )
            raise_for_provider_error("Instagram", response, "media publish")

        media_id = response_json(response).get("id")
        logger.info(
            "Instagram post published",
            media_id=media_id,
            items=len(item_ids),
            carousel=post.is_carousel,
        )
        return media_id

    async def _create_carousel(
        self,
        client: httpx.AsyncClient,
        account_url: str,
        token: str,
        item_ids: list[str],
        caption: str,
    ) -> str:
        response = await client.post(
            f"{account_url}/media",
            params={
                "media_type": "CAROUSEL",
                "children": ",".join(item_ids),
                "caption": caption,
                "access_token": token,
            },
        )
        raise_for_provider_error("Instagram", response, "carousel container creation")
        return response_id("Instagram", response, "carousel container creation")

    async def _wait_until_ready(self, client: httpx.AsyncClient, container_id: str, token: str) -> None:
        async def check() -> ContainerState:
            response = await client.get(
                f"{self._base_url}/{container_id}",
                params={"fields": "status_code", "access_token": token},
            )
            raise_for_provider_error("Instagram", response, "container status check")
            status_code = response_json(response).get("status_code")
            return CONTAINER_STATES.get(status_code, ContainerState.PENDING)

        state = await poll_until_ready(
            check,
            interval=self._poll_interval,
            max_attempts=self._max_poll_attempts,
            sleep=self._sleep,
        )

        if state == ContainerState.ERROR:
            raise MediaProcessingError(
                f"Instagram reported an error while processing media container {container_id}"
            )
        if state == ContainerState.TIMED_OUT:
            raise MediaTimeoutError("Instagram", container_id, self._max_poll_attempts)
        logger.debug("Instagram container ready", container_id=container_id)
