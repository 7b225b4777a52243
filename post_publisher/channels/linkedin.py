import httpx
import structlog

from ..config import settings
from ..domain.errors import MediaProcessingError
from ..domain.ports import ChannelType, MediaKind, ProviderCredential, ScheduledPost
from .base import HttpChannelGateway, raise_for_provider_error, require, response_json
from .media import MediaUploader, fetch_source_media

logger = structlog.get_logger()

IMAGE_RECIPE = "urn:li:digitalmediaRecipe:feedshare-image"
VIDEO_RECIPE = "urn:li:digitalmediaRecipe:feedshare-video"
UPLOAD_MECHANISM = "com.linkedin.digitalmedia.uploading.MediaUploadHttpRequest"
SHARE_CONTENT = "com.linkedin.ugc.ShareContent"


def _headers(access_token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {access_token}",
        "Content-Type": "application/json",
        "X-Restli-Protocol-Version": "2.0.0",
    }


class LinkedInAssetUploader(MediaUploader):
    """
    Registers an upload, then PUTs the media bytes to LinkedIn.

    The asset URN is usable as soon as the PUT succeeds; no polling.
    """

    def __init__(self, base_url: str, access_token: str, owner_urn: str) -> None:
        self._base_url = base_url
        self._access_token = access_token
        self._owner_urn = owner_urn

    async def upload(self, client: httpx.AsyncClient, url: str, kind: MediaKind) -> str:
        recipe = IMAGE_RECIPE if kind == MediaKind.IMAGE else VIDEO_RECIPE
        register = await client.post(
            f"{self._base_url}/assets",
            params={"action": "registerUpload"},
            headers=_headers(self._access_token),
            json={
                "registerUploadRequest": {
                    "recipes": [recipe],
                    "owner": self._owner_urn,
                    "serviceRelationships": [
                        {
                            "relationshipType": "OWNER",
                            "identifier": "urn:li:userGeneratedContent",
                        }
                    ],
                }
            },
        )
        if not register.is_success:
            raise MediaProcessingError(
                f"LinkedIn upload registration failed ({register.status_code}): {register.text}"
            )

        try:
            value = response_json(register)["value"]
            upload_url = value["uploadMechanism"][UPLOAD_MECHANISM]["uploadUrl"]
            asset_urn = value["asset"]
        except (KeyError, TypeError) as e:
            raise MediaProcessingError(
                f"LinkedIn upload registration returned an unexpected body: {register.text}"
            ) from e

        body, content_type = await fetch_source_media(client, url)

        upload = await client.put(
            upload_url,
            headers={
                "Authorization": f"Bearer {self._access_token}",
                "Content-Type": content_type,
            },
            content=body,
        )
        if not upload.is_success:
            raise MediaProcessingError(
                f"LinkedIn media upload failed ({upload.status_code}): {upload.text}"
            )

        logger.info("LinkedIn asset uploaded", asset=asset_urn, size=len(body))
        return asset_urn


class LinkedInGateway(HttpChannelGateway):
    """LinkedIn UGC API gateway for member posts."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        super().__init__(base_url or settings.linkedin_api_url, timeout)

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.LINKEDIN

    async def publish(self, credential: ProviderCredential, post: ScheduledPost) -> str | None:
        """Post to the member's LinkedIn feed, uploading media first if any."""
        member_id = require(credential.provider_user_id, "LinkedIn credential is missing provider_user_id")
        author = f"urn:li:person:{member_id}"

        share_content: dict = {
            "shareCommentary": {"text": post.text},
            "shareMediaCategory": "NONE",
        }

        async with self._client() as client:
            if post.has_media:
                kind = require(post.media_kind, "LinkedIn media posts need a media kind (image or video)")
                uploader = LinkedInAssetUploader(self._base_url, credential.access_token, author)
                assets = await uploader.upload_all(client, post.media_urls, kind)
                share_content["shareMediaCategory"] = "IMAGE" if kind == MediaKind.IMAGE else "VIDEO"
                share_content["media"] = [self._media_entry(asset, post, len(assets) == 1) for asset in assets]

            response = await client.post(
                f"{self._base_url}/ugcPosts",
                headers=_headers(credential.access_token),
                json={
                    "author": author,
                    "lifecycleState": "PUBLISHED",
                    "specificContent": {SHARE_CONTENT: share_content},
                    "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": "PUBLIC"},
                },
            )
            raise_for_provider_error("LinkedIn", response, "post creation")

        post_urn = response.headers.get("x-restli-id") or response_json(response).get("id")
        logger.info("LinkedIn post created", post_urn=post_urn, media_count=len(post.media_urls))
        return post_urn

    @staticmethod
    def _media_entry(asset_urn: str, post: ScheduledPost, single: bool) -> dict:
        entry = {"status": "READY", "media": asset_urn}
        if single:
            entry["title"] = {"text": post.text[:200]}
            entry["description"] = {"text": post.text}
        return entry
