"""
Registry of channel gateways.

Maps provider names, as stored on posts and credentials, to the gateway
that publishes on that provider. New networks are added by registering a
gateway; the orchestrator only ever asks the registry.
"""

from collections.abc import Iterable

from ...channels import FacebookGateway, InstagramGateway, LinkedInGateway
from ...config import Settings, settings
from ...domain.errors import UnknownProviderError
from ...domain.ports import ChannelGateway, ChannelType


class ChannelGatewayRegistry:
    """Provider name -> ChannelGateway lookup."""

    # Legacy provider names still present on older rows
    ALIASES: dict[str, str] = {
        "linkedin_oidc": ChannelType.LINKEDIN.value,
    }

    def __init__(self, gateways: Iterable[ChannelGateway] = ()) -> None:
        self._gateways: dict[str, ChannelGateway] = {}
        for gateway in gateways:
            self.register(gateway)

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "ChannelGatewayRegistry":
        """Create a registry with every supported network configured."""
        return cls(
            [
                LinkedInGateway(
                    base_url=config.linkedin_api_url,
                    timeout=config.http_timeout_seconds,
                ),
                FacebookGateway(
                    base_url=config.graph_base_url,
                    timeout=config.http_timeout_seconds,
                ),
                InstagramGateway(
                    base_url=config.graph_base_url,
                    timeout=config.http_timeout_seconds,
                    poll_interval=config.media_poll_interval_seconds,
                    max_poll_attempts=config.media_poll_max_attempts,
                ),
            ]
        )

    @classmethod
    def normalize(cls, provider: str) -> str:
        """Canonical provider name (lower-cased, aliases resolved)."""
        name = provider.strip().lower()
        return cls.ALIASES.get(name, name)

    def register(self, gateway: ChannelGateway, name: str | None = None) -> None:
        """Register a gateway under its channel type, or an explicit name."""
        key = self.normalize(name or gateway.channel_type.value)
        self._gateways[key] = gateway

    def get(self, provider: str) -> ChannelGateway:
        """
        Get the gateway for a provider name.

        Raises:
            UnknownProviderError: If nothing is registered for the name
        """
        try:
            return self._gateways[self.normalize(provider)]
        except KeyError:
            raise UnknownProviderError(provider) from None

    def names(self) -> list[str]:
        return sorted(self._gateways)
