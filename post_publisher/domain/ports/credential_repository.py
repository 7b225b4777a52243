"""
Outbound port for provider credential lookup.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class ProviderCredential:
    """Access token and account identifiers for one team and one provider."""

    team_id: str
    provider: str
    access_token: str
    provider_page_id: str | None = None  # Facebook page / Instagram business account
    provider_user_id: str | None = None  # LinkedIn member id


class CredentialRepository(ABC):
    """Read-only access to team credentials."""

    @abstractmethod
    async def get_for_team(self, team_id: str, provider: str) -> ProviderCredential | None:
        """
        Retrieve the credential of a team for a provider.

        Args:
            team_id: Owning team
            provider: Provider name (linkedin, facebook, instagram)

        Returns:
            ProviderCredential if a row with an access token exists, None otherwise
        """
        ...
