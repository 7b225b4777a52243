"""
Errors raised while publishing a post to a provider.

Every error here is terminal for a single (post, provider) attempt only.
The orchestrator catches them at the provider-dispatch boundary and turns
them into a failure notification.
"""


class PublishError(Exception):
    """Base class for per-attempt publishing failures."""

    pass


class ConfigurationError(PublishError):
    """A post or credential lacks something the provider requires."""

    pass


class UnknownProviderError(ConfigurationError):
    """No gateway is registered for the requested provider name."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unknown provider: {provider}")
        self.provider = provider


class CredentialError(PublishError):
    """Credential lookup failed or returned no usable token."""

    pass


class ProviderAPIError(PublishError):
    """Non-success response from a provider API.

    The provider's own payload is kept verbatim in the message so the
    notification shows what the network actually said.
    """

    def __init__(self, provider: str, status_code: int, payload: str, action: str = "") -> None:
        prefix = f"{provider} API error ({status_code})"
        if action:
            prefix = f"{prefix} during {action}"
        super().__init__(f"{prefix}: {payload}")
        self.provider = provider
        self.status_code = status_code
        self.payload = payload


class MediaProcessingError(PublishError):
    """Media could not be fetched, registered or processed."""

    pass


class MediaTimeoutError(MediaProcessingError):
    """Provider did not finish processing the media in time."""

    def __init__(self, provider: str, container_id: str, attempts: int) -> None:
        super().__init__(
            f"{provider} media container {container_id} was not ready after {attempts} checks (timed out)"
        )
        self.provider = provider
        self.container_id = container_id
        self.attempts = attempts
