import json
from typing import Any, TypeVar

import httpx

from ..config import settings
from ..domain.errors import ConfigurationError, ProviderAPIError
from ..domain.ports import ChannelGateway

T = TypeVar("T")


class HttpChannelGateway(ChannelGateway):
    """Base for gateways that talk to a provider's REST API over httpx."""

    def __init__(self, base_url: str, timeout: float | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout if timeout is not None else settings.http_timeout_seconds

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout)


def require(value: T | None, message: str) -> T:
    """Return value, or raise ConfigurationError when it is missing."""
    if not value:
        raise ConfigurationError(message)
    return value


def response_json(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body, tolerating empty or non-JSON bodies."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def error_payload(response: httpx.Response) -> str:
    """Extract the provider's error payload without translating it."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    # Graph API wraps details in an "error" object
    if isinstance(data, dict) and "error" in data:
        return json.dumps(data["error"], ensure_ascii=False)
    return json.dumps(data, ensure_ascii=False)


def raise_for_provider_error(provider: str, response: httpx.Response, action: str = "") -> None:
    """Raise ProviderAPIError carrying the provider payload on non-2xx."""
    if response.is_success:
        return
    raise ProviderAPIError(provider, response.status_code, error_payload(response), action)


def response_id(provider: str, response: httpx.Response, action: str = "") -> str:
    """Return the `id` of a successful response; a body without one is an API error."""
    object_id = response_json(response).get("id")
    if not object_id:
        raise ProviderAPIError(
            provider,
            response.status_code,
            f"response has no id: {response.text}",
            action,
        )
    return str(object_id)
