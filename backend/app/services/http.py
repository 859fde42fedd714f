import asyncio
import logging
from typing import Any

import httpx

from app.config import settings
from app.errors import NetworkError, ProviderError

logger = logging.getLogger(__name__)

_client: httpx.AsyncClient | None = None
_client_loop_id: int | None = None


def _get_client() -> httpx.AsyncClient:
    global _client, _client_loop_id
    loop_id = id(asyncio.get_running_loop())
    if _client is None or _client.is_closed or _client_loop_id != loop_id:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout, connect=4.0),
        )
        _client_loop_id = loop_id
    return _client


def _via_proxy(url: str, params: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    if not settings.proxy_endpoint:
        return url, params
    target = str(httpx.URL(url, params=params))
    return settings.proxy_endpoint, {"url": target}


async def get_json(url: str, params: dict[str, Any], provider: str) -> Any:
    """GET a JSON document, routed through the relay when one is configured.

    Raises NetworkError when the provider cannot be reached and ProviderError
    on non-2xx statuses, redirect loops or bodies that cannot be decoded.
    """
    client = _get_client()
    request_url, request_params = _via_proxy(url, params)

    try:
        resp = await client.get(request_url, params=request_params)
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        logger.info("%s provider_error status=%s", provider, status)
        raise ProviderError(
            f"{provider} returned HTTP {status}", upstream_status=status
        ) from exc
    except (httpx.TransportError, httpx.InvalidURL) as exc:
        logger.info("%s network_error %s", provider, type(exc).__name__)
        raise NetworkError(f"Could not reach {provider}") from exc
    except httpx.RequestError as exc:
        logger.info("%s provider_error %s", provider, type(exc).__name__)
        raise ProviderError(f"{provider} returned an unreadable response") from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise ProviderError(f"{provider} returned an unreadable response") from exc
