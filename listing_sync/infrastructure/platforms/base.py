"""Shared HTTP plumbing for the marketplace adapters."""
from typing import Any

import httpx
import structlog

from listing_sync.application.interfaces.platform_adapter import (
    PlatformAdapter,
    PlatformRejectedError,
)
from listing_sync.config import settings
from listing_sync.domain.entities.platform import Platform

logger = structlog.get_logger(__name__)


class HttpPlatformAdapter(PlatformAdapter):
    """
    Base for adapters that talk to a REST API.

    A fresh ``httpx.AsyncClient`` is opened per call. ``transport`` lets tests
    plug in an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        platform: Platform,
        credentials: dict[str, Any] | None = None,
        *,
        timeout: float = settings.adapter_timeout_seconds,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(platform, credentials)
        self._timeout = timeout
        self._transport = transport

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                return await client.request(method, url, **kwargs)
            except httpx.RequestError as exc:
                logger.error(
                    "platform_connection_failed",
                    platform=self.platform.name,
                    method=method,
                    error=str(exc),
                )
                raise PlatformRejectedError(self.name, f"Failed to reach {self.name}: {exc}") from exc

    def _rejected(self, response: httpx.Response, fallback: str) -> PlatformRejectedError:
        message = self._error_message(response) or f"{fallback} ({response.status_code})"
        logger.error(
            "platform_request_failed",
            platform=self.platform.name,
            status_code=response.status_code,
            response=response.text[:500],
        )
        return PlatformRejectedError(self.name, message, status_code=response.status_code)

    def _error_message(self, response: httpx.Response) -> str | None:
        body = response_json(response)
        message = body.get("message")
        return str(message) if message else None


def response_json(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
