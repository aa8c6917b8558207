"""Forward form submissions to the external webhook."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from .errors import ConfigurationError, UpstreamError

logger = logging.getLogger("rentals.webhook")

TOKEN_FIELD = "token"


@dataclass
class _WebhookConfig:
    url: str
    secret: str


def _normalize_url(url: Optional[str]) -> str:
    cleaned = (url or "").strip()
    if not cleaned:
        raise ConfigurationError("GS_WEBHOOK_URL environment variable not set")
    return cleaned


def _normalize_secret(secret: Optional[str]) -> str:
    cleaned = (secret or "").strip()
    if not cleaned:
        raise ConfigurationError("WHIRLY_SECRET environment variable not set")
    return cleaned


def build_payload(payload: Mapping[str, Any], secret: str) -> Dict[str, Any]:
    """Return a copy of ``payload`` carrying the shared secret."""

    return {**payload, TOKEN_FIELD: secret}


class WebhookForwarder:
    """POST payloads to the configured webhook with the shared secret attached.

    The request has no timeout and is never retried.
    """

    def __init__(
        self,
        url: Optional[str],
        secret: Optional[str],
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = _WebhookConfig(url=_normalize_url(url), secret=_normalize_secret(secret))
        self._transport = transport

    @property
    def url(self) -> str:
        return self._config.url

    async def forward(self, payload: Mapping[str, Any]) -> None:
        body = build_payload(payload, self._config.secret)

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=None,
                follow_redirects=True,
            ) as client:
                response = await client.post(self._config.url, json=body)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UpstreamError(f"Failed to contact webhook: {exc}") from exc

        if not response.is_success:
            raise UpstreamError(
                f"Webhook responded with {response.status_code} {response.reason_phrase}".rstrip(),
                status_code=response.status_code,
            )

        logger.debug("Forwarded submission to webhook (status=%s)", response.status_code)


__all__ = ["TOKEN_FIELD", "WebhookForwarder", "build_payload"]
