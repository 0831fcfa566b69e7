"""Upstream chat-completion relay client.

The relay client performs exactly one POST per call against an
OpenAI-compatible ``/chat/completions`` endpoint (OpenRouter by default) and
returns the text of the first completion.  There is deliberately no retry,
no timeout and no streaming: a call is a single request/response round trip
and failures are reported to the caller as :class:`RelayError` subclasses.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from conceptcraft.core.config import ConceptcraftConfig
from conceptcraft.core.errors import ConfigurationError, UpstreamError
from conceptcraft.core.prompt_composer import UpstreamMessage

logger = logging.getLogger(__name__)


class RelayClient:
    """Async client for the upstream chat-completion provider.

    Args:
        api_key: Bearer credential.  When empty, :meth:`complete` raises
            :class:`ConfigurationError` without touching the network.
        base_url: Full chat-completions URL.
        model: Default model identifier.
        max_tokens: Completion token limit.
        temperature: Sampling temperature.
        referer: Value of the ``HTTP-Referer`` attribution header.
        title: Value of the ``X-Title`` attribution header.
        transport: Optional ``httpx`` transport, used by tests to stub the
            provider.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://openrouter.ai/api/v1/chat/completions",
        model: str = "google/gemini-2.0-flash-exp:free",
        max_tokens: int = 4000,
        temperature: float = 0.7,
        referer: str = "",
        title: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.referer = referer
        self.title = title

        # No timeout: completions can take arbitrarily long.
        self.client = httpx.AsyncClient(timeout=None, transport=transport)

    @classmethod
    def from_config(
        cls,
        config: ConceptcraftConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RelayClient:
        """Build a relay client from application configuration."""
        return cls(
            api_key=config.openrouter_api_key,
            base_url=config.openrouter_base_url,
            model=config.model_id,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            referer=config.http_referer,
            title=config.app_title,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.title:
            headers["X-Title"] = self.title
        return headers

    async def complete(
        self,
        messages: Sequence[UpstreamMessage],
        model: str | None = None,
    ) -> str:
        """Send *messages* upstream and return the first completion's text.

        Args:
            messages: Ordered chat messages.
            model: Model override for this call.

        Returns:
            The ``choices[0].message.content`` string.

        Raises:
            ConfigurationError: No API key is configured.
            UpstreamError: Non-success status or malformed response body.
            httpx.HTTPError: Transport failure reaching the provider.
        """
        if not self.api_key:
            raise ConfigurationError(
                "OpenRouter API key not configured. "
                "Please set OPENROUTER_API_KEY environment variable."
            )

        model = model or self.model
        payload = {
            "model": model,
            "messages": [message.to_dict() for message in messages],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        logger.info(f"Making relay request with model: {model}")
        response = await self.client.post(self.base_url, json=payload, headers=self._headers())

        if not response.is_success:
            logger.error(f"Relay request failed: {response.status_code}")
            raise UpstreamError(response.status_code, response.text)

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamError(
                response.status_code,
                response.text,
                message=f"OpenRouter API returned a malformed response: {e!r}",
            ) from e

        if not isinstance(content, str):
            raise UpstreamError(
                response.status_code,
                response.text,
                message="OpenRouter API returned a completion without text content",
            )

        logger.debug(f"Relay response received | content_length={len(content)} chars")
        return content

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
