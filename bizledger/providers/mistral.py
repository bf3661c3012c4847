"""Mistral chat-completions client.

A single attempt per call with a bounded timeout. Every failure mode
(missing key, network error, timeout, non-2xx status, malformed body)
is raised as ProviderError so callers can fall back to local text.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from bizledger.errors import ProviderError
from bizledger.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class Completion:
    """Generated text and the token usage reported by the provider."""

    text: str
    tokens: int
    model: str


class MistralProvider:
    """
    Async client for ``POST {base_url}/chat/completions``.

    Usage:
        provider = MistralProvider(settings)
        completion = await provider.complete("You are ...", "Analyse ...")
        await provider.close()
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize provider.

        Args:
            settings: Application settings (API key, model, base URL, timeout)
            client: Preconfigured HTTP client (tests pass one with a mock transport)
        """
        self._api_key = settings.mistral_api_key
        self.model = settings.mistral_model
        self.base_url = settings.mistral_base_url.rstrip("/")
        self.timeout = settings.provider_timeout_seconds
        self._temperature = settings.provider_temperature
        self._max_tokens = settings.provider_max_tokens
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def close(self):
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self.client.aclose()

    async def complete(self, system_prompt: str, message: str) -> Completion:
        """
        Send a system instruction and a user message, return the completion.

        Raises:
            ProviderError: on any failure
        """
        if not self.configured:
            raise ProviderError("Completion provider is not configured")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": message},
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        logger.debug(f"POST {self.base_url}/chat/completions ({len(message)} chars)")
        try:
            response = await self.client.post(
                "/chat/completions",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            raise ProviderError(f"Provider timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"Provider returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Provider request failed: {e}") from e
        except ValueError as e:
            raise ProviderError("Provider returned invalid JSON") from e

        try:
            text = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("Provider response has no completion text") from e
        if not isinstance(text, str) or not text.strip():
            raise ProviderError("Provider returned an empty completion")

        usage = body.get("usage") or {}
        tokens = int(usage.get("total_tokens") or 0)
        logger.info(f"Provider answered ({tokens} tokens)")
        return Completion(text=text, tokens=tokens, model=body.get("model", self.model))
