"""
Together Provider - open-weight models over Together.ai's REST API.

Together hosts the personal-tier models (Mixtral, Llama 3). There is no
official async SDK in our stack, so this adapter speaks the plain
completions endpoint with httpx:

    POST {TOGETHER_BASE_URL}/completions
    Authorization: Bearer <TOGETHER_API_KEY>
    {"model": ..., "prompt": "<s>[INST] ... [/INST]", "temperature": ..., "max_tokens": ...}

    -> {"choices": [{"text": "..."}], "usage": {"prompt_tokens": .., "completion_tokens": ..}}

The instruct models have no separate system slot, so the system prompt is
folded into the [INST] block.

API Documentation: https://docs.together.ai/reference/completions
"""

import logging
from typing import Optional

import httpx

from medisage.ai.errors import ProviderParseError, ProviderTimeout
from medisage.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from medisage.core.config import settings

logger = logging.getLogger("medisage.ai.together")

JSON_INSTRUCTION = (
    "Respond ONLY with a valid JSON object. No explanation, no markdown code blocks."
)


class TogetherProvider(AIProvider):
    """
    Together.ai completions provider.

    Usage:
        provider = TogetherProvider()
        response = await provider.generate_text(
            "What are the symptoms of the flu?",
            model="mistralai/Mixtral-8x7B-Instruct-v0.1",
        )
    """

    provider_type = ProviderType.TOGETHER

    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Together provider.

        Args:
            api_key: API key (default: settings.TOGETHER_API_KEY)
            base_url: API root (default: settings.TOGETHER_BASE_URL)
            timeout: Per-call bound in seconds (default: settings.AI_REQUEST_TIMEOUT)
            transport: Optional httpx transport, used by tests to stub the wire
        """
        super().__init__(api_key=api_key or settings.TOGETHER_API_KEY, timeout=timeout)
        self.base_url = (base_url or settings.TOGETHER_BASE_URL).rstrip("/")
        self._transport = transport

        if self.is_configured:
            logger.info(f"Together provider initialized at {self.base_url}")
        else:
            logger.warning("Together API key not configured - provider unavailable")

    @staticmethod
    def build_instruct_prompt(prompt: str, system_prompt: Optional[str], json_mode: bool) -> str:
        """Wrap system + user text in the Mistral/Llama instruct template."""
        parts = []
        if system_prompt:
            parts.append(system_prompt.strip())
        if json_mode:
            parts.append(JSON_INSTRUCTION)
        parts.append(prompt.strip())
        body = "\n\n".join(parts)
        return f"<s>[INST] {body} [/INST]"

    async def _complete(
        self,
        prompt: str,
        model: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> AIResponse:
        self._require_configured()

        payload = {
            "model": model,
            "prompt": self.build_instruct_prompt(prompt, system_prompt, json_mode),
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/completions", json=payload, headers=headers
                )
            except httpx.TimeoutException:
                raise ProviderTimeout(self.timeout, provider=self.provider_type.value)
            except httpx.RequestError as e:
                raise self._error(f"Together request failed: {e}")

        if response.status_code >= 400:
            # Body is logged, never forwarded to the caller
            raise self._error(
                f"Together API error: {response.text[:500]}", status=response.status_code
            )

        try:
            data = response.json()
            content = data["choices"][0]["text"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderParseError(
                f"Unexpected Together response envelope: {e}",
                raw=response.text[:2000],
                provider=self.provider_type.value,
            )

        usage_data = data.get("usage") or {}
        usage = TokenUsage(
            prompt_tokens=usage_data.get("prompt_tokens", 0) or 0,
            completion_tokens=usage_data.get("completion_tokens", 0) or 0,
        )

        return AIResponse(
            content=content.strip(),
            provider=self.provider_type,
            model=model,
            usage=usage,
            metadata={"finish_reason": data["choices"][0].get("finish_reason")},
        )


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
together_provider = TogetherProvider()
