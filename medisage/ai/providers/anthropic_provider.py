"""
Anthropic Provider - Claude client for the corporate tier.

Claude has no native JSON mode, so structured calls rely on an explicit
instruction in the system prompt and the shared strict decoder in the base
class. Images are sent as base64 content blocks.

API Documentation: https://docs.anthropic.com/en/api
"""

import base64
import logging
from typing import Optional

import anthropic
from anthropic import AsyncAnthropic

from medisage.ai.errors import ProviderTimeout
from medisage.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from medisage.core.config import settings

logger = logging.getLogger("medisage.ai.anthropic")

JSON_INSTRUCTION = (
    "IMPORTANT: You must respond with valid JSON only. No explanation, "
    "no markdown code blocks - just the raw JSON object."
)


class AnthropicProvider(AIProvider):
    """Anthropic Claude provider implementation."""

    provider_type = ProviderType.ANTHROPIC

    def __init__(self, api_key: str = None, timeout: Optional[float] = None):
        super().__init__(api_key=api_key or settings.ANTHROPIC_API_KEY, timeout=timeout)

        if self.is_configured:
            self._client = AsyncAnthropic(api_key=self.api_key, max_retries=0)
            logger.info("Anthropic provider initialized")
        else:
            self._client = None
            logger.warning("Anthropic API key not configured - provider unavailable")

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

        system = system_prompt or ""
        if json_mode:
            system = f"{system}\n\n{JSON_INSTRUCTION}".strip()

        request_params = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system:
            request_params["system"] = system

        return await self._create(request_params)

    async def _complete_with_image(
        self,
        prompt: str,
        image_bytes: bytes,
        mime_type: str,
        model: str,
        system_prompt: Optional[str],
        max_tokens: int,
    ) -> AIResponse:
        self._require_configured()

        return await self._create({
            "model": model,
            "max_tokens": max_tokens,
            "temperature": 0.3,
            "system": f"{system_prompt or ''}\n\n{JSON_INSTRUCTION}".strip(),
            "messages": [{
                "role": "user",
                "content": [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": mime_type,
                            "data": base64.b64encode(image_bytes).decode("ascii"),
                        },
                    },
                    {"type": "text", "text": prompt},
                ],
            }],
        })

    async def _create(self, request_params: dict) -> AIResponse:
        try:
            response = await self._client.messages.create(**request_params)
        except anthropic.APITimeoutError:
            raise ProviderTimeout(self.timeout, provider=self.provider_type.value)
        except anthropic.APIStatusError as e:
            raise self._error(f"Anthropic API error: {e.message}", status=e.status_code)
        except anthropic.APIError as e:
            raise self._error(f"Anthropic request failed: {e}")

        # Claude returns a list of content blocks
        content = ""
        for block in response.content or []:
            if hasattr(block, "text"):
                content += block.text

        usage = TokenUsage(
            prompt_tokens=response.usage.input_tokens if response.usage else 0,
            completion_tokens=response.usage.output_tokens if response.usage else 0,
        )

        return AIResponse(
            content=content.strip(),
            provider=self.provider_type,
            model=request_params["model"],
            usage=usage,
            metadata={"stop_reason": response.stop_reason},
        )


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
anthropic_provider = AnthropicProvider()
