"""
OpenAI Provider - GPT client for the corporate tier.

GPT-4 Turbo answers medical questions, returns symptom analyses through
OpenAI's JSON mode, and identifies medicines from images passed as
base64 data URLs.

API Documentation: https://platform.openai.com/docs/api-reference
"""

import base64
import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from medisage.ai.errors import ProviderParseError, ProviderTimeout
from medisage.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from medisage.core.config import settings

logger = logging.getLogger("medisage.ai.openai")


class OpenAIProvider(AIProvider):
    """
    OpenAI GPT provider implementation.

    Usage:
        provider = OpenAIProvider()
        response = await provider.generate_json(
            prompt="Analyze these symptoms: ...",
            model="gpt-4-turbo",
            kind=QueryKind.SYMPTOM_CHECK,
        )
        response.data["conditions"]
    """

    provider_type = ProviderType.OPENAI

    def __init__(self, api_key: str = None, timeout: Optional[float] = None):
        """
        Initialize the OpenAI provider.

        Args:
            api_key: API key (default: from settings.OPENAI_API_KEY)
            timeout: Per-call bound in seconds (default: settings.AI_REQUEST_TIMEOUT)
        """
        super().__init__(api_key=api_key or settings.OPENAI_API_KEY, timeout=timeout)

        if self.is_configured:
            # Retries stay off: one upstream call per orchestrated request
            self._client = AsyncOpenAI(api_key=self.api_key, max_retries=0)
            logger.info("OpenAI provider initialized")
        else:
            self._client = None
            logger.warning("OpenAI API key not configured - provider unavailable")

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

        messages = []
        system_content = system_prompt or ""
        if json_mode:
            # JSON mode requires the word "JSON" to appear in the messages
            system_content += "\n\nYou must respond with valid JSON only, no explanation."
        if system_content:
            messages.append({"role": "system", "content": system_content.strip()})
        messages.append({"role": "user", "content": prompt})

        params = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            params["response_format"] = {"type": "json_object"}

        return await self._create(params)

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

        image_url = f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ],
        })

        return await self._create({
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "response_format": {"type": "json_object"},
        })

    async def _create(self, params: dict) -> AIResponse:
        try:
            response = await self._client.chat.completions.create(**params)
        except openai.APITimeoutError:
            raise ProviderTimeout(self.timeout, provider=self.provider_type.value)
        except openai.APIStatusError as e:
            raise self._error(f"OpenAI API error: {e.message}", status=e.status_code)
        except openai.APIError as e:
            raise self._error(f"OpenAI request failed: {e}")

        if not response.choices:
            raise ProviderParseError(
                "OpenAI response has no choices",
                raw=str(response)[:500],
                provider=self.provider_type.value,
            )

        choice = response.choices[0]
        content = choice.message.content or ""
        usage = TokenUsage(
            prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
            completion_tokens=response.usage.completion_tokens if response.usage else 0,
        )

        return AIResponse(
            content=content.strip(),
            provider=self.provider_type,
            model=params["model"],
            usage=usage,
            metadata={"finish_reason": choice.finish_reason},
        )


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
openai_provider = OpenAIProvider()
