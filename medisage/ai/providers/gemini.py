"""
Gemini Provider - Google's GenAI SDK.

Gemini is the default corporate-tier model: it handles text, structured
JSON (native response_mime_type) and vision in one API, which makes it the
natural fit for medicine-image identification and voice-command analysis.

Uses the async surface of the SDK (client.aio) so a slow Gemini call does
not block other in-flight requests.
"""

import logging
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from medisage.ai.errors import ProviderTimeout
from medisage.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from medisage.core.config import settings

logger = logging.getLogger("medisage.ai.gemini")


class GeminiProvider(AIProvider):
    provider_type = ProviderType.GEMINI

    def __init__(self, api_key: str = None, timeout: Optional[float] = None):
        super().__init__(api_key=api_key or settings.GEMINI_API_KEY, timeout=timeout)

        if self.is_configured:
            self._client = genai.Client(api_key=self.api_key)
            logger.info("Gemini provider initialized")
        else:
            self._client = None
            logger.warning("Gemini API key not configured")

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

        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            system_instruction=system_prompt,
            response_mime_type="application/json" if json_mode else None,
        )
        return await self._generate(model, prompt, config)

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

        config = types.GenerateContentConfig(
            temperature=0.3,
            max_output_tokens=max_tokens,
            system_instruction=system_prompt,
            response_mime_type="application/json",
        )
        contents = [
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
            prompt,
        ]
        return await self._generate(model, contents, config)

    async def _generate(self, model, contents, config) -> AIResponse:
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as e:
            raise self._error(f"Gemini API error: {e.message}", status=e.code)
        # The SDK lets transport errors from httpx through unwrapped
        except httpx.TimeoutException:
            raise ProviderTimeout(self.timeout, provider=self.provider_type.value)
        except httpx.HTTPError as e:
            raise self._error(f"Gemini request failed: {e}")
        except Exception as e:
            raise self._error(f"Gemini request failed: {type(e).__name__}: {e}")

        return AIResponse(
            content=(response.text or "").strip(),
            provider=self.provider_type,
            model=model,
            usage=self._extract_usage(response),
            metadata=self._extract_metadata(response),
        )

    def _extract_usage(self, response) -> TokenUsage:
        # usage_metadata is None when the API doesn't report usage
        meta = response.usage_metadata
        if not meta:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=meta.prompt_token_count or 0,
            completion_tokens=meta.candidates_token_count or 0,
        )

    def _extract_metadata(self, response) -> dict:
        metadata = {}
        if response.candidates:
            finish_reason = response.candidates[0].finish_reason
            if finish_reason is not None:
                metadata["finish_reason"] = str(finish_reason)
        return metadata


# Singleton instance
gemini_provider = GeminiProvider()
