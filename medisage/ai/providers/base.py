"""
Base AI Provider - Abstract interface for all LLM providers.

This module defines the contract that all AI providers must follow.
It ensures consistent behavior regardless of which vendor serves a tier.

Design Pattern: Template Method + Strategy
==========================================
The public methods (generate_text, generate_json, analyze_image) live here
and own the cross-cutting behavior:
- the MediSage system prompt for the request kind (callers never pass one)
- a hard timeout around every upstream call
- latency measurement
- strict JSON decoding of structured answers

Each vendor subclass only implements the wire protocol in _complete() and,
when it supports vision, _complete_with_image(). The orchestrator never sees
vendor-specific shapes, only AIResponse or one of the provider errors.

Example:
    provider = TogetherProvider()
    response = await provider.generate_text("What is a fever?", model="mistralai/...")
    print(response.content)
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from medisage.ai.errors import ProviderError, ProviderParseError, ProviderTimeout
from medisage.ai.prompts import system_prompt_for
from medisage.ai.schemas.query import QueryKind
from medisage.core.config import settings

logger = logging.getLogger("medisage.ai")


class ProviderType(str, Enum):
    """Enum of supported AI providers."""
    TOGETHER = "together"
    GEMINI = "gemini"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


@dataclass
class TokenUsage:
    """
    Token usage statistics for an AI request.

    Not every vendor reports usage; zeros mean "unknown".
    """
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        """Calculate total if not provided."""
        if self.total_tokens == 0:
            self.total_tokens = self.prompt_tokens + self.completion_tokens


@dataclass
class AIResponse:
    """
    Standardized successful response from any AI provider.

    Failures are never represented here; they are raised as
    ProviderError / ProviderTimeout / ProviderParseError.

    Attributes:
        content: The generated text, exactly as the vendor returned it
        provider: Which provider generated this response
        model: The upstream model name used
        usage: Token usage statistics
        latency_ms: How long the request took
        data: Parsed JSON object for structured calls, None for plain text
        metadata: Additional provider-specific data
        created_at: Timestamp of the response
    """
    content: str
    provider: ProviderType
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: float = 0.0
    data: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "content": self.content[:100] + "..." if len(self.content) > 100 else self.content,
            "provider": self.provider.value,
            "model": self.model,
            "tokens": {
                "prompt": self.usage.prompt_tokens,
                "completion": self.usage.completion_tokens,
                "total": self.usage.total_tokens,
            },
            "latency_ms": self.latency_ms,
            "structured": self.data is not None,
            "created_at": self.created_at.isoformat(),
        }


class AIProvider(ABC):
    """
    Abstract base class for AI providers.

    Subclasses set provider_type, create their SDK/HTTP client in __init__
    and implement _complete(). They translate vendor exceptions into
    ProviderError and never return partial results.
    """

    provider_type: ProviderType

    def __init__(self, api_key: str = "", timeout: Optional[float] = None):
        self.api_key = api_key
        self.timeout = timeout if timeout is not None else settings.AI_REQUEST_TIMEOUT

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    # -----------------------------------------------------------------------
    # VENDOR HOOKS
    # -----------------------------------------------------------------------

    @abstractmethod
    async def _complete(
        self,
        prompt: str,
        model: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> AIResponse:
        """Send one text prompt upstream and return the raw text answer."""

    async def _complete_with_image(
        self,
        prompt: str,
        image_bytes: bytes,
        mime_type: str,
        model: str,
        system_prompt: Optional[str],
        max_tokens: int,
    ) -> AIResponse:
        """Send a prompt plus one image upstream. Vision-capable vendors override this."""
        raise ProviderError(
            f"{self.provider_type.value} does not accept image input",
            provider=self.provider_type.value,
        )

    # -----------------------------------------------------------------------
    # PUBLIC CONTRACT
    # -----------------------------------------------------------------------

    async def generate_text(
        self,
        prompt: str,
        model: str,
        kind: Optional[QueryKind] = None,
        temperature: float = 0.7,
        max_tokens: int = 800,
    ) -> AIResponse:
        """
        Generate a free-text answer framed by the system prompt for `kind`.

        Raises:
            ProviderError: upstream returned a non-success status
            ProviderTimeout: no answer within self.timeout seconds
        """
        return await self._bounded(
            self._complete(prompt, model, system_prompt_for(kind), temperature, max_tokens, False)
        )

    async def generate_json(
        self,
        prompt: str,
        model: str,
        kind: Optional[QueryKind] = None,
        temperature: float = 0.3,
        max_tokens: int = 1500,
    ) -> AIResponse:
        """
        Generate a structured answer and decode it.

        The decoded object is returned in AIResponse.data.

        Raises:
            ProviderParseError: the answer is not a JSON object
        """
        response = await self._bounded(
            self._complete(prompt, model, system_prompt_for(kind), temperature, max_tokens, True)
        )
        response.data = self.parse_json(response.content)
        return response

    async def analyze_image(
        self,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
        model: str,
        kind: Optional[QueryKind] = QueryKind.MEDICINE_SCAN,
        max_tokens: int = 1000,
    ) -> AIResponse:
        """Ask a vision model about an image; the answer must be a JSON object."""
        response = await self._bounded(
            self._complete_with_image(
                prompt, image_bytes, mime_type, model, system_prompt_for(kind), max_tokens
            )
        )
        response.data = self.parse_json(response.content)
        return response

    # -----------------------------------------------------------------------
    # HELPERS
    # -----------------------------------------------------------------------

    async def _bounded(self, call) -> AIResponse:
        """
        Await an upstream call with a hard deadline.

        asyncio.wait_for cancels the call on expiry, so a late answer is
        dropped and can never be reported as a completed response.
        """
        start_time = time.time()
        try:
            response = await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"AI Provider Timeout [{self.provider_type.value}] after "
                f"{self._measure_latency(start_time):.0f}ms"
            )
            raise ProviderTimeout(self.timeout, provider=self.provider_type.value)

        response.latency_ms = self._measure_latency(start_time)
        logger.info(
            f"{self.provider_type.value} request completed in {response.latency_ms:.0f}ms, "
            f"tokens: {response.usage.total_tokens}"
        )
        return response

    def _require_configured(self) -> None:
        if not self.is_configured:
            raise ProviderError(
                f"{self.provider_type.value} API key not configured",
                provider=self.provider_type.value,
            )

    def _error(self, message: str, status: Optional[int] = None) -> ProviderError:
        """Build (and log) a ProviderError for this provider."""
        logger.error(f"AI Provider Error [{self.provider_type.value}] status={status}: {message}")
        return ProviderError(message, status=status, provider=self.provider_type.value)

    def parse_json(self, content: str) -> Dict[str, Any]:
        """
        Strictly decode a JSON object from model output.

        A single surrounding Markdown code fence is tolerated since several
        vendors add one even when told not to. Anything else that isn't a
        JSON object is rejected.
        """
        text = (content or "").strip()
        if text.startswith("```"):
            text = text.split("\n", 1)[1] if "\n" in text else ""
            if text.rstrip().endswith("```"):
                text = text.rstrip()[:-3]
            text = text.strip()

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ProviderParseError(
                f"Invalid JSON response: {e}",
                raw=content or "",
                provider=self.provider_type.value,
            )

        if not isinstance(data, dict):
            raise ProviderParseError(
                "Expected a JSON object",
                raw=content or "",
                provider=self.provider_type.value,
            )
        return data

    def _measure_latency(self, start_time: float) -> float:
        """Calculate latency in milliseconds."""
        return (time.time() - start_time) * 1000
