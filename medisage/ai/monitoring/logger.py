"""
AI Logger - one JSON line per pipeline stage of an orchestrated request.

Every orchestrated request gets a request_id, and every line carries it, so
a single medical query can be followed from routing to the history write:

    ai_request   -> kind, registry model, vendor model, prompt size
    ai_response  -> vendor, latency, token usage, structured or free text
    ai_error     -> stage (provider, parse, persistence) and message
    <event>      -> capability_denied, voice_shortcut, ...

Prompts appear as a short preview only; symptom descriptions can be
personal. Image bytes never reach this module.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from medisage.ai.providers.base import AIResponse

logger = logging.getLogger("medisage.ai")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(handler)

PREVIEW_CHARS = 100


def _preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    return text[:limit] + "..." if len(text) > limit else text


class AILogger:
    """
    Structured logger for the query pipeline.

    Usage:
        ai_logger.log_request(request_id, prompt, provider="together",
                              model="mistralai/Mixtral-8x7B-Instruct-v0.1",
                              metadata={"kind": "medical-query", "model_id": "mistral"})
        ai_logger.log_response(request_id, response)
    """

    def __init__(self, target: Optional[logging.Logger] = None):
        self._logger = target or logger

    def _emit(self, level: int, event: str, request_id: str, fields: Dict[str, Any]) -> None:
        record = {"event": event, "request_id": request_id}
        record.update({k: v for k, v in fields.items() if v is not None})
        record["timestamp"] = datetime.now(timezone.utc).isoformat()
        self._logger.log(level, json.dumps(record, default=str))

    def log_request(
        self,
        request_id: str,
        prompt: str,
        provider: str,
        model: str,
        user_id: Optional[UUID] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log the routing decision just before the upstream call."""
        self._emit(logging.INFO, "ai_request", request_id, {
            "provider": provider,
            "upstream_model": model,
            "user_id": str(user_id) if user_id else "anonymous",
            "prompt_chars": len(prompt),
            "prompt_preview": _preview(prompt),
            **(metadata or {}),
        })

    def log_response(
        self,
        request_id: str,
        response: AIResponse,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Only successful calls produce an AIResponse
        self._emit(logging.INFO, "ai_response", request_id, {
            "provider": response.provider.value,
            "upstream_model": response.model,
            "latency_ms": round(response.latency_ms, 2),
            "prompt_tokens": response.usage.prompt_tokens,
            "completion_tokens": response.usage.completion_tokens,
            "structured": response.data is not None,
            "answer_chars": len(response.content),
            **(metadata or {}),
        })

    def log_error(
        self,
        request_id: str,
        error: str,
        stage: str,
        metadata: Optional[Dict[str, Any]] = None,
        level: int = logging.ERROR,
    ) -> None:
        """
        Log a failure in the pipeline.

        Args:
            request_id: Request identifier
            error: Internal message, never shown to users
            stage: provider, parse or persistence
            metadata: Extra context such as a raw upstream preview
            level: WARNING for expected upstream trouble, ERROR otherwise
        """
        self._emit(level, "ai_error", request_id, {
            "stage": stage,
            "error": error,
            **(metadata or {}),
        })

    def log_event(
        self,
        request_id: str,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._emit(logging.INFO, event_type, request_id, dict(data or {}))


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
ai_logger = AILogger()
