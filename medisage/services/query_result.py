"""
Query Result Types - what the orchestrator hands back to the HTTP layer.

The orchestrator never raises core errors to its callers; every failure is
folded into a QueryOutcome with an ErrorKind, and the routers map that to a
status code.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from medisage.ai.schemas.query import QueryKind, QueryResult


class ErrorKind(str, Enum):
    """Why an orchestrated request failed."""
    VALIDATION = "validation"
    CAPABILITY_DENIED = "capability_denied"
    PROVIDER_ERROR = "provider_error"
    PROVIDER_TIMEOUT = "provider_timeout"
    PROVIDER_PARSE_ERROR = "provider_parse_error"


@dataclass
class QueryOutcome:
    """
    Result of one orchestrated request.

    Attributes:
        success: True when result holds a normalized QueryResult
        kind: Request kind this outcome answers
        result: The normalized result (None on failure)
        error: Failure classification (None on success)
        message: User-safe message; never upstream text
        model_id: Registry id of the model that served the call, if any
        details: Extra user-safe fields (tier and capability when denied)
        processing_time_ms: Wall time spent in the orchestrator
        request_id: Tracing id shared with the structured logs
    """
    success: bool
    kind: QueryKind
    result: Optional[QueryResult] = None
    error: Optional[ErrorKind] = None
    message: str = ""
    model_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    processing_time_ms: float = 0.0
    request_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "kind": self.kind.value,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error.value if self.error else None,
            "message": self.message,
            "model_id": self.model_id,
            "details": self.details,
            "processing_time_ms": self.processing_time_ms,
            "request_id": self.request_id,
        }
