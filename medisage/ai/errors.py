"""
Error taxonomy for the MediSage core.

Every failure the routing/model layer can produce is one of these types.
The orchestrator converts them into typed QueryOutcome values and the
routers map those to HTTP status codes, so nothing below the HTTP layer
has to know about status codes except ProviderError, which carries the
upstream one for logging.

    MediSageError
    ├── ValidationError         malformed request, rejected before routing
    ├── CapabilityDenied        feature not available at the caller's tier
    ├── ModelNotFound           unknown registry id
    ├── ProviderFailure         anything that went wrong talking to a vendor
    │   ├── ProviderError       non-success upstream answer / not configured
    │   ├── ProviderTimeout     upstream exceeded AI_REQUEST_TIMEOUT
    │   └── ProviderParseError  upstream answered but not in the expected shape
    ├── PersistenceError        storage failure
    └── NotFoundOrNotOwned      history record missing or owned by someone else
"""

from typing import Optional


class MediSageError(Exception):
    """Base class for all core errors."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(MediSageError):
    """Missing or malformed request fields (empty question, non-image upload...)."""


class CapabilityDenied(MediSageError):
    """The requested capability is not offered to the caller's tier."""

    def __init__(self, tier: str, capability: str, message: Optional[str] = None):
        super().__init__(
            message
            or f"{capability.replace('_', ' ').capitalize()} is not available on the {tier} tier"
        )
        self.tier = tier
        self.capability = capability


class ModelNotFound(MediSageError):
    """No model with the given id is registered."""

    def __init__(self, model_id: str):
        super().__init__(f"Unknown model: {model_id}")
        self.model_id = model_id


class ProviderFailure(MediSageError):
    """Common base for upstream AI failures."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class ProviderError(ProviderFailure):
    """Upstream returned a non-success status (status is None when unconfigured)."""

    def __init__(self, message: str, status: Optional[int] = None, provider: Optional[str] = None):
        super().__init__(message, provider=provider)
        self.status = status


class ProviderTimeout(ProviderFailure):
    """Upstream call did not complete within the configured bound."""

    def __init__(self, timeout_s: float, provider: Optional[str] = None):
        super().__init__(f"Provider call exceeded {timeout_s:.1f}s", provider=provider)
        self.timeout_s = timeout_s


class ProviderParseError(ProviderFailure):
    """Upstream text could not be decoded into the expected structure."""

    def __init__(self, message: str, raw: str = "", provider: Optional[str] = None):
        super().__init__(message, provider=provider)
        self.raw = raw


class PersistenceError(MediSageError):
    """The relational store rejected or failed an operation."""


class NotFoundOrNotOwned(MediSageError):
    """
    The history record does not exist or belongs to another user.

    Both cases share one error so callers can't discover other users' ids.
    """
