"""
AI Router Module - tier-based model selection.

Maps a subscription tier and a requested capability to exactly one
registered model, or refuses with CapabilityDenied.
"""

from medisage.ai.router.tier_router import PERSONAL_DENIED, TierRouter, tier_router

__all__ = [
    "PERSONAL_DENIED",
    "TierRouter",
    "tier_router",
]
