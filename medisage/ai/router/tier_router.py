"""
Tier Router - picks the concrete model for a (tier, capability) pair.

Routing Rules:
==============
1. Personal tier asking for image analysis or voice processing
   -> CapabilityDenied immediately, before looking at the registry.
   Personal users never get silently downgraded or upgraded.
2. Candidates = registry entries with model.tier == tier that support the
   capability. Tiers are disjoint catalogs, never "<= tier".
3. If the configured default for the tier is a candidate it wins,
   otherwise the first candidate in registration order.
4. No candidates -> CapabilityDenied.

The router is pure: same registry + same defaults -> same model, every call.
Tier is always an explicit argument; the router never reads it from a user
object or any ambient state.
"""

import logging
from typing import Dict, Optional, Sequence

from medisage.ai.errors import CapabilityDenied
from medisage.ai.registry import MODEL_REGISTRY, ModelDescriptor
from medisage.ai.schemas.query import Capability, SubscriptionTier
from medisage.core.config import settings

logger = logging.getLogger("medisage.ai.router")

PERSONAL_DENIED = frozenset({Capability.IMAGE_ANALYSIS, Capability.VOICE_PROCESSING})


class TierRouter:
    """
    Resolves the model that serves a request.

    Usage:
        model = tier_router.select_model(SubscriptionTier.CORPORATE, Capability.IMAGE_ANALYSIS)
        provider = get_provider(model.provider)
    """

    def __init__(
        self,
        registry: Optional[Sequence[ModelDescriptor]] = None,
        defaults: Optional[Dict[SubscriptionTier, str]] = None,
    ):
        self.registry = tuple(registry if registry is not None else MODEL_REGISTRY)
        self.defaults = defaults if defaults is not None else {
            SubscriptionTier.PERSONAL: settings.PERSONAL_DEFAULT_MODEL,
            SubscriptionTier.CORPORATE: settings.CORPORATE_DEFAULT_MODEL,
        }

    def select_model(self, tier: SubscriptionTier, capability: Capability) -> ModelDescriptor:
        """
        Select the model for a tier and capability.

        Raises:
            CapabilityDenied: the tier is not allowed the capability, or no
                model of the tier supports it
        """
        tier = SubscriptionTier(tier)
        capability = Capability(capability)

        if tier == SubscriptionTier.PERSONAL and capability in PERSONAL_DENIED:
            raise CapabilityDenied(tier.value, capability.value)

        candidates = [
            m for m in self.registry
            if m.tier == tier and m.supports(capability)
        ]
        if not candidates:
            raise CapabilityDenied(tier.value, capability.value)

        default_id = self.defaults.get(tier)
        for model in candidates:
            if model.id == default_id:
                return model

        logger.debug(
            f"Default model {default_id!r} does not qualify for {tier.value}/{capability.value}, "
            f"falling back to {candidates[0].id!r}"
        )
        return candidates[0]


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
tier_router = TierRouter()
