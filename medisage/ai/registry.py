"""
Model Registry - the static catalog of models MediSage can route to.

Each entry binds a public model id (what the web client shows in its model
picker) to a tier, a capability set and the provider adapter that serves it.
The catalog is built once at import time from settings and never mutated;
the Tier Router and the /api/models endpoint only ever read it.

Tiers are strict partitions: a personal-tier request resolves only to
personal models and a corporate request only to corporate ones.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from medisage.ai.errors import ModelNotFound
from medisage.ai.providers.base import ProviderType
from medisage.ai.schemas.query import Capability, SubscriptionTier
from medisage.core.config import settings

_FULL = frozenset({
    Capability.TEXT_GENERATION,
    Capability.IMAGE_ANALYSIS,
    Capability.VOICE_PROCESSING,
})
_TEXT_ONLY = frozenset({Capability.TEXT_GENERATION})


@dataclass(frozen=True)
class ModelDescriptor:
    """
    One routable model.

    Attributes:
        id: Registry id ("gemini", "mistral", ...)
        name: Display name
        tier: The single tier allowed to use it
        capabilities: Features the model supports
        provider: Which adapter serves it
        upstream_model: Vendor-side model name passed to the adapter
        description: Short blurb for the model picker
    """
    id: str
    name: str
    tier: SubscriptionTier
    capabilities: frozenset
    provider: ProviderType
    upstream_model: str
    description: str = ""

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "tier": self.tier.value,
            "capabilities": sorted(c.value for c in self.capabilities),
            "provider": self.provider.value,
            "description": self.description,
        }


# ---------------------------------------------------------------------------
# CATALOG (registration order matters: it is the router's fallback order)
# ---------------------------------------------------------------------------
MODEL_REGISTRY: Tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        id="gemini",
        name="Gemini Pro",
        tier=SubscriptionTier.CORPORATE,
        capabilities=_FULL,
        provider=ProviderType.GEMINI,
        upstream_model=settings.GEMINI_MODEL,
        description="Google's multimodal model with medicine image recognition",
    ),
    ModelDescriptor(
        id="gpt4",
        name="GPT-4 Turbo",
        tier=SubscriptionTier.CORPORATE,
        capabilities=_FULL,
        provider=ProviderType.OPENAI,
        upstream_model=settings.OPENAI_MODEL,
        description="OpenAI's most capable model for detailed medical answers",
    ),
    ModelDescriptor(
        id="claude3",
        name="Claude 3 Opus",
        tier=SubscriptionTier.CORPORATE,
        capabilities=_FULL,
        provider=ProviderType.ANTHROPIC,
        upstream_model=settings.ANTHROPIC_MODEL,
        description="Anthropic's model for careful, well-cited explanations",
    ),
    ModelDescriptor(
        id="mistral",
        name="Mixtral 8x7B Instruct",
        tier=SubscriptionTier.PERSONAL,
        capabilities=_TEXT_ONLY,
        provider=ProviderType.TOGETHER,
        upstream_model=settings.MISTRAL_MODEL,
        description="Fast open-weight model for everyday health questions",
    ),
    ModelDescriptor(
        id="llama3",
        name="Llama 3 70B",
        tier=SubscriptionTier.PERSONAL,
        capabilities=_TEXT_ONLY,
        provider=ProviderType.TOGETHER,
        upstream_model=settings.LLAMA_MODEL,
        description="Meta's open-weight chat model",
    ),
)

_BY_ID: Dict[str, ModelDescriptor] = {m.id: m for m in MODEL_REGISTRY}


def list_models() -> List[ModelDescriptor]:
    """All registered models in registration order."""
    return list(MODEL_REGISTRY)


def find_model(model_id: str) -> ModelDescriptor:
    """
    Look up a model by registry id.

    Raises:
        ModelNotFound: no model with that id
    """
    try:
        return _BY_ID[model_id]
    except KeyError:
        raise ModelNotFound(model_id)
