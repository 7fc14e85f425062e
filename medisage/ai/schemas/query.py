"""
Query contracts - the provider-independent request and result types.

The HTTP layer builds a QueryRequest, the orchestrator turns it into
exactly one QueryResult of the matching kind:

    TextQuery      -> TextAnswer
    SymptomCheck   -> SymptomAnalysis
    ImageQuery     -> MedicineInfo
    VoiceCommand   -> VoiceReply

Results are built from upstream JSON with the from_payload() constructors,
which reject shape mismatches with ProviderParseError instead of guessing.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional
from uuid import UUID

from medisage.ai.errors import ProviderParseError


class SubscriptionTier(str, Enum):
    """Subscription class gating which models a user may invoke."""
    PERSONAL = "personal"
    CORPORATE = "corporate"


class Capability(str, Enum):
    """Feature flags a registered model may support."""
    TEXT_GENERATION = "text_generation"
    IMAGE_ANALYSIS = "image_analysis"
    VOICE_PROCESSING = "voice_processing"


class QueryKind(str, Enum):
    """
    Kind tag shared by requests, results and history records.

    Values match the itemType strings the web client sends to
    /api/user/save-item.
    """
    MEDICAL_QUERY = "medical-query"
    SYMPTOM_CHECK = "symptom-check"
    MEDICINE_SCAN = "medicine-scan"
    VOICE_INTERACTION = "voice-interaction"


class Probability(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


VOICE_ACTIONS = ("medical-query", "symptom-check", "medicine-scan", "general-help")


# ---------------------------------------------------------------------------
# REQUESTS
# ---------------------------------------------------------------------------

@dataclass
class QueryRequest:
    """Fields common to every request kind."""
    kind: ClassVar[QueryKind]

    tier: SubscriptionTier
    user_id: Optional[UUID]

    def summary(self) -> Dict[str, Any]:
        """Compact, JSON-safe description stored on the history record."""
        raise NotImplementedError


@dataclass
class TextQuery(QueryRequest):
    kind: ClassVar[QueryKind] = QueryKind.MEDICAL_QUERY

    question: str = ""

    def summary(self) -> Dict[str, Any]:
        return {"question": self.question}


@dataclass
class SymptomCheck(QueryRequest):
    kind: ClassVar[QueryKind] = QueryKind.SYMPTOM_CHECK

    symptoms: str = ""
    age_group: Optional[str] = None
    gender: Optional[str] = None
    preexisting_conditions: List[str] = field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        return {
            "symptoms": self.symptoms,
            "age_group": self.age_group,
            "gender": self.gender,
            "preexisting_conditions": list(self.preexisting_conditions),
        }


@dataclass
class ImageQuery(QueryRequest):
    kind: ClassVar[QueryKind] = QueryKind.MEDICINE_SCAN

    image_bytes: bytes = b""
    mime_type: str = ""

    def summary(self) -> Dict[str, Any]:
        # Image bytes are never persisted, only what was uploaded
        return {"mime_type": self.mime_type, "size_bytes": len(self.image_bytes)}


@dataclass
class VoiceCommand(QueryRequest):
    kind: ClassVar[QueryKind] = QueryKind.VOICE_INTERACTION

    transcript: str = ""

    def summary(self) -> Dict[str, Any]:
        return {"transcript": self.transcript}


# ---------------------------------------------------------------------------
# RESULTS
# ---------------------------------------------------------------------------

def _require_str(data: Dict[str, Any], key: str, raw: str, *aliases: str) -> str:
    for name in (key, *aliases):
        value = data.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    raise ProviderParseError(f"Missing or empty '{key}' in provider output", raw=raw)


def _str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value if str(v).strip()]
    return []


@dataclass
class QueryResult:
    """Base class; metadata is provider specific and not part of the wire contract."""
    kind: ClassVar[QueryKind]

    metadata: Dict[str, Any] = field(default_factory=dict, kw_only=True)

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass
class TextAnswer(QueryResult):
    kind: ClassVar[QueryKind] = QueryKind.MEDICAL_QUERY

    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"answer": self.text}


@dataclass
class Condition:
    name: str
    probability: Probability
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "probability": self.probability.value,
            "description": self.description,
        }


@dataclass
class SymptomAnalysis(QueryResult):
    kind: ClassVar[QueryKind] = QueryKind.SYMPTOM_CHECK

    conditions: List[Condition]
    recommendations: List[str]

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "SymptomAnalysis":
        raw = json.dumps(data)[:2000]
        items = data.get("conditions")
        if not isinstance(items, list) or not items:
            raise ProviderParseError("Symptom analysis has no conditions", raw=raw)

        conditions = []
        for item in items:
            if not isinstance(item, dict):
                raise ProviderParseError("Condition entry is not an object", raw=raw)
            probability = str(item.get("probability", "")).strip().lower()
            try:
                level = Probability(probability)
            except ValueError:
                raise ProviderParseError(
                    f"Unknown condition probability: {probability!r}", raw=raw
                )
            conditions.append(Condition(
                name=_require_str(item, "name", raw),
                probability=level,
                description=str(item.get("description") or "").strip(),
            ))

        return cls(
            conditions=conditions,
            recommendations=_str_list(data.get("recommendations")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conditions": [c.to_dict() for c in self.conditions],
            "recommendations": list(self.recommendations),
        }


@dataclass
class MedicineInfo(QueryResult):
    kind: ClassVar[QueryKind] = QueryKind.MEDICINE_SCAN

    name: str
    primary_use: str
    common_uses: List[str]
    dosage: str
    warnings: str

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "MedicineInfo":
        raw = json.dumps(data)[:2000]
        warnings = data.get("warnings")
        if isinstance(warnings, list):
            warnings = "; ".join(str(w) for w in warnings)
        return cls(
            name=_require_str(data, "name", raw),
            primary_use=_require_str(data, "primaryUse", raw, "primary_use"),
            common_uses=_str_list(data.get("commonUses", data.get("common_uses"))),
            dosage=str(data.get("dosage") or "").strip(),
            warnings=str(warnings or "").strip(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "primaryUse": self.primary_use,
            "commonUses": list(self.common_uses),
            "dosage": self.dosage,
            "warnings": self.warnings,
        }


@dataclass
class VoiceReply(QueryResult):
    kind: ClassVar[QueryKind] = QueryKind.VOICE_INTERACTION

    text: str
    suggested_action: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "VoiceReply":
        raw = json.dumps(data)[:2000]
        action = data.get("action")
        if action not in VOICE_ACTIONS:
            raise ProviderParseError(f"Unknown voice action: {action!r}", raw=raw)
        return cls(text=_require_str(data, "response", raw, "text"), suggested_action=action)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"answer": self.text}
        if self.suggested_action:
            payload["action"] = self.suggested_action
        return payload
