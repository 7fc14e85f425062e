"""
AI Schemas Module - provider-independent request/result contracts.
"""

from medisage.ai.schemas.query import (
    Capability,
    Condition,
    ImageQuery,
    MedicineInfo,
    Probability,
    QueryKind,
    QueryRequest,
    QueryResult,
    SubscriptionTier,
    SymptomAnalysis,
    SymptomCheck,
    TextAnswer,
    TextQuery,
    VoiceCommand,
    VoiceReply,
)

__all__ = [
    "Capability",
    "Condition",
    "ImageQuery",
    "MedicineInfo",
    "Probability",
    "QueryKind",
    "QueryRequest",
    "QueryResult",
    "SubscriptionTier",
    "SymptomAnalysis",
    "SymptomCheck",
    "TextAnswer",
    "TextQuery",
    "VoiceCommand",
    "VoiceReply",
]
