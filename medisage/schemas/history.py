"""
History schemas - saved-item toggling and the medical history listing.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from medisage.ai.schemas.query import QueryKind


class SaveItemRequest(BaseModel):
    """
    Schema for POST /api/user/save-item.

    Example:
    {"itemType": "medical-query", "itemId": 42, "saved": true}
    """
    itemType: QueryKind
    itemId: int
    saved: bool


class HistoryItemOut(BaseModel):
    """One history record as the profile page renders it."""
    id: int
    kind: QueryKind
    request: Dict[str, Any]
    result: Dict[str, Any]
    modelId: Optional[str] = None
    timestamp: Optional[datetime] = None
    saved: bool


class MedicalHistoryResponse(BaseModel):
    """Records grouped by kind, newest first within each group."""
    medicalQueries: List[HistoryItemOut] = Field(default_factory=list)
    symptomChecks: List[HistoryItemOut] = Field(default_factory=list)
    medicineScans: List[HistoryItemOut] = Field(default_factory=list)
    voiceInteractions: List[HistoryItemOut] = Field(default_factory=list)
