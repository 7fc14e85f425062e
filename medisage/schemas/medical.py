"""
Medical feature schemas - request and response bodies for the AI endpoints.

Request fields are optional on purpose: missing or blank values are
rejected by the orchestrator with its own message ("Question is required")
so every feature reports validation failures the same way.
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# REQUESTS
# ---------------------------------------------------------------------------

class MedicalQueryRequest(BaseModel):
    """
    Example:
    {"question": "What are the symptoms of the flu?"}
    """
    question: Optional[str] = None


class SymptomCheckRequest(BaseModel):
    """
    Example:
    {
        "symptoms": "headache, fever 101F, sore throat for 2 days",
        "age": "18-30",
        "gender": "female",
        "conditions": {"diabetes": true, "asthma": false}
    }

    `conditions` may also be a plain list of condition names.
    """
    symptoms: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    conditions: Union[List[str], Dict[str, bool], None] = None

    def preexisting_conditions(self) -> List[str]:
        """Condition names; for the map form only entries set to true."""
        if not self.conditions:
            return []
        if isinstance(self.conditions, dict):
            return [name for name, present in self.conditions.items() if present]
        return [name for name in self.conditions if name]


class VoiceCommandRequest(BaseModel):
    """
    Example:
    {"input": "What should I do for a mild burn?"}
    """
    input: Optional[str] = None


# ---------------------------------------------------------------------------
# RESPONSES
# ---------------------------------------------------------------------------

class MedicalQueryResponse(BaseModel):
    answer: str


class ConditionOut(BaseModel):
    name: str
    probability: str = Field(description="high | medium | low")
    description: str


class SymptomAnalysisResponse(BaseModel):
    conditions: List[ConditionOut]
    recommendations: List[str]


class MedicineInfoResponse(BaseModel):
    name: str
    primaryUse: str
    commonUses: List[str]
    dosage: str
    warnings: str


class VoiceCommandResponse(BaseModel):
    answer: str
    action: Optional[str] = Field(
        default=None, description="Suggested follow-up for the client UI"
    )
