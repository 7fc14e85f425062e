"""
Tests for the provider-independent request/result types.

Focus is on from_payload(): upstream JSON either becomes a complete typed
result or raises ProviderParseError. Nothing in between.
"""

import json
from uuid import uuid4

import pytest

from medisage.ai.errors import ProviderParseError
from medisage.ai.schemas.query import (
    ImageQuery,
    MedicineInfo,
    Probability,
    QueryKind,
    SubscriptionTier,
    SymptomAnalysis,
    SymptomCheck,
    TextAnswer,
    TextQuery,
    VoiceCommand,
    VoiceReply,
)


FLU_PAYLOAD = {
    "conditions": [
        {"name": "Influenza", "probability": "high", "description": "Viral infection"},
        {"name": "Strep throat", "probability": "Medium", "description": "Bacterial"},
    ],
    "recommendations": ["Rest", "Hydrate"],
}


class TestRequests:
    """Tests for request kinds and their history summaries."""

    def test_kinds(self):
        """Each request class carries its kind tag."""
        assert TextQuery.kind == QueryKind.MEDICAL_QUERY
        assert SymptomCheck.kind == QueryKind.SYMPTOM_CHECK
        assert ImageQuery.kind == QueryKind.MEDICINE_SCAN
        assert VoiceCommand.kind == QueryKind.VOICE_INTERACTION

    def test_image_summary_excludes_bytes(self):
        """Image bytes are never part of the stored summary."""
        request = ImageQuery(
            tier=SubscriptionTier.CORPORATE,
            user_id=uuid4(),
            image_bytes=b"\xff\xd8" * 10,
            mime_type="image/jpeg",
        )

        assert request.summary() == {"mime_type": "image/jpeg", "size_bytes": 20}

    def test_symptom_summary(self):
        """Symptom summaries keep demographics."""
        request = SymptomCheck(
            tier=SubscriptionTier.PERSONAL,
            user_id=None,
            symptoms="cough",
            age_group="65+",
            preexisting_conditions=["asthma"],
        )

        summary = request.summary()

        assert summary["symptoms"] == "cough"
        assert summary["age_group"] == "65+"
        assert summary["preexisting_conditions"] == ["asthma"]


class TestSymptomAnalysis:
    """Tests for SymptomAnalysis.from_payload."""

    def test_valid_payload(self):
        """A well-formed payload parses completely."""
        result = SymptomAnalysis.from_payload(FLU_PAYLOAD)

        assert [c.name for c in result.conditions] == ["Influenza", "Strep throat"]
        assert result.conditions[1].probability == Probability.MEDIUM
        assert result.recommendations == ["Rest", "Hydrate"]

    def test_json_round_trip_keeps_conditions(self):
        """Serialized to JSON and back, conditions stay a non-empty list."""
        result = SymptomAnalysis.from_payload(FLU_PAYLOAD)

        decoded = json.loads(json.dumps(result.to_dict()))

        assert isinstance(decoded["conditions"], list)
        assert decoded["conditions"][0] == {
            "name": "Influenza",
            "probability": "high",
            "description": "Viral infection",
        }

    def test_missing_conditions(self):
        """No conditions is a parse error."""
        with pytest.raises(ProviderParseError):
            SymptomAnalysis.from_payload({"recommendations": ["Rest"]})

    def test_empty_conditions(self):
        """An empty list is a parse error too."""
        with pytest.raises(ProviderParseError):
            SymptomAnalysis.from_payload({"conditions": [], "recommendations": []})

    def test_unknown_probability(self):
        """Probability must be high, medium or low."""
        payload = {"conditions": [{"name": "Flu", "probability": "certain", "description": ""}]}

        with pytest.raises(ProviderParseError):
            SymptomAnalysis.from_payload(payload)

    def test_condition_without_name(self):
        """Every condition needs a name."""
        payload = {"conditions": [{"probability": "low", "description": "?"}]}

        with pytest.raises(ProviderParseError):
            SymptomAnalysis.from_payload(payload)


class TestMedicineInfo:
    """Tests for MedicineInfo.from_payload."""

    def test_camel_case_payload(self):
        """The documented camelCase shape parses."""
        result = MedicineInfo.from_payload({
            "name": "Ibuprofen 200mg",
            "primaryUse": "Pain relief",
            "commonUses": ["Headache", "Fever"],
            "dosage": "200-400mg every 4-6 hours",
            "warnings": "Take with food",
        })

        assert result.to_dict() == {
            "name": "Ibuprofen 200mg",
            "primaryUse": "Pain relief",
            "commonUses": ["Headache", "Fever"],
            "dosage": "200-400mg every 4-6 hours",
            "warnings": "Take with food",
        }

    def test_snake_case_and_list_warnings(self):
        """snake_case keys and list warnings are accepted."""
        result = MedicineInfo.from_payload({
            "name": "Paracetamol",
            "primary_use": "Fever",
            "common_uses": "Pain",
            "warnings": ["Liver damage in overdose", "Avoid alcohol"],
        })

        assert result.primary_use == "Fever"
        assert result.common_uses == ["Pain"]
        assert result.warnings == "Liver damage in overdose; Avoid alcohol"

    def test_missing_name(self):
        """A medicine without a name is rejected."""
        with pytest.raises(ProviderParseError):
            MedicineInfo.from_payload({"primaryUse": "Pain relief"})


class TestVoiceReply:
    """Tests for VoiceReply."""

    def test_valid_payload(self):
        """Known actions parse."""
        reply = VoiceReply.from_payload({
            "action": "symptom-check",
            "response": "Let's check your symptoms.",
            "parameters": {},
        })

        assert reply.to_dict() == {"answer": "Let's check your symptoms.", "action": "symptom-check"}

    def test_unknown_action(self):
        """Actions outside the fixed set are rejected."""
        with pytest.raises(ProviderParseError):
            VoiceReply.from_payload({"action": "order-pizza", "response": "Sure"})

    def test_to_dict_without_action(self):
        """The action key is omitted when there is none."""
        assert VoiceReply(text="Hello").to_dict() == {"answer": "Hello"}


class TestTextAnswer:
    def test_to_dict(self):
        assert TextAnswer(text="Drink fluids.").to_dict() == {"answer": "Drink fluids."}
