"""
Medical Prompt Templates - MediSage framing shared by every provider.

All four features use the same persona and safety rules so answers read
the same whichever vendor serves the caller's tier. The orchestrator only
builds the user prompt here and tags the call with its QueryKind; the
adapter looks up the system prompt for that kind with system_prompt_for()
and places it in its own vendor slot.

Design Principles:
==================
1. Never a diagnosis: every system prompt carries the disclaimer rules
2. Structured features spell out the exact JSON shape the result types parse
3. Free-text features stay plain text
"""

from typing import Dict, Iterable, Optional

from medisage.ai.schemas.query import QueryKind


# ---------------------------------------------------------------------------
# PERSONA
# ---------------------------------------------------------------------------

MEDISAGE_PERSONA = (
    "You are MediSage AI, a medical assistant that provides accurate, helpful "
    "information about medical topics."
)

SAFETY_RULES = """Your responses should be informative, evidence-based, and easy to understand for the general public.
Always include appropriate disclaimers where necessary and never provide definitive medical diagnoses.
Always encourage consulting healthcare professionals for personalized advice.
If the question describes an emergency (chest pain, difficulty breathing, severe bleeding,
signs of stroke), tell the user to contact emergency services immediately."""


# ---------------------------------------------------------------------------
# MEDICAL Q&A
# ---------------------------------------------------------------------------

MEDICAL_QUERY_SYSTEM_PROMPT = f"""{MEDISAGE_PERSONA}
{SAFETY_RULES}"""


def build_medical_query_prompt(question: str) -> str:
    return question.strip()


# ---------------------------------------------------------------------------
# SYMPTOM CHECKER
# ---------------------------------------------------------------------------

SYMPTOM_SYSTEM_PROMPT = f"""You are MediSage AI, a medical assistant that analyzes symptoms and provides information about possible conditions.
Based on the symptoms described, provide a list of potential conditions along with probability levels (high, medium, low)
and recommendations.

Respond with a JSON object of exactly this shape:
{{
  "conditions": [
    {{"name": "Condition name", "probability": "high|medium|low", "description": "One or two sentences"}}
  ],
  "recommendations": ["Short actionable recommendation", "..."]
}}

Rules:
- "conditions" must contain at least one entry
- "probability" must be one of: high, medium, low
- Do not include personal commentary or introductions
- Include a recommendation to seek professional medical advice

{SAFETY_RULES}"""


def build_symptom_prompt(
    symptoms: str,
    age_group: Optional[str] = None,
    gender: Optional[str] = None,
    preexisting_conditions: Iterable[str] = (),
) -> str:
    """
    Build the symptom-analysis user prompt.

    Demographics are optional; unknown values are stated explicitly so the
    model doesn't assume defaults.
    """
    conditions = [c for c in preexisting_conditions if c]
    if conditions:
        conditions_text = f"Pre-existing conditions: {', '.join(conditions)}."
    else:
        conditions_text = "No known pre-existing conditions."

    demographics = "\n".join([
        f"Age group: {age_group}." if age_group else "Age: Unknown.",
        f"Biological sex: {gender}." if gender else "Biological sex: Unknown.",
        conditions_text,
    ])

    user_prompt = (
        f"Analyze these symptoms: {symptoms.strip()}\n\n"
        f"Additional information:\n{demographics}"
    )
    return user_prompt


# ---------------------------------------------------------------------------
# MEDICINE SCANNER
# ---------------------------------------------------------------------------

MEDICINE_SYSTEM_PROMPT = f"""You are MediSage AI, a medical assistant specialized in identifying medications from images.
When presented with an image of a medication, identify it and provide detailed information about it.

Respond with a JSON object of exactly this shape:
{{
  "name": "Full medication name with dosage",
  "primaryUse": "Primary purpose of the medication",
  "commonUses": ["List", "of", "common", "uses"],
  "dosage": "Typical dosage information",
  "warnings": "Important warnings and side effects"
}}

If you cannot identify the medication with confidence, say so in "warnings"
and suggest getting professional verification from a pharmacist.

{SAFETY_RULES}"""

MEDICINE_USER_PROMPT = "Identify this medication and provide information about it:"


def build_medicine_prompt() -> str:
    return MEDICINE_USER_PROMPT


# ---------------------------------------------------------------------------
# VOICE ASSISTANT (corporate)
# ---------------------------------------------------------------------------

VOICE_SYSTEM_PROMPT = f"""{MEDISAGE_PERSONA}
You are answering a spoken command, so keep the response short and easy to read aloud.

Respond with a JSON object containing:
- "action": one of ["medical-query", "symptom-check", "medicine-scan", "general-help"]
- "response": the text to speak back to the user
- "parameters": any extracted parameters (object, may be empty)

{SAFETY_RULES}"""


def build_voice_prompt(transcript: str) -> str:
    return f"Command: {transcript.strip()}"


# ---------------------------------------------------------------------------
# VOICE ASSISTANT (personal shortcuts, answered without an upstream call)
# ---------------------------------------------------------------------------

SYMPTOM_SHORTCUT_PHRASES = ("check my symptoms", "symptom check")
SCAN_SHORTCUT_PHRASES = ("scan medicine", "identify medicine")

SYMPTOM_SHORTCUT_REPLY = "I'll help you check your symptoms. Could you describe them in detail?"
SCAN_UPGRADE_REPLY = "Medicine scanning requires corporate tier subscription."


# ---------------------------------------------------------------------------
# SYSTEM PROMPT LOOKUP (used by the provider adapters)
# ---------------------------------------------------------------------------

SYSTEM_PROMPTS: Dict[QueryKind, str] = {
    QueryKind.MEDICAL_QUERY: MEDICAL_QUERY_SYSTEM_PROMPT,
    QueryKind.SYMPTOM_CHECK: SYMPTOM_SYSTEM_PROMPT,
    QueryKind.MEDICINE_SCAN: MEDICINE_SYSTEM_PROMPT,
    QueryKind.VOICE_INTERACTION: VOICE_SYSTEM_PROMPT,
}


def system_prompt_for(kind: Optional[QueryKind] = None) -> str:
    """
    MediSage framing for one request kind.

    Untagged calls still get the medical Q&A persona and safety rules, so
    no upstream call ever goes out without the disclaimers.
    """
    if kind is None:
        return MEDICAL_QUERY_SYSTEM_PROMPT
    return SYSTEM_PROMPTS[QueryKind(kind)]
