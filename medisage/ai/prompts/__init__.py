"""
Prompts Module - Centralized prompt templates for AI interactions.

Keeping prompts in one place keeps the MediSage persona and disclaimers
identical across every provider. Callers build user prompts; adapters add
the system prompt via system_prompt_for().
"""

from medisage.ai.prompts.medical_prompts import (
    MEDICAL_QUERY_SYSTEM_PROMPT,
    MEDICINE_SYSTEM_PROMPT,
    SCAN_SHORTCUT_PHRASES,
    SCAN_UPGRADE_REPLY,
    SYMPTOM_SHORTCUT_PHRASES,
    SYMPTOM_SHORTCUT_REPLY,
    SYMPTOM_SYSTEM_PROMPT,
    SYSTEM_PROMPTS,
    VOICE_SYSTEM_PROMPT,
    build_medical_query_prompt,
    build_medicine_prompt,
    build_symptom_prompt,
    build_voice_prompt,
    system_prompt_for,
)

__all__ = [
    "MEDICAL_QUERY_SYSTEM_PROMPT",
    "MEDICINE_SYSTEM_PROMPT",
    "SCAN_SHORTCUT_PHRASES",
    "SCAN_UPGRADE_REPLY",
    "SYMPTOM_SHORTCUT_PHRASES",
    "SYMPTOM_SHORTCUT_REPLY",
    "SYMPTOM_SYSTEM_PROMPT",
    "SYSTEM_PROMPTS",
    "VOICE_SYSTEM_PROMPT",
    "build_medical_query_prompt",
    "build_medicine_prompt",
    "build_symptom_prompt",
    "build_voice_prompt",
    "system_prompt_for",
]
