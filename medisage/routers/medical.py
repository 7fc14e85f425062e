"""
Medical Router - HTTP mapping for the four AI features.

HTTP handling only: each endpoint resolves the caller (optional) and their
tier, hands the request to the Query Orchestrator and maps the QueryOutcome
to a response. All routing, provider calls and history recording happen in
the orchestrator.

Outcome -> HTTP status:
    success               200 with the result body
    validation            400 {"message"}
    capability_denied     403 {"message", "tier", "capability"}
    provider_*            500 {"message"} (generic, no upstream text)
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from medisage.core.config import settings
from medisage.deps import get_optional_user, resolve_tier
from medisage.models.user import User
from medisage.schemas.medical import (
    MedicalQueryRequest,
    MedicalQueryResponse,
    MedicineInfoResponse,
    SymptomAnalysisResponse,
    SymptomCheckRequest,
    VoiceCommandRequest,
    VoiceCommandResponse,
)
from medisage.services.query_orchestrator import QueryOrchestrator, get_orchestrator
from medisage.services.query_result import ErrorKind, QueryOutcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["medical"])


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------

def _outcome_to_response(outcome: QueryOutcome) -> dict:
    """Return the result body, or raise the HTTPException for a failed outcome."""
    if outcome.success:
        return outcome.result.to_dict()

    if outcome.error == ErrorKind.VALIDATION:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=outcome.message)

    if outcome.error == ErrorKind.CAPABILITY_DENIED:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": outcome.message, **(outcome.details or {})},
        )

    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=outcome.message,
    )


def _user_id(user: User | None):
    return user.id if user else None


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("/medical-query", response_model=MedicalQueryResponse)
async def medical_query(
    payload: MedicalQueryRequest,
    current_user: User | None = Depends(get_optional_user),
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
):
    """Answer a free-text medical question."""
    outcome = await orchestrator.answer_question(
        payload.question or "",
        tier=resolve_tier(current_user),
        user_id=_user_id(current_user),
    )
    return _outcome_to_response(outcome)


@router.post("/symptom-checker", response_model=SymptomAnalysisResponse)
async def symptom_checker(
    payload: SymptomCheckRequest,
    current_user: User | None = Depends(get_optional_user),
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
):
    """Analyze a symptom description into possible conditions and recommendations."""
    outcome = await orchestrator.check_symptoms(
        payload.symptoms or "",
        tier=resolve_tier(current_user),
        user_id=_user_id(current_user),
        age_group=payload.age,
        gender=payload.gender,
        preexisting_conditions=payload.preexisting_conditions(),
    )
    return _outcome_to_response(outcome)


@router.post("/medicine-scanner", response_model=MedicineInfoResponse)
async def medicine_scanner(
    image: UploadFile | None = File(default=None),
    current_user: User | None = Depends(get_optional_user),
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
):
    """
    Identify a medicine from an uploaded photo (multipart field `image`).

    Reads at most one byte past the upload limit so oversized files are
    rejected without buffering them whole.
    """
    image_bytes = b""
    mime_type = ""
    if image is not None:
        image_bytes = await image.read(settings.MAX_UPLOAD_BYTES + 1)
        mime_type = image.content_type or ""

    outcome = await orchestrator.scan_medicine(
        image_bytes,
        mime_type,
        tier=resolve_tier(current_user),
        user_id=_user_id(current_user),
    )
    return _outcome_to_response(outcome)


@router.post(
    "/voice-assistant",
    response_model=VoiceCommandResponse,
    response_model_exclude_none=True,
)
async def voice_assistant(
    payload: VoiceCommandRequest,
    current_user: User | None = Depends(get_optional_user),
    orchestrator: QueryOrchestrator = Depends(get_orchestrator),
):
    """Answer a transcribed voice command, with a suggested follow-up action."""
    outcome = await orchestrator.process_voice_command(
        payload.input or "",
        tier=resolve_tier(current_user),
        user_id=_user_id(current_user),
    )
    return _outcome_to_response(outcome)
