"""
Query Orchestrator - the façade the HTTP layer calls for every AI feature.

One orchestrated request runs through the same steps whatever its kind:

    ┌─────────────┐   ┌──────────────┐   ┌──────────────┐   ┌─────────────┐
    │  validate   │──▶│ select_model │──▶│ one provider │──▶│  normalize  │
    │ (400, fast) │   │  (tier gate) │   │     call     │   │ into result │
    └─────────────┘   └──────────────┘   └──────────────┘   └──────┬──────┘
                                                                   │
                                       history write (background) ◀┘

Guarantees:
- Validation failures never reach the router or a provider.
- Exactly one upstream call per request; no retries, no fan-out.
- Failures come back as a QueryOutcome with an ErrorKind, never as an
  exception, and never with upstream text in the user message.
- A history record is scheduled only after a fully normalized success.
  Its write runs in a worker thread; its failure is logged and can't
  affect the response.

Voice commands on the personal tier never ask the router for
voice_processing: a couple of keyword shortcuts are answered locally and
everything else goes to the personal text model as a plain question.
"""

import asyncio
import logging
import time
import uuid as uuid_module
from datetime import datetime, timezone
from typing import Callable, Optional, Set

from medisage.ai.errors import (
    CapabilityDenied,
    ProviderError,
    ProviderParseError,
    ProviderTimeout,
    ValidationError,
)
from medisage.ai.monitoring import ai_logger
from medisage.ai.prompts import (
    SCAN_SHORTCUT_PHRASES,
    SCAN_UPGRADE_REPLY,
    SYMPTOM_SHORTCUT_PHRASES,
    SYMPTOM_SHORTCUT_REPLY,
    build_medical_query_prompt,
    build_medicine_prompt,
    build_symptom_prompt,
    build_voice_prompt,
)
from medisage.ai.providers import AIProvider, AIResponse, ProviderType, get_provider
from medisage.ai.registry import ModelDescriptor
from medisage.ai.router import TierRouter, tier_router
from medisage.ai.schemas.query import (
    Capability,
    ImageQuery,
    MedicineInfo,
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
from medisage.core.config import settings
from medisage.models.history import HistoryRecord
from medisage.services.history_gateway import HistoryGateway, history_gateway
from medisage.services.query_result import ErrorKind, QueryOutcome

logger = logging.getLogger("medisage.orchestrator")


# Generic, user-safe failure messages per request kind
FAILURE_MESSAGES = {
    QueryKind.MEDICAL_QUERY: "Failed to process medical query",
    QueryKind.SYMPTOM_CHECK: "Failed to analyze symptoms",
    QueryKind.MEDICINE_SCAN: "Failed to analyze medicine image",
    QueryKind.VOICE_INTERACTION: "Failed to process voice command",
}

CAPABILITY_FOR_KIND = {
    QueryKind.MEDICAL_QUERY: Capability.TEXT_GENERATION,
    QueryKind.SYMPTOM_CHECK: Capability.TEXT_GENERATION,
    QueryKind.MEDICINE_SCAN: Capability.IMAGE_ANALYSIS,
    QueryKind.VOICE_INTERACTION: Capability.VOICE_PROCESSING,
}


class QueryOrchestrator:
    """
    Coordinates routing, the provider call and history recording.

    Every collaborator is injectable so tests can swap the router, the
    provider lookup or the gateway without patching module globals.

    Usage:
        outcome = await query_orchestrator.answer_question(
            "What are the symptoms of the flu?",
            tier=SubscriptionTier.PERSONAL,
            user_id=user.id,
        )
        if outcome.success:
            return outcome.result.to_dict()
    """

    def __init__(
        self,
        router: Optional[TierRouter] = None,
        provider_resolver: Optional[Callable[[ProviderType], AIProvider]] = None,
        gateway: Optional[HistoryGateway] = None,
        max_upload_bytes: Optional[int] = None,
    ):
        self.router = router or tier_router
        self._resolve_provider = provider_resolver or get_provider
        self.gateway = gateway or history_gateway
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES
        # Strong references so background writes aren't garbage collected mid-flight
        self._pending: Set[asyncio.Task] = set()

    # -----------------------------------------------------------------------
    # ENTRY POINTS
    # -----------------------------------------------------------------------

    async def answer_question(self, question: str, tier: SubscriptionTier, user_id=None) -> QueryOutcome:
        return await self.handle(TextQuery(tier=tier, user_id=user_id, question=question))

    async def check_symptoms(
        self,
        symptoms: str,
        tier: SubscriptionTier,
        user_id=None,
        age_group: Optional[str] = None,
        gender: Optional[str] = None,
        preexisting_conditions=(),
    ) -> QueryOutcome:
        return await self.handle(SymptomCheck(
            tier=tier,
            user_id=user_id,
            symptoms=symptoms,
            age_group=age_group,
            gender=gender,
            preexisting_conditions=list(preexisting_conditions),
        ))

    async def scan_medicine(
        self, image_bytes: bytes, mime_type: str, tier: SubscriptionTier, user_id=None
    ) -> QueryOutcome:
        return await self.handle(ImageQuery(
            tier=tier, user_id=user_id, image_bytes=image_bytes, mime_type=mime_type
        ))

    async def process_voice_command(self, transcript: str, tier: SubscriptionTier, user_id=None) -> QueryOutcome:
        return await self.handle(VoiceCommand(tier=tier, user_id=user_id, transcript=transcript))

    # -----------------------------------------------------------------------
    # PIPELINE
    # -----------------------------------------------------------------------

    async def handle(self, request: QueryRequest) -> QueryOutcome:
        """
        Run one request through validate -> route -> call -> normalize -> record.

        Always returns a QueryOutcome; core errors are never raised.
        """
        start_time = time.time()
        request_id = str(uuid_module.uuid4())
        kind = request.kind

        # Step 1: Validate before anything touches the router or a provider
        try:
            self._validate(request)
        except ValidationError as e:
            return self._failure(kind, ErrorKind.VALIDATION, e.message, request_id, start_time)

        # Step 2: Personal voice shortcuts never leave the process
        if isinstance(request, VoiceCommand) and request.tier == SubscriptionTier.PERSONAL:
            shortcut = self._voice_shortcut(request.transcript)
            if shortcut is not None:
                ai_logger.log_event(request_id, "voice_shortcut", {"action": shortcut.suggested_action})
                return self._success(request, shortcut, None, request_id, start_time)

        # Step 3: Pick the model for this tier
        capability = self._capability_for(request)
        try:
            model = self.router.select_model(request.tier, capability)
        except CapabilityDenied as e:
            # Expected user-facing condition, logged at INFO
            ai_logger.log_event(request_id, "capability_denied", {
                "tier": e.tier,
                "capability": e.capability,
                "kind": kind.value,
            })
            return self._failure(
                kind,
                ErrorKind.CAPABILITY_DENIED,
                e.message,
                request_id,
                start_time,
                details={"tier": e.tier, "capability": e.capability},
            )

        # Step 4: Exactly one provider call, then strict normalization
        provider = self._resolve_provider(model.provider)
        try:
            response = await self._call_provider(request, model, provider, request_id)
            result = self._normalize(request, response)
        except ProviderTimeout as e:
            ai_logger.log_error(
                request_id, e.message, stage="provider",
                metadata={"model": model.id, "type": "timeout"}, level=logging.WARNING,
            )
            return self._failure(kind, ErrorKind.PROVIDER_TIMEOUT, FAILURE_MESSAGES[kind],
                                 request_id, start_time, model_id=model.id)
        except ProviderParseError as e:
            ai_logger.log_error(
                request_id, e.message, stage="parse",
                metadata={"model": model.id, "raw_preview": e.raw[:500]},
            )
            return self._failure(kind, ErrorKind.PROVIDER_PARSE_ERROR, FAILURE_MESSAGES[kind],
                                 request_id, start_time, model_id=model.id)
        except ProviderError as e:
            ai_logger.log_error(
                request_id, e.message, stage="provider",
                metadata={"model": model.id, "status": e.status}, level=logging.WARNING,
            )
            return self._failure(kind, ErrorKind.PROVIDER_ERROR, FAILURE_MESSAGES[kind],
                                 request_id, start_time, model_id=model.id)
        except Exception as e:
            # Anything an adapter failed to translate is still an upstream failure
            ai_logger.log_error(
                request_id, str(e), stage="provider",
                metadata={"model": model.id, "type": type(e).__name__},
            )
            return self._failure(kind, ErrorKind.PROVIDER_ERROR, FAILURE_MESSAGES[kind],
                                 request_id, start_time, model_id=model.id)

        ai_logger.log_response(request_id, response, metadata={"model_id": model.id})
        result.metadata = {
            "model_id": model.id,
            "provider": response.provider.value,
            "latency_ms": round(response.latency_ms, 2),
            "tokens": response.usage.total_tokens,
        }

        # Step 5: Record in the background and answer immediately
        return self._success(request, result, model.id, request_id, start_time)

    # -----------------------------------------------------------------------
    # STEPS
    # -----------------------------------------------------------------------

    def _validate(self, request: QueryRequest) -> None:
        try:
            SubscriptionTier(request.tier)
        except ValueError:
            raise ValidationError(f"Unknown subscription tier: {request.tier}")

        if isinstance(request, TextQuery):
            if not (request.question or "").strip():
                raise ValidationError("Question is required")
        elif isinstance(request, SymptomCheck):
            if not (request.symptoms or "").strip():
                raise ValidationError("Symptoms description is required")
        elif isinstance(request, ImageQuery):
            if not request.image_bytes:
                raise ValidationError("Image file is required")
            if not (request.mime_type or "").startswith("image/"):
                raise ValidationError("Only image files are allowed")
            if len(request.image_bytes) > self.max_upload_bytes:
                raise ValidationError(
                    f"Image exceeds the {self.max_upload_bytes // (1024 * 1024)}MB upload limit"
                )
        elif isinstance(request, VoiceCommand):
            if not (request.transcript or "").strip():
                raise ValidationError("Voice input is required")
        else:
            raise ValidationError(f"Unsupported request type: {type(request).__name__}")

    def _capability_for(self, request: QueryRequest) -> Capability:
        if isinstance(request, VoiceCommand) and request.tier == SubscriptionTier.PERSONAL:
            # Basic voice on the personal tier is a plain text question
            return Capability.TEXT_GENERATION
        return CAPABILITY_FOR_KIND[request.kind]

    def _voice_shortcut(self, transcript: str) -> Optional[VoiceReply]:
        lowered = transcript.lower()
        if any(phrase in lowered for phrase in SYMPTOM_SHORTCUT_PHRASES):
            return VoiceReply(text=SYMPTOM_SHORTCUT_REPLY, suggested_action="symptom-checker")
        if any(phrase in lowered for phrase in SCAN_SHORTCUT_PHRASES):
            return VoiceReply(text=SCAN_UPGRADE_REPLY, suggested_action="upgrade-prompt")
        return None

    async def _call_provider(
        self,
        request: QueryRequest,
        model: ModelDescriptor,
        provider: AIProvider,
        request_id: str,
    ) -> AIResponse:
        # Only the user prompt is built here; the adapter adds the framing for prompt_kind
        prompt_kind = request.kind
        if isinstance(request, TextQuery):
            prompt = build_medical_query_prompt(request.question)
        elif isinstance(request, SymptomCheck):
            prompt = build_symptom_prompt(
                request.symptoms,
                request.age_group,
                request.gender,
                request.preexisting_conditions,
            )
        elif isinstance(request, ImageQuery):
            prompt = build_medicine_prompt()
        elif request.tier == SubscriptionTier.CORPORATE:
            prompt = build_voice_prompt(request.transcript)
        else:
            prompt = build_medical_query_prompt(request.transcript)
            prompt_kind = QueryKind.MEDICAL_QUERY

        ai_logger.log_request(
            request_id=request_id,
            prompt=prompt,
            provider=model.provider.value,
            model=model.upstream_model,
            user_id=request.user_id,
            metadata={"kind": request.kind.value, "model_id": model.id},
        )

        if isinstance(request, ImageQuery):
            return await provider.analyze_image(
                request.image_bytes,
                request.mime_type,
                prompt,
                model=model.upstream_model,
                kind=prompt_kind,
            )
        if isinstance(request, SymptomCheck) or (
            isinstance(request, VoiceCommand) and request.tier == SubscriptionTier.CORPORATE
        ):
            return await provider.generate_json(prompt, model=model.upstream_model, kind=prompt_kind)
        return await provider.generate_text(prompt, model=model.upstream_model, kind=prompt_kind)

    def _normalize(self, request: QueryRequest, response: AIResponse) -> QueryResult:
        """Build the typed result for the request kind or raise ProviderParseError."""
        if isinstance(request, SymptomCheck):
            return SymptomAnalysis.from_payload(response.data or {})
        if isinstance(request, ImageQuery):
            return MedicineInfo.from_payload(response.data or {})
        if isinstance(request, VoiceCommand) and request.tier == SubscriptionTier.CORPORATE:
            return VoiceReply.from_payload(response.data or {})

        text = (response.content or "").strip()
        if not text:
            raise ProviderParseError("Empty answer from provider", provider=response.provider.value)
        if isinstance(request, VoiceCommand):
            return VoiceReply(text=text, suggested_action="medical-response")
        return TextAnswer(text=text)

    # -----------------------------------------------------------------------
    # OUTCOMES
    # -----------------------------------------------------------------------

    def _success(
        self,
        request: QueryRequest,
        result: QueryResult,
        model_id: Optional[str],
        request_id: str,
        start_time: float,
    ) -> QueryOutcome:
        record = HistoryRecord(
            kind=request.kind.value,
            request_summary=request.summary(),
            result=result.to_dict(),
            model_id=model_id,
            timestamp=datetime.now(timezone.utc),
            user_id=request.user_id,
            saved=False,
        )
        self._schedule_record(record, request_id)

        return QueryOutcome(
            success=True,
            kind=request.kind,
            result=result,
            message="OK",
            model_id=model_id,
            processing_time_ms=(time.time() - start_time) * 1000,
            request_id=request_id,
        )

    def _failure(
        self,
        kind: QueryKind,
        error: ErrorKind,
        message: str,
        request_id: str,
        start_time: float,
        model_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> QueryOutcome:
        return QueryOutcome(
            success=False,
            kind=kind,
            error=error,
            message=message,
            model_id=model_id,
            details=details,
            processing_time_ms=(time.time() - start_time) * 1000,
            request_id=request_id,
        )

    # -----------------------------------------------------------------------
    # BACKGROUND HISTORY WRITES
    # -----------------------------------------------------------------------

    def _schedule_record(self, record: HistoryRecord, request_id: str) -> None:
        task = asyncio.create_task(self._record(record, request_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _record(self, record: HistoryRecord, request_id: str) -> None:
        try:
            await asyncio.to_thread(self.gateway.record, record)
        except Exception as e:
            # Gateway already swallows storage errors; this catches anything else
            ai_logger.log_error(request_id, str(e), stage="persistence")

    async def wait_for_pending(self) -> None:
        """Await all outstanding history writes (shutdown and tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
query_orchestrator = QueryOrchestrator()


def get_orchestrator() -> QueryOrchestrator:
    """FastAPI dependency; tests override it with an orchestrator built on mocks."""
    return query_orchestrator
