"""
Users router - the caller's own history and subscription tier.
All endpoints here require authentication.
"""

import logging
from collections import defaultdict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from medisage.ai.errors import NotFoundOrNotOwned, PersistenceError
from medisage.ai.schemas.query import QueryKind
from medisage.db.session import get_db
from medisage.deps import get_current_user
from medisage.models.user import User
from medisage.schemas.history import HistoryItemOut, MedicalHistoryResponse, SaveItemRequest
from medisage.schemas.user import TierUpdate, UserOut
from medisage.services.history_gateway import HistoryGateway, get_history_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])

# Response group per record kind
_GROUPS = {
    QueryKind.MEDICAL_QUERY.value: "medicalQueries",
    QueryKind.SYMPTOM_CHECK.value: "symptomChecks",
    QueryKind.MEDICINE_SCAN.value: "medicineScans",
    QueryKind.VOICE_INTERACTION.value: "voiceInteractions",
}


@router.post("/save-item", response_model=HistoryItemOut)
def save_item(
    payload: SaveItemRequest,
    current_user: User = Depends(get_current_user),
    gateway: HistoryGateway = Depends(get_history_gateway),
):
    """
    Set the saved flag on one of the caller's history records.

    Raises:
        404 Not Found: no such record, or it belongs to another user
        500 Internal Server Error: storage failure
    """
    try:
        record = gateway.toggle_saved(
            payload.itemType, payload.itemId, current_user.id, payload.saved
        )
    except NotFoundOrNotOwned:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update item",
        )
    return record.to_dict()


@router.get("/medical-history", response_model=MedicalHistoryResponse)
def medical_history(
    current_user: User = Depends(get_current_user),
    gateway: HistoryGateway = Depends(get_history_gateway),
):
    """The caller's history grouped by kind, newest first."""
    try:
        records = gateway.list_history(current_user.id)
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve medical history",
        )

    grouped = defaultdict(list)
    for record in records:
        grouped[_GROUPS[record.kind]].append(record.to_dict())
    return MedicalHistoryResponse(**grouped)


@router.put("/tier", response_model=UserOut)
def update_tier(
    payload: TierUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Switch the caller's subscription tier; takes effect on their next request."""
    current_user.tier = payload.tier.value
    db.commit()
    db.refresh(current_user)
    logger.info(f"User {current_user.id} switched to {payload.tier.value} tier")
    return current_user
