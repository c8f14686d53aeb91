import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.security import get_current_caller, require_admin
from ..db import get_db
from ..schemas.leads import LeadAssign, LeadCreate, LeadResponse, LeadUpdate
from ..services import leads as lead_service
from ..services.permissions import Caller


router = APIRouter(prefix="/leads", tags=["leads"])


@router.get("", response_model=List[LeadResponse])
def list_leads(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return lead_service.list_leads(db, caller)


@router.get("/today-followups", response_model=List[LeadResponse])
def today_followups(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return lead_service.today_follow_ups(db, caller)


@router.post("", response_model=LeadResponse, status_code=201)
def create_lead(payload: LeadCreate, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return lead_service.create_lead(db, payload.model_dump(), caller)


@router.patch("/{lead_id}/assign", response_model=LeadResponse)
def assign_lead(
    lead_id: uuid.UUID,
    payload: LeadAssign,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_admin),
):
    return lead_service.assign_lead(db, lead_id, payload.salesperson_id, caller)


@router.patch("/{lead_id}", response_model=LeadResponse)
def update_lead(
    lead_id: uuid.UUID,
    payload: LeadUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    # Only the fields the client actually sent
    return lead_service.update_lead(db, lead_id, payload.model_dump(exclude_unset=True), caller)


@router.delete("/{lead_id}")
def delete_lead(lead_id: uuid.UUID, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    lead_service.delete_lead(db, lead_id, caller)
    return {"message": "Lead deleted successfully"}
