from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.security import get_current_caller
from ..db import get_db
from ..schemas.payments import PaymentCreate, PaymentResponse
from ..services.booking import create_booking
from ..services.permissions import Caller
from ..services.visibility import resolve_visible_payments


router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=List[PaymentResponse])
def list_payments(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return resolve_visible_payments(db, caller)


@router.post("", response_model=PaymentResponse, status_code=201)
def create_payment(payload: PaymentCreate, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    """
    Record a payment, booking the plot for the lead.
    Token payments leave the plot Booked; Full payments mark it Sold.
    """
    return create_booking(
        db,
        lead_id=payload.lead_id,
        plot_id=payload.plot_id,
        amount=payload.amount,
        mode=payload.mode,
        booking_type=payload.booking_type,
        transaction_id=payload.transaction_id,
        notes=payload.notes,
        actor=caller,
    )
