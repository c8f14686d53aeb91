import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.security import get_current_caller
from ..db import get_db
from ..schemas.buyer_interests import BuyerInterestCreate, BuyerInterestResponse
from ..services import buyer_interests as interest_service
from ..services.permissions import Caller


router = APIRouter(prefix="/buyer-interests", tags=["buyer-interests"])


@router.get("/{plot_id}", response_model=List[BuyerInterestResponse])
def list_buyer_interests(plot_id: uuid.UUID, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return interest_service.list_buyer_interests(db, caller, plot_id)


@router.post("", response_model=BuyerInterestResponse, status_code=201)
def create_buyer_interest(
    payload: BuyerInterestCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return interest_service.create_buyer_interest(db, payload.model_dump(), caller)


@router.delete("/{interest_id}")
def delete_buyer_interest(interest_id: uuid.UUID, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    interest_service.delete_buyer_interest(db, interest_id, caller)
    return {"message": "Buyer interest deleted successfully"}
