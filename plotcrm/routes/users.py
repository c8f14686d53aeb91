import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.security import require_admin
from ..db import get_db
from ..schemas.users import UserCreate, UserResponse
from ..services import users as user_service
from ..services.permissions import Caller


router = APIRouter(prefix="/users", tags=["users"])


@router.get("/salespersons", response_model=List[UserResponse])
def list_salespersons(db: Session = Depends(get_db), caller: Caller = Depends(require_admin)):
    return user_service.list_salespersons(db, caller)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db), caller: Caller = Depends(require_admin)):
    return user_service.create_user(db, payload.model_dump(), caller)


@router.delete("/{user_id}")
def delete_user(user_id: uuid.UUID, db: Session = Depends(get_db), caller: Caller = Depends(require_admin)):
    user_service.delete_user(db, user_id, caller)
    return {"message": "User deleted successfully"}
