import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import Unauthorized
from ..models.models import User
from ..schemas.auth import AuthUser, LoginRequest, TokenResponse
from .security import (
    create_access_token,
    get_current_user,
    verify_password,
)


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == req.email.lower()).first()
    if not user or not verify_password(req.password, user.password_hash):
        structlog.get_logger().info("login_failed", email=req.email)
        raise Unauthorized("Invalid credentials")
    token = create_access_token(str(user.id), user.role)
    return TokenResponse(access_token=token, user=AuthUser.model_validate(user))


@router.get("/me", response_model=AuthUser)
def me(user: User = Depends(get_current_user)):
    return user
