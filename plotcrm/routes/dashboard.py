import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth.security import get_current_caller, require_admin
from ..config import settings
from ..db import get_db
from ..errors import Forbidden, ValidationError
from ..schemas.dashboard import ActivityLogResponse, DashboardStats, SalespersonStats
from ..services import dashboard
from ..services.audit import recent_activity
from ..services.permissions import Caller, is_admin


router = APIRouter(tags=["dashboard"])


@router.get("/dashboard/admin", response_model=DashboardStats)
def admin_dashboard(db: Session = Depends(get_db), _: Caller = Depends(require_admin)):
    return dashboard.admin_stats(db)


@router.get("/dashboard/salesperson", response_model=SalespersonStats)
def salesperson_dashboard(
    salesperson_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    """
    Stats for the calling salesperson.
    Admins may pass ``salesperson_id`` to look at someone else's numbers.
    """
    if salesperson_id is None:
        if is_admin(caller):
            raise ValidationError("salesperson_id is required for admins")
        salesperson_id = caller.id
    elif salesperson_id != caller.id and not is_admin(caller):
        raise Forbidden()
    return dashboard.salesperson_stats(db, salesperson_id)


@router.get("/activities", response_model=List[ActivityLogResponse])
def list_activities(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    db: Session = Depends(get_db),
    _: Caller = Depends(get_current_caller),
):
    return recent_activity(db, limit or settings.activity_feed_limit)
