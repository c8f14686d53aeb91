import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.security import get_current_caller, require_admin
from ..db import get_db
from ..schemas.catalog import (
    PlotCreate,
    PlotResponse,
    PlotStats,
    PlotStatusUpdate,
    PlotWithProjectResponse,
)
from ..services import catalog
from ..services.permissions import Caller


router = APIRouter(prefix="/plots", tags=["plots"])


@router.get("", response_model=List[PlotResponse])
def list_plots(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return catalog.list_plots(db, caller)


@router.post("", response_model=PlotResponse, status_code=201)
def create_plot(payload: PlotCreate, db: Session = Depends(get_db), caller: Caller = Depends(require_admin)):
    return catalog.create_plot(db, payload.model_dump(), caller)


@router.get("/category/{category}", response_model=List[PlotWithProjectResponse])
def plots_by_category(category: str, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return catalog.plots_by_category(db, caller, category)


@router.get("/{plot_id}/stats", response_model=PlotStats)
def plot_stats(plot_id: uuid.UUID, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return catalog.plot_stats(db, caller, plot_id)


@router.patch("/{plot_id}/status", response_model=PlotResponse)
def set_plot_status(
    plot_id: uuid.UUID,
    payload: PlotStatusUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_admin),
):
    return catalog.set_plot_status(db, plot_id, payload.status, caller)
