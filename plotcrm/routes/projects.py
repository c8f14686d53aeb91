from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.security import get_current_caller, require_admin
from ..db import get_db
from ..schemas.catalog import ProjectCreate, ProjectOverview, ProjectResponse
from ..services import catalog
from ..services.permissions import Caller


router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=List[ProjectResponse])
def list_projects(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return catalog.list_projects(db, caller)


@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(payload: ProjectCreate, db: Session = Depends(get_db), caller: Caller = Depends(require_admin)):
    return catalog.create_project(db, payload.model_dump(), caller)


@router.get("/overview", response_model=List[ProjectOverview])
def projects_overview(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    """Projects with plot status counts and buyer interest per plot."""
    return catalog.projects_overview(db, caller)
