"""
Projects and plots: creation, scoped listing and the overview/statistics reads.
"""
import uuid
from collections import OrderedDict
from typing import Dict, List

from sqlalchemy.orm import Session, joinedload

from ..db import unit_of_work
from ..errors import Conflict, NotFound
from ..models.models import BuyerInterest, Plot, Project
from . import audit
from .permissions import Caller, ensure_admin
from .visibility import scope_for


def list_projects(db: Session, caller: Caller) -> List[Project]:
    return scope_for(db, caller).projects()


def create_project(db: Session, data: dict, actor: Caller) -> Project:
    ensure_admin(actor)
    with unit_of_work(db):
        project = Project(**data)
        db.add(project)
        db.flush()
        audit.record(
            db,
            actor,
            action="Created Project",
            entity_type="project",
            entity_id=project.id,
            details=f"Created project {project.name}",
        )
    db.refresh(project)
    return project


def list_plots(db: Session, caller: Caller) -> List[Plot]:
    return scope_for(db, caller).plots()


def plots_by_category(db: Session, caller: Caller, category: str) -> List[Plot]:
    return (
        scope_for(db, caller)
        .plots_query()
        .options(joinedload(Plot.project))
        .filter(Plot.category == category)
        .order_by(Plot.plot_number.asc(), Plot.id.asc())
        .all()
    )


def create_plot(db: Session, data: dict, actor: Caller) -> Plot:
    ensure_admin(actor)
    with unit_of_work(db):
        project = db.query(Project).filter(Project.id == data["project_id"]).first()
        if not project:
            raise NotFound("Project not found")
        duplicate = db.query(Plot.id).filter(
            Plot.project_id == project.id,
            Plot.plot_number == data["plot_number"],
        ).first()
        if duplicate:
            raise Conflict(f"Plot {data['plot_number']} already exists in {project.name}")
        plot = Plot(**data)
        db.add(plot)
        db.flush()
        audit.record(
            db,
            actor,
            action="Created Plot",
            entity_type="plot",
            entity_id=plot.id,
            details=f"Created plot {plot.plot_number} in {project.name}",
        )
    db.refresh(plot)
    return plot


def set_plot_status(db: Session, plot_id: uuid.UUID, status: str, actor: Caller) -> Plot:
    """Toggle an unbooked plot between Available and Hold (admin only)."""
    ensure_admin(actor)
    with unit_of_work(db):
        plot = db.query(Plot).filter(Plot.id == plot_id).first()
        if not plot:
            raise NotFound("Plot not found")
        if plot.status not in ("Available", "Hold"):
            raise Conflict(f"Plot {plot.plot_number} is {plot.status} and cannot be changed")
        previous = plot.status
        plot.status = status
        db.flush()
        audit.record(
            db,
            actor,
            action="Updated Plot Status",
            entity_type="plot",
            entity_id=plot.id,
            details=f"Plot {plot.plot_number}: {previous} -> {status}",
        )
    db.refresh(plot)
    return plot


def _interests_by_plot(db: Session, plot_ids: List[uuid.UUID]) -> Dict[uuid.UUID, List[BuyerInterest]]:
    grouped: Dict[uuid.UUID, List[BuyerInterest]] = {pid: [] for pid in plot_ids}
    if not plot_ids:
        return grouped
    rows = (
        db.query(BuyerInterest)
        .filter(BuyerInterest.plot_id.in_(plot_ids))
        .order_by(BuyerInterest.created_at.desc(), BuyerInterest.id.desc())
        .all()
    )
    for bi in rows:
        grouped[bi.plot_id].append(bi)
    return grouped


def _plot_overview(plot: Plot, interests: List[BuyerInterest]) -> dict:
    salespersons = OrderedDict()
    for bi in interests:
        if bi.salesperson_id not in salespersons:
            salespersons[bi.salesperson_id] = {"id": bi.salesperson_id, "name": bi.salesperson_name}
    return {
        "id": plot.id,
        "project_id": plot.project_id,
        "plot_number": plot.plot_number,
        "size": plot.size,
        "price": plot.price,
        "facing": plot.facing,
        "category": plot.category,
        "status": plot.status,
        "booked_by": plot.booked_by,
        "created_at": plot.created_at,
        "updated_at": plot.updated_at,
        "buyer_interest_count": len(interests),
        "highest_offer": max((bi.offered_price for bi in interests), default=0),
        "salespersons": list(salespersons.values()),
        "buyer_interests": interests,
    }


def projects_overview(db: Session, caller: Caller) -> List[dict]:
    """
    Visible projects with their visible plots, status counts and buyer interest.

    Returns:
        One dict per project (ProjectOverview shape), newest project first
    """
    scope = scope_for(db, caller)
    projects = scope.projects()
    if not projects:
        return []
    plots = (
        scope.plots_query()
        .filter(Plot.project_id.in_([p.id for p in projects]))
        .order_by(Plot.plot_number.asc(), Plot.id.asc())
        .all()
    )
    interests = _interests_by_plot(db, [p.id for p in plots])

    overview = []
    for project in projects:
        project_plots = [p for p in plots if p.project_id == project.id]
        counts = {status: 0 for status in ("Available", "Hold", "Booked", "Sold")}
        for plot in project_plots:
            counts[plot.status] = counts.get(plot.status, 0) + 1
        enriched = [_plot_overview(plot, interests[plot.id]) for plot in project_plots]
        overview.append({
            "id": project.id,
            "name": project.name,
            "location": project.location,
            "total_plots": len(project_plots),
            "description": project.description,
            "created_at": project.created_at,
            "available_plots": counts["Available"],
            "hold_plots": counts["Hold"],
            "booked_plots": counts["Booked"],
            "sold_plots": counts["Sold"],
            "total_interested_buyers": sum(p["buyer_interest_count"] for p in enriched),
            "plots": enriched,
        })
    return overview


def plot_stats(db: Session, caller: Caller, plot_id: uuid.UUID) -> dict:
    plot = scope_for(db, caller).get_plot(plot_id)
    interests = _interests_by_plot(db, [plot.id])[plot.id]
    offers = [bi.offered_price for bi in interests]
    return {
        "total_interested_buyers": len(interests),
        "average_offered_price": sum(offers) / len(offers) if offers else 0,
        "highest_offer": max(offers, default=0),
        "buyer_interests": interests,
    }
