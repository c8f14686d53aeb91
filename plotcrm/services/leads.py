"""
Lead management: create, update, delete, assignment and follow-up listing.
Every mutation writes exactly one activity entry in the same unit of work.
"""
import uuid
from datetime import datetime
from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from ..db import unit_of_work
from ..errors import Conflict, Forbidden, NotFound, ValidationError
from ..models.models import Lead, Payment, User
from . import audit
from .permissions import Caller, ensure_admin, is_admin
from .time_rules import day_window, to_naive_utc
from .visibility import scope_for

logger = structlog.get_logger()

# Columns that may not be cleared through an update
REQUIRED_LEAD_FIELDS = {"name", "phone", "source", "status", "rating"}


def _get_salesperson(db: Session, salesperson_id: uuid.UUID) -> User:
    salesperson = db.query(User).filter(User.id == salesperson_id).first()
    if not salesperson:
        raise NotFound("Salesperson not found")
    if salesperson.role != "salesperson":
        raise ValidationError("Leads can only be assigned to salespersons")
    return salesperson


def list_leads(db: Session, caller: Caller) -> List[Lead]:
    return scope_for(db, caller).leads()


def today_follow_ups(db: Session, caller: Caller, now: Optional[datetime] = None) -> List[Lead]:
    start, end = day_window(now)
    return (
        scope_for(db, caller)
        .leads_query()
        .filter(Lead.follow_up_date >= start, Lead.follow_up_date <= end)
        .order_by(Lead.follow_up_date.asc(), Lead.id.asc())
        .all()
    )


def create_lead(db: Session, data: dict, actor: Caller) -> Lead:
    data = dict(data)
    assigned_to = data.pop("assigned_to", None)
    if data.get("status") == "Booked":
        raise ValidationError("A lead becomes Booked only through a booking")
    with unit_of_work(db):
        lead = Lead(**data)
        lead.follow_up_date = to_naive_utc(lead.follow_up_date)
        if assigned_to is not None:
            # A salesperson may only claim a new lead for themselves
            if not is_admin(actor) and assigned_to != actor.id:
                raise Forbidden("Only admins can assign leads")
            _get_salesperson(db, assigned_to)
            lead.assigned_to = assigned_to
            lead.assigned_by = actor.id
        db.add(lead)
        db.flush()
        audit.record(
            db,
            actor,
            action="Created Lead",
            entity_type="lead",
            entity_id=lead.id,
            details=f"Created lead for {lead.name}",
        )
    db.refresh(lead)
    return lead


def update_lead(db: Session, lead_id: uuid.UUID, changes: dict, actor: Caller) -> Lead:
    """
    Apply a partial update to a lead visible to ``actor``.

    ``changes`` holds only the fields the client sent. Changing the assignee is
    an admin action; moving a lead to Booked only happens through a booking.
    """
    with unit_of_work(db):
        lead = scope_for(db, actor).get_lead(lead_id)
        if "assigned_to" in changes and changes["assigned_to"] != lead.assigned_to:
            if not is_admin(actor):
                raise Forbidden("Only admins can assign leads")
            if changes["assigned_to"] is not None:
                _get_salesperson(db, changes["assigned_to"])
            lead.assigned_by = actor.id if changes["assigned_to"] is not None else None
        if changes.get("status") == "Booked" and lead.status != "Booked":
            has_payment = db.query(Payment.id).filter(Payment.lead_id == lead.id).first()
            if not has_payment:
                raise ValidationError("A lead becomes Booked only through a booking")
        for field, value in changes.items():
            if value is None and field in REQUIRED_LEAD_FIELDS:
                continue
            if field == "follow_up_date":
                value = to_naive_utc(value)
            setattr(lead, field, value)
        db.flush()
        audit.record(
            db,
            actor,
            action="Updated Lead",
            entity_type="lead",
            entity_id=lead.id,
            details=f"Updated lead {lead.name}",
        )
    db.refresh(lead)
    return lead


def assign_lead(db: Session, lead_id: uuid.UUID, salesperson_id: uuid.UUID, actor: Caller) -> Lead:
    """
    Assign a lead to a salesperson (admin only).

    Sets assigned_to and assigned_by and records an "Assigned Lead" entry
    naming both the lead and the salesperson.
    """
    ensure_admin(actor)
    with unit_of_work(db):
        lead = db.query(Lead).filter(Lead.id == lead_id).first()
        if not lead:
            raise NotFound("Lead not found")
        salesperson = _get_salesperson(db, salesperson_id)
        lead.assigned_to = salesperson.id
        lead.assigned_by = actor.id
        db.flush()
        audit.record(
            db,
            actor,
            action="Assigned Lead",
            entity_type="lead",
            entity_id=lead.id,
            details=f"Assigned lead {lead.name} to {salesperson.name}",
        )
    db.refresh(lead)
    logger.info("lead_assigned", lead_id=str(lead.id), salesperson_id=str(salesperson_id), actor_id=str(actor.id))
    return lead


def delete_lead(db: Session, lead_id: uuid.UUID, actor: Caller) -> None:
    with unit_of_work(db):
        lead = scope_for(db, actor).get_lead(lead_id)
        if db.query(Payment.id).filter(Payment.lead_id == lead.id).first():
            raise Conflict("Lead has bookings and cannot be deleted")
        name = lead.name
        db.delete(lead)
        db.flush()
        audit.record(
            db,
            actor,
            action="Deleted Lead",
            entity_type="lead",
            entity_id=lead_id,
            details=f"Deleted lead {name}",
        )
