"""
Dashboard aggregations: counts and sums over leads, plots and payments.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..errors import NotFound, ValidationError
from ..models.models import Lead, Payment, Plot, Project, User
from .permissions import Caller
from .time_rules import day_window
from .visibility import SalespersonScope


def _revenue(query) -> float:
    return float(query.with_entities(func.coalesce(func.sum(Payment.amount), 0)).scalar() or 0)


def admin_stats(db: Session, now: Optional[datetime] = None) -> dict:
    start, end = day_window(now)
    plot_counts = dict(db.query(Plot.status, func.count(Plot.id)).group_by(Plot.status).all())
    return {
        "total_leads": db.query(Lead).count(),
        "converted_leads": db.query(Lead).filter(Lead.status == "Booked").count(),
        "lost_leads": db.query(Lead).filter(Lead.status == "Lost").count(),
        "unassigned_leads": db.query(Lead).filter(Lead.assigned_to.is_(None)).count(),
        "total_projects": db.query(Project).count(),
        "total_plots": sum(plot_counts.values()),
        "available_plots": plot_counts.get("Available", 0),
        "hold_plots": plot_counts.get("Hold", 0),
        "booked_plots": plot_counts.get("Booked", 0) + plot_counts.get("Sold", 0),
        "sold_plots": plot_counts.get("Sold", 0),
        "total_revenue": _revenue(db.query(Payment)),
        "today_follow_ups": db.query(Lead).filter(
            Lead.follow_up_date >= start,
            Lead.follow_up_date <= end,
        ).count(),
    }


def salesperson_stats(db: Session, salesperson_id: uuid.UUID, now: Optional[datetime] = None) -> dict:
    """
    Stats for one salesperson's assigned leads.

    Revenue counts payments on the salesperson's Booked leads only.
    """
    salesperson = db.query(User).filter(User.id == salesperson_id).first()
    if not salesperson:
        raise NotFound("Salesperson not found")
    if salesperson.role != "salesperson":
        raise ValidationError("User is not a salesperson")
    start, end = day_window(now)
    assigned = SalespersonScope(db, Caller.from_user(salesperson)).leads_query()
    converted = assigned.filter(Lead.status == "Booked")
    converted_ids = [row[0] for row in converted.with_entities(Lead.id).all()]
    revenue = _revenue(db.query(Payment).filter(Payment.lead_id.in_(converted_ids))) if converted_ids else 0.0
    return {
        "assigned_leads": assigned.count(),
        "today_follow_ups": assigned.filter(
            Lead.follow_up_date >= start,
            Lead.follow_up_date <= end,
        ).count(),
        "converted_leads": len(converted_ids),
        "total_revenue": revenue,
    }
