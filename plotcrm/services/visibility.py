"""
Visibility resolver.

Every read path asks ``scope_for(db, caller)`` for the records the caller may
see instead of branching on the role itself.

- admin: every record
- salesperson: leads assigned to them, the payments on those leads, the plots
  those payments booked, and the projects owning those plots
"""
import uuid
from typing import List

from sqlalchemy.orm import Query, Session

from ..errors import Forbidden, NotFound
from ..models.models import Lead, Payment, Plot, Project
from .permissions import Caller, is_admin, is_salesperson


def _ordered_leads(query: Query) -> Query:
    return query.order_by(Lead.created_at.desc(), Lead.id.desc())


def _ordered_plots(query: Query) -> Query:
    return query.order_by(Plot.plot_number.asc(), Plot.id.asc())


def _ordered_projects(query: Query) -> Query:
    return query.order_by(Project.created_at.desc(), Project.id.desc())


def _ordered_payments(query: Query) -> Query:
    return query.order_by(Payment.created_at.desc(), Payment.id.desc())


class VisibilityScope:
    """Unordered base queries for one caller; subclasses decide the filtering."""

    def __init__(self, db: Session, caller: Caller):
        self.db = db
        self.caller = caller

    def leads_query(self) -> Query:
        raise NotImplementedError

    def payments_query(self) -> Query:
        raise NotImplementedError

    def plots_query(self) -> Query:
        raise NotImplementedError

    def projects_query(self) -> Query:
        raise NotImplementedError

    def leads(self) -> List[Lead]:
        return _ordered_leads(self.leads_query()).all()

    def payments(self) -> List[Payment]:
        return _ordered_payments(self.payments_query()).all()

    def plots(self) -> List[Plot]:
        return _ordered_plots(self.plots_query()).all()

    def projects(self) -> List[Project]:
        return _ordered_projects(self.projects_query()).all()

    def get_lead(self, lead_id: uuid.UUID) -> Lead:
        """Fetch a lead inside the scope; invisible leads look absent."""
        lead = self.leads_query().filter(Lead.id == lead_id).first()
        if not lead:
            raise NotFound("Lead not found")
        return lead

    def get_plot(self, plot_id: uuid.UUID) -> Plot:
        plot = self.plots_query().filter(Plot.id == plot_id).first()
        if not plot:
            raise NotFound("Plot not found")
        return plot


class AdminScope(VisibilityScope):

    def leads_query(self) -> Query:
        return self.db.query(Lead)

    def payments_query(self) -> Query:
        return self.db.query(Payment)

    def plots_query(self) -> Query:
        return self.db.query(Plot)

    def projects_query(self) -> Query:
        return self.db.query(Project)


class SalespersonScope(VisibilityScope):
    """Walks lead -> payment -> plot -> project, one set-membership filter per hop."""

    def lead_ids(self) -> List[uuid.UUID]:
        rows = self.db.query(Lead.id).filter(Lead.assigned_to == self.caller.id).all()
        return [r[0] for r in rows]

    def plot_ids(self) -> List[uuid.UUID]:
        lead_ids = self.lead_ids()
        if not lead_ids:
            return []
        rows = self.db.query(Payment.plot_id).filter(Payment.lead_id.in_(lead_ids)).distinct().all()
        return [r[0] for r in rows]

    def project_ids(self) -> List[uuid.UUID]:
        plot_ids = self.plot_ids()
        if not plot_ids:
            return []
        rows = self.db.query(Plot.project_id).filter(Plot.id.in_(plot_ids)).distinct().all()
        return [r[0] for r in rows]

    def leads_query(self) -> Query:
        return self.db.query(Lead).filter(Lead.assigned_to == self.caller.id)

    def payments_query(self) -> Query:
        return self.db.query(Payment).filter(Payment.lead_id.in_(self.lead_ids()))

    def plots_query(self) -> Query:
        return self.db.query(Plot).filter(Plot.id.in_(self.plot_ids()))

    def projects_query(self) -> Query:
        return self.db.query(Project).filter(Project.id.in_(self.project_ids()))


def scope_for(db: Session, caller: Caller) -> VisibilityScope:
    if is_admin(caller):
        return AdminScope(db, caller)
    if is_salesperson(caller):
        return SalespersonScope(db, caller)
    raise Forbidden("Unknown role")


def resolve_visible_projects(db: Session, caller: Caller) -> List[Project]:
    return scope_for(db, caller).projects()


def resolve_visible_plots(db: Session, caller: Caller) -> List[Plot]:
    return scope_for(db, caller).plots()


def resolve_visible_leads(db: Session, caller: Caller) -> List[Lead]:
    return scope_for(db, caller).leads()


def resolve_visible_payments(db: Session, caller: Caller) -> List[Payment]:
    return scope_for(db, caller).payments()
