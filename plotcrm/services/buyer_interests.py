"""
Buyer interest tracking. Offers recorded against a plot never change its status.
"""
import uuid
from typing import List

from sqlalchemy.orm import Session

from ..db import unit_of_work
from ..errors import Forbidden, NotFound
from ..models.models import BuyerInterest, Plot, User
from . import audit
from .permissions import Caller, is_admin
from .visibility import scope_for


def list_buyer_interests(db: Session, caller: Caller, plot_id: uuid.UUID) -> List[BuyerInterest]:
    plot = scope_for(db, caller).get_plot(plot_id)
    return (
        db.query(BuyerInterest)
        .filter(BuyerInterest.plot_id == plot.id)
        .order_by(BuyerInterest.created_at.desc(), BuyerInterest.id.desc())
        .all()
    )


def create_buyer_interest(db: Session, data: dict, actor: Caller) -> BuyerInterest:
    if not is_admin(actor) and data["salesperson_id"] != actor.id:
        raise Forbidden("Salespersons can only record their own buyer interest")
    with unit_of_work(db):
        salesperson = db.query(User).filter(User.id == data["salesperson_id"]).first()
        if not salesperson:
            raise NotFound("Salesperson not found")
        plot = db.query(Plot).filter(Plot.id == data["plot_id"]).first()
        if not plot:
            raise NotFound("Plot not found")
        interest = BuyerInterest(**data, salesperson_name=salesperson.name)
        db.add(interest)
        db.flush()
        audit.record(
            db,
            actor,
            action="Added Buyer Interest",
            entity_type="plot",
            entity_id=plot.id,
            details=f"{interest.buyer_name} interested in plot {plot.plot_number} with offer ₹{interest.offered_price:,.0f}",
        )
    db.refresh(interest)
    return interest


def delete_buyer_interest(db: Session, interest_id: uuid.UUID, actor: Caller) -> None:
    with unit_of_work(db):
        interest = db.query(BuyerInterest).filter(BuyerInterest.id == interest_id).first()
        if not interest:
            raise NotFound("Buyer interest not found")
        if not is_admin(actor) and interest.salesperson_id != actor.id:
            raise Forbidden("Salespersons can only remove their own buyer interest")
        plot_id = interest.plot_id
        plot = db.query(Plot).filter(Plot.id == plot_id).first()
        plot_label = plot.plot_number if plot else str(plot_id)
        details = f"Removed {interest.buyer_name}'s interest in plot {plot_label}"
        db.delete(interest)
        db.flush()
        audit.record(
            db,
            actor,
            action="Removed Buyer Interest",
            entity_type="plot",
            entity_id=plot_id,
            details=details,
        )
