"""
Booking transition service.

Recording a payment is what books a plot. One call performs, as a single unit
of work:

1. insert the Payment
2. move the Plot to Sold (Full) or Booked (Token), guarded on its current status
3. move the Lead to Booked
4. append a "Created Booking" activity entry

Either all four writes commit together or none do.
"""
import uuid
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.orm import Session

from ..db import unit_of_work
from ..errors import Conflict, Forbidden, NotFound, ValidationError
from ..models.models import (
    Lead,
    Payment,
    Plot,
    BOOKABLE_PLOT_STATUSES,
    BOOKING_TYPES,
    PAYMENT_MODES,
    utcnow,
)
from . import audit
from .permissions import Caller, is_admin

logger = structlog.get_logger()


def plot_status_for(booking_type: str) -> str:
    return "Sold" if booking_type == "Full" else "Booked"


def _format_amount(amount: float) -> str:
    return f"{amount:,.0f}" if float(amount).is_integer() else f"{amount:,.2f}"



def apply_booking(
    db: Session,
    *,
    lead_id: uuid.UUID,
    plot_id: uuid.UUID,
    amount: float,
    mode: str,
    booking_type: str,
    actor: Caller,
    transaction_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> Payment:
    """
    Flush the four booking writes into the current transaction without committing.

    The caller owns the unit of work; ``create_booking`` is the normal entry point.
    """
    if amount is None or amount < 0:
        raise ValidationError("Amount must be zero or positive")
    if booking_type not in BOOKING_TYPES:
        raise ValidationError(f"Booking type must be one of {', '.join(BOOKING_TYPES)}")
    if mode not in PAYMENT_MODES:
        raise ValidationError(f"Payment mode must be one of {', '.join(PAYMENT_MODES)}")

    new_plot_status = plot_status_for(booking_type)

    lead = db.query(Lead).filter(Lead.id == lead_id).first()
    if not lead:
        raise NotFound("Lead not found")
    if not is_admin(actor) and lead.assigned_to != actor.id:
        raise Forbidden("Lead is not assigned to you")
    plot = db.query(Plot).filter(Plot.id == plot_id).first()
    if not plot:
        raise NotFound("Plot not found")

    payment = Payment(
        lead_id=lead.id,
        plot_id=plot.id,
        amount=amount,
        mode=mode,
        booking_type=booking_type,
        transaction_id=transaction_id,
        notes=notes,
        created_by=actor.id,
        created_at=utcnow(),
    )
    db.add(payment)
    db.flush()

    # Guarded transition: only a plot that is still Available/Hold can be booked
    result = db.execute(
        update(Plot)
        .where(Plot.id == plot.id, Plot.status.in_(BOOKABLE_PLOT_STATUSES))
        .values(status=new_plot_status, booked_by=lead.id, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning("booking_conflict", plot_id=str(plot.id), lead_id=str(lead.id), current_status=plot.status)
        raise Conflict(f"Plot {plot.plot_number} is already {plot.status}")
    db.refresh(plot)

    lead.status = "Booked"
    db.flush()

    audit.record(
        db,
        actor,
        action="Created Booking",
        entity_type="payment",
        entity_id=payment.id,
        details=f"Booked plot {plot.plot_number} for {lead.name} - ₹{_format_amount(amount)}",
    )
    return payment


def create_booking(
    db: Session,
    *,
    lead_id: uuid.UUID,
    plot_id: uuid.UUID,
    amount: float,
    mode: str,
    booking_type: str,
    actor: Caller,
    transaction_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> Payment:
    """
    Record a payment and apply the plot/lead transition atomically.

    Args:
        db: Database session
        lead_id: Lead making the booking
        plot_id: Plot being booked
        amount: Amount paid (>= 0)
        mode: Cash|UPI|Cheque|Bank Transfer
        booking_type: Token (plot Booked) or Full (plot Sold)
        actor: Caller performing the booking
        transaction_id: Optional external reference
        notes: Optional notes

    Returns:
        The committed Payment

    Raises:
        ValidationError: amount, mode or booking_type out of range
        NotFound: lead or plot does not exist
        Forbidden: a salesperson booking a lead not assigned to them
        Conflict: plot is no longer Available/Hold
    """
    with unit_of_work(db):
        payment = apply_booking(
            db,
            lead_id=lead_id,
            plot_id=plot_id,
            amount=amount,
            mode=mode,
            booking_type=booking_type,
            actor=actor,
            transaction_id=transaction_id,
            notes=notes,
        )

    db.refresh(payment)
    logger.info(
        "booking_created",
        payment_id=str(payment.id),
        plot_id=str(plot_id),
        lead_id=str(lead_id),
        booking_type=booking_type,
        plot_status=plot_status_for(booking_type),
    )
    return payment
