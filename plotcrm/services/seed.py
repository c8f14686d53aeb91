"""
Demo data: one admin, one salesperson, a project with 20 plots and five leads.

Idempotent: nothing is written when the admin account already exists. Booked
and Sold demo plots go through the booking engine so every booked plot has a
payment behind it.
"""
from datetime import timedelta

import structlog
from sqlalchemy.orm import Session

from ..auth.security import get_password_hash
from ..db import unit_of_work
from ..models.models import Lead, Plot, Project, User, utcnow
from .booking import apply_booking
from .permissions import Caller

ADMIN_EMAIL = "admin@example.com"
SALES_EMAIL = "sales@example.com"
DEMO_PASSWORD = "password123"

logger = structlog.get_logger()


def seed_database(db: Session) -> bool:
    """
    Returns True when data was written.

    Everything, bookings included, commits as one unit of work, so a failed
    run leaves nothing behind and the next run starts from scratch.
    """
    if db.query(User.id).filter(User.email == ADMIN_EMAIL).first():
        logger.info("seed_skipped", reason="admin exists")
        return False

    with unit_of_work(db):
        password_hash = get_password_hash(DEMO_PASSWORD)
        admin = User(name="Admin User", email=ADMIN_EMAIL, password_hash=password_hash, role="admin", phone="9876543210")
        salesperson = User(name="John Sales", email=SALES_EMAIL, password_hash=password_hash, role="salesperson", phone="9876543211")
        db.add_all([admin, salesperson])
        db.flush()

        project = Project(
            name="Green Valley Plots",
            location="Bangalore, Karnataka",
            total_plots=50,
            description="Premium residential plots with all modern amenities",
        )
        db.add(project)
        db.flush()

        facings = ["East", "West", "North", "South"]
        plots = []
        for i in range(1, 21):
            plot = Plot(
                project_id=project.id,
                plot_number=f"A-{i:03d}",
                size=f"{1000 + i * 50} sq.ft",
                price=2000000 + i * 100000,
                facing=facings[i % 4],
                category="Residential",
                status="Available",
            )
            plots.append(plot)
        db.add_all(plots)

        now = utcnow()
        leads = [
            Lead(name="Rajesh Kumar", email="rajesh@example.com", phone="9876543212", source="Website",
                 status="New", rating="Urgent", notes="Interested in east-facing plots"),
            Lead(name="Priya Sharma", email="priya@example.com", phone="9876543213", source="Referral",
                 status="Contacted", rating="Intermediate", assigned_to=salesperson.id, assigned_by=admin.id,
                 notes="Looking for 1500+ sq.ft plots"),
            Lead(name="Amit Patel", phone="9876543214", source="Facebook", status="Interested", rating="Urgent",
                 assigned_to=salesperson.id, assigned_by=admin.id, follow_up_date=now + timedelta(days=1),
                 notes="Budget 25-30 lakhs"),
            Lead(name="Sneha Reddy", email="sneha@example.com", phone="9876543215", source="Google Ads",
                 status="Site Visit", rating="Urgent", assigned_to=salesperson.id, assigned_by=admin.id,
                 follow_up_date=now, notes="Scheduled site visit for tomorrow"),
            Lead(name="Vikram Singh", phone="9876543216", source="Walk-in", status="Interested", rating="Urgent",
                 assigned_to=salesperson.id, assigned_by=admin.id, notes="Booked plot A-016"),
        ]
        db.add_all(leads)
        db.flush()

        # Plots 16-18 booked with a token, 19-20 sold, all through the booking engine
        actor = Caller.from_user(admin)
        buyer = leads[-1]
        for plot in plots[15:]:
            booking_type = "Token" if plot.plot_number <= "A-018" else "Full"
            amount = 500000 if booking_type == "Token" else plot.price
            apply_booking(
                db,
                lead_id=buyer.id,
                plot_id=plot.id,
                amount=amount,
                mode="Bank Transfer",
                booking_type=booking_type,
                actor=actor,
            )

    logger.info("seed_completed", admin=ADMIN_EMAIL, salesperson=SALES_EMAIL)
    return True
