"""Tests for plotcrm.services.catalog, buyer_interests and users."""

from __future__ import annotations

import uuid

import pytest

from conftest import caller_for, make_lead, make_plot, make_user
from plotcrm.auth.security import verify_password
from plotcrm.errors import Conflict, Forbidden, NotFound, ValidationError
from plotcrm.models.models import ActivityLog, BuyerInterest, Lead, Plot, User
from plotcrm.services import buyer_interests as interest_service
from plotcrm.services import catalog
from plotcrm.services import users as user_service
from plotcrm.services.booking import create_booking


def _interest(plot, salesperson, buyer="Meera", price=2000000):
    return {
        "plot_id": plot.id,
        "buyer_name": buyer,
        "buyer_contact": "9123456789",
        "buyer_email": None,
        "offered_price": price,
        "salesperson_id": salesperson.id,
        "notes": None,
    }


class TestProjectsAndPlots:

    def test_create_project(self, db, admin):
        project = catalog.create_project(
            db, {"name": "Lake View", "location": "Mysore", "total_plots": 40, "description": None}, caller_for(admin)
        )
        assert project.id is not None
        entry = db.query(ActivityLog).one()
        assert (entry.action, entry.entity_type) == ("Created Project", "project")

    def test_salesperson_cannot_create_project(self, db, salesperson):
        with pytest.raises(Forbidden):
            catalog.create_project(
                db, {"name": "X", "location": "Y", "total_plots": 1, "description": None}, caller_for(salesperson)
            )

    def test_create_plot(self, db, admin, project):
        plot = catalog.create_plot(
            db,
            {"project_id": project.id, "plot_number": "C-010", "size": "1500 sq.ft", "price": 2750000,
             "facing": "North", "category": "Corner", "status": "Hold"},
            caller_for(admin),
        )
        assert plot.status == "Hold"
        assert db.query(ActivityLog).filter(ActivityLog.action == "Created Plot").count() == 1

    def test_duplicate_plot_number(self, db, admin, project):
        make_plot(db, project, plot_number="C-010")
        with pytest.raises(Conflict):
            catalog.create_plot(
                db,
                {"project_id": project.id, "plot_number": "C-010", "size": "1500 sq.ft", "price": 1,
                 "facing": None, "category": None, "status": "Available"},
                caller_for(admin),
            )

    def test_plot_for_missing_project(self, db, admin):
        with pytest.raises(NotFound):
            catalog.create_plot(
                db,
                {"project_id": uuid.uuid4(), "plot_number": "Z-1", "size": "1", "price": 1,
                 "facing": None, "category": None, "status": "Available"},
                caller_for(admin),
            )

    def test_toggle_hold(self, db, admin, project):
        plot = make_plot(db, project)
        assert catalog.set_plot_status(db, plot.id, "Hold", caller_for(admin)).status == "Hold"
        assert catalog.set_plot_status(db, plot.id, "Available", caller_for(admin)).status == "Available"

    def test_booked_plot_status_is_locked(self, db, admin, project):
        plot = make_plot(db, project)
        lead = make_lead(db)
        create_booking(
            db, lead_id=lead.id, plot_id=plot.id, amount=1000, mode="Cash",
            booking_type="Token", actor=caller_for(admin),
        )
        with pytest.raises(Conflict):
            catalog.set_plot_status(db, plot.id, "Available", caller_for(admin))
        db.expire_all()
        assert db.get(Plot, plot.id).status == "Booked"

    def test_plots_by_category(self, db, admin, project):
        make_plot(db, project, plot_number="R-1", category="Residential")
        make_plot(db, project, plot_number="C-1", category="Commercial")
        plots = catalog.plots_by_category(db, caller_for(admin), "Commercial")
        assert [p.plot_number for p in plots] == ["C-1"]
        assert plots[0].project.name == project.name


class TestOverview:

    def test_counts_and_interest(self, db, admin, salesperson, project):
        available = make_plot(db, project, plot_number="A-1")
        make_plot(db, project, plot_number="A-2", status="Hold")
        booked = make_plot(db, project, plot_number="A-3")
        create_booking(
            db, lead_id=make_lead(db).id, plot_id=booked.id, amount=1000, mode="Cash",
            booking_type="Token", actor=caller_for(admin),
        )
        interest_service.create_buyer_interest(db, _interest(available, salesperson, price=100), caller_for(admin))
        interest_service.create_buyer_interest(db, _interest(available, salesperson, buyer="Arun", price=300), caller_for(admin))

        [overview] = catalog.projects_overview(db, caller_for(admin))

        assert overview["total_plots"] == 3
        assert (overview["available_plots"], overview["hold_plots"], overview["booked_plots"], overview["sold_plots"]) == (1, 1, 1, 0)
        assert overview["total_interested_buyers"] == 2
        a1 = overview["plots"][0]
        assert a1["plot_number"] == "A-1"
        assert a1["highest_offer"] == 300
        assert a1["salespersons"] == [{"id": salesperson.id, "name": salesperson.name}]

    def test_salesperson_overview_is_scoped(self, db, salesperson, project):
        make_plot(db, project)
        assert catalog.projects_overview(db, caller_for(salesperson)) == []

    def test_plot_stats(self, db, admin, salesperson, project):
        plot = make_plot(db, project)
        for price in (100, 200, 600):
            interest_service.create_buyer_interest(db, _interest(plot, salesperson, price=price), caller_for(admin))

        stats = catalog.plot_stats(db, caller_for(admin), plot.id)

        assert stats["total_interested_buyers"] == 3
        assert stats["average_offered_price"] == pytest.approx(300)
        assert stats["highest_offer"] == 600

    def test_plot_stats_without_interest(self, db, admin, project):
        plot = make_plot(db, project)
        stats = catalog.plot_stats(db, caller_for(admin), plot.id)
        assert (stats["total_interested_buyers"], stats["average_offered_price"], stats["highest_offer"]) == (0, 0, 0)


class TestBuyerInterests:

    def test_salesperson_records_own_interest(self, db, salesperson, project):
        plot = make_plot(db, project)
        interest = interest_service.create_buyer_interest(db, _interest(plot, salesperson), caller_for(salesperson))
        assert interest.salesperson_name == salesperson.name
        db.expire_all()
        assert db.get(Plot, plot.id).status == "Available"

    def test_salesperson_cannot_record_for_someone_else(self, db, salesperson, project):
        plot = make_plot(db, project)
        other = make_user(db, role="salesperson")
        with pytest.raises(Forbidden):
            interest_service.create_buyer_interest(db, _interest(plot, other), caller_for(salesperson))

    def test_delete_own_interest_only(self, db, admin, salesperson, project):
        plot = make_plot(db, project)
        interest = interest_service.create_buyer_interest(db, _interest(plot, salesperson), caller_for(admin))
        intruder = make_user(db, role="salesperson")

        with pytest.raises(Forbidden):
            interest_service.delete_buyer_interest(db, interest.id, caller_for(intruder))

        interest_service.delete_buyer_interest(db, interest.id, caller_for(salesperson))
        assert db.query(BuyerInterest).count() == 0
        assert db.query(ActivityLog).filter(ActivityLog.action == "Removed Buyer Interest").count() == 1

    def test_list_requires_visible_plot(self, db, admin, salesperson, project):
        plot = make_plot(db, project)
        interest_service.create_buyer_interest(db, _interest(plot, salesperson), caller_for(admin))
        assert len(interest_service.list_buyer_interests(db, caller_for(admin), plot.id)) == 1
        with pytest.raises(NotFound):
            interest_service.list_buyer_interests(db, caller_for(salesperson), plot.id)


class TestUsers:

    def test_create_user_hashes_password(self, db, admin):
        user = user_service.create_user(
            db,
            {"name": "Nisha", "email": "Nisha@Example.com", "password": "hunter22", "role": "salesperson", "phone": None},
            caller_for(admin),
        )
        assert user.email == "nisha@example.com"
        assert user.password_hash != "hunter22"
        assert verify_password("hunter22", user.password_hash)
        assert db.query(ActivityLog).filter(ActivityLog.action == "Created User").count() == 1

    def test_duplicate_email(self, db, admin, salesperson):
        with pytest.raises(Conflict):
            user_service.create_user(
                db,
                {"name": "Dup", "email": salesperson.email, "password": "secret1", "role": "salesperson", "phone": None},
                caller_for(admin),
            )

    def test_delete_user_releases_leads(self, db, admin, salesperson):
        lead = make_lead(db, assigned_to=salesperson)
        sp_id = salesperson.id

        user_service.delete_user(db, sp_id, caller_for(admin))

        db.expire_all()
        assert db.get(User, sp_id) is None
        assert db.get(Lead, lead.id).assigned_to is None

    def test_cannot_delete_self(self, db, admin):
        with pytest.raises(ValidationError):
            user_service.delete_user(db, admin.id, caller_for(admin))

    def test_list_salespersons_admin_only(self, db, admin, salesperson):
        assert [u.id for u in user_service.list_salespersons(db, caller_for(admin))] == [salesperson.id]
        with pytest.raises(Forbidden):
            user_service.list_salespersons(db, caller_for(salesperson))
