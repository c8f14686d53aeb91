"""Tests for plotcrm.services.leads - lead lifecycle and assignment."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta

import pytest

from conftest import caller_for, make_lead, make_plot, make_user
from plotcrm.errors import Conflict, Forbidden, NotFound, ValidationError
from plotcrm.models.models import ActivityLog, Lead
from plotcrm.services import leads as lead_service
from plotcrm.services.booking import create_booking


def _lead_data(**overrides):
    data = {
        "name": "Anita Desai",
        "email": None,
        "phone": "9876500000",
        "source": "Referral",
        "status": "New",
        "rating": "Urgent",
        "assigned_to": None,
        "follow_up_date": None,
        "notes": None,
    }
    data.update(overrides)
    return data


class TestAssignLead:

    def test_admin_assigns_lead(self, db, admin, salesperson):
        lead = make_lead(db, name="Kiran Rao")

        result = lead_service.assign_lead(db, lead.id, salesperson.id, caller_for(admin))

        assert result.assigned_to == salesperson.id
        assert result.assigned_by == admin.id
        entries = db.query(ActivityLog).filter(ActivityLog.entity_id == lead.id).all()
        assert len(entries) == 1
        assert entries[0].action == "Assigned Lead"
        assert "Kiran Rao" in entries[0].details
        assert salesperson.name in entries[0].details

    def test_salesperson_cannot_assign(self, db, salesperson):
        lead = make_lead(db)
        with pytest.raises(Forbidden):
            lead_service.assign_lead(db, lead.id, salesperson.id, caller_for(salesperson))
        assert db.query(ActivityLog).count() == 0

    def test_missing_lead(self, db, admin, salesperson):
        with pytest.raises(NotFound):
            lead_service.assign_lead(db, uuid.uuid4(), salesperson.id, caller_for(admin))

    def test_assignee_must_be_salesperson(self, db, admin):
        lead = make_lead(db)
        with pytest.raises(ValidationError):
            lead_service.assign_lead(db, lead.id, admin.id, caller_for(admin))
        db.expire_all()
        assert db.get(Lead, lead.id).assigned_to is None


class TestCreateLead:

    def test_create_records_activity(self, db, admin):
        lead = lead_service.create_lead(db, _lead_data(), caller_for(admin))

        assert lead.status == "New"
        assert lead.assigned_to is None
        entry = db.query(ActivityLog).one()
        assert entry.action == "Created Lead"
        assert entry.entity_type == "lead"
        assert entry.entity_id == lead.id

    def test_admin_can_assign_on_create(self, db, admin, salesperson):
        lead = lead_service.create_lead(db, _lead_data(assigned_to=salesperson.id), caller_for(admin))
        assert lead.assigned_to == salesperson.id
        assert lead.assigned_by == admin.id

    def test_salesperson_cannot_assign_others_on_create(self, db, salesperson):
        other = make_user(db, role="salesperson")
        with pytest.raises(Forbidden):
            lead_service.create_lead(db, _lead_data(assigned_to=other.id), caller_for(salesperson))
        assert db.query(Lead).count() == 0

    def test_salesperson_claims_own_lead_on_create(self, db, salesperson):
        """A lead a salesperson creates for themselves stays visible to them."""
        lead = lead_service.create_lead(db, _lead_data(assigned_to=salesperson.id), caller_for(salesperson))

        assert lead.assigned_to == salesperson.id
        assert lead.assigned_by == salesperson.id
        assert [l.id for l in lead_service.list_leads(db, caller_for(salesperson))] == [lead.id]
        updated = lead_service.update_lead(db, lead.id, {"rating": "Low"}, caller_for(salesperson))
        assert updated.rating == "Low"

    def test_cannot_create_booked_lead(self, db, admin):
        with pytest.raises(ValidationError):
            lead_service.create_lead(db, _lead_data(status="Booked"), caller_for(admin))


class TestUpdateLead:

    def test_partial_update(self, db, admin):
        lead = make_lead(db, status="Contacted")

        updated = lead_service.update_lead(db, lead.id, {"status": "Site Visit", "notes": "Visit on Sunday"}, caller_for(admin))

        assert updated.status == "Site Visit"
        assert updated.notes == "Visit on Sunday"
        assert updated.name == lead.name
        assert db.query(ActivityLog).filter(ActivityLog.action == "Updated Lead").count() == 1

    def test_salesperson_updates_own_lead(self, db, salesperson):
        lead = make_lead(db, assigned_to=salesperson)
        updated = lead_service.update_lead(db, lead.id, {"rating": "Low"}, caller_for(salesperson))
        assert updated.rating == "Low"

    def test_salesperson_cannot_see_other_lead(self, db, salesperson):
        lead = make_lead(db, assigned_to=make_user(db, role="salesperson"))
        with pytest.raises(NotFound):
            lead_service.update_lead(db, lead.id, {"rating": "Low"}, caller_for(salesperson))

    def test_salesperson_cannot_reassign(self, db, salesperson):
        lead = make_lead(db, assigned_to=salesperson)
        other = make_user(db, role="salesperson")
        with pytest.raises(Forbidden):
            lead_service.update_lead(db, lead.id, {"assigned_to": other.id}, caller_for(salesperson))

    def test_booked_requires_payment(self, db, admin):
        lead = make_lead(db)
        with pytest.raises(ValidationError):
            lead_service.update_lead(db, lead.id, {"status": "Booked"}, caller_for(admin))
        db.expire_all()
        assert db.get(Lead, lead.id).status == "Interested"

    def test_required_fields_are_not_cleared(self, db, admin):
        lead = make_lead(db, name="Keep Me")
        updated = lead_service.update_lead(db, lead.id, {"name": None, "notes": None}, caller_for(admin))
        assert updated.name == "Keep Me"


class TestDeleteLead:

    def test_delete_records_activity(self, db, admin):
        lead = make_lead(db, name="Gone Soon")
        lead_id = lead.id

        lead_service.delete_lead(db, lead_id, caller_for(admin))

        assert db.get(Lead, lead_id) is None
        entry = db.query(ActivityLog).one()
        assert entry.action == "Deleted Lead"
        assert entry.entity_id == lead_id

    def test_lead_with_booking_cannot_be_deleted(self, db, admin, project):
        lead = make_lead(db)
        plot = make_plot(db, project)
        create_booking(
            db, lead_id=lead.id, plot_id=plot.id, amount=1000, mode="Cash",
            booking_type="Token", actor=caller_for(admin),
        )
        with pytest.raises(Conflict):
            lead_service.delete_lead(db, lead.id, caller_for(admin))


class TestTodayFollowUps:

    def test_only_todays_leads_in_scope(self, db, admin, salesperson):
        # 10:00 IST on 15 March 2024
        now = datetime(2024, 3, 15, 4, 30)
        due = make_lead(db, name="Due", assigned_to=salesperson, follow_up_date=now + timedelta(hours=2))
        make_lead(db, name="Tomorrow", assigned_to=salesperson, follow_up_date=now + timedelta(days=1))
        make_lead(db, name="Other", follow_up_date=now)

        sp_leads = lead_service.today_follow_ups(db, caller_for(salesperson), now=now)
        admin_leads = lead_service.today_follow_ups(db, caller_for(admin), now=now)

        assert [l.id for l in sp_leads] == [due.id]
        assert {l.name for l in admin_leads} == {"Due", "Other"}
