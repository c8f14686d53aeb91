"""Pytest configuration and fixtures for PlotCRM tests.

Every test gets a fresh in-memory SQLite database. Route tests share the
application singleton and swap its ``get_db`` dependency for a session bound
to that database.
"""

from __future__ import annotations

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_DB"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["RATE_LIMIT"] = "10000/minute"
os.environ["JWT_SECRET"] = "test-secret"

from datetime import datetime
from itertools import count
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from plotcrm.auth.security import create_access_token, get_password_hash
from plotcrm.db import Base, get_db
from plotcrm.main import app
from plotcrm.models.models import Lead, Plot, Project, User
from plotcrm.services.permissions import Caller

TEST_PASSWORD = "secret123"
_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)
_seq = count(1)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    """Test client whose requests run against the per-test database."""

    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


def make_user(db: Session, role: str = "salesperson", name: Optional[str] = None, email: Optional[str] = None) -> User:
    n = next(_seq)
    user = User(
        name=name or f"{role.title()} {n}",
        email=email or f"{role}{n}@example.com",
        password_hash=_PASSWORD_HASH,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_project(db: Session, name: str = "Green Valley", total_plots: int = 10, created_at: Optional[datetime] = None) -> Project:
    project = Project(name=name, location="Bangalore", total_plots=total_plots)
    if created_at is not None:
        project.created_at = created_at
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def make_plot(
    db: Session,
    project: Project,
    plot_number: Optional[str] = None,
    price: float = 2500000,
    status: str = "Available",
    category: str = "Residential",
) -> Plot:
    plot = Plot(
        project_id=project.id,
        plot_number=plot_number or f"P-{next(_seq):03d}",
        size="1200 sq.ft",
        price=price,
        facing="East",
        category=category,
        status=status,
    )
    db.add(plot)
    db.commit()
    db.refresh(plot)
    return plot


def make_lead(
    db: Session,
    name: Optional[str] = None,
    status: str = "Interested",
    assigned_to: Optional[User] = None,
    follow_up_date: Optional[datetime] = None,
    created_at: Optional[datetime] = None,
) -> Lead:
    lead = Lead(
        name=name or f"Lead {next(_seq)}",
        phone="9876543210",
        source="Website",
        status=status,
        rating="Intermediate",
        assigned_to=assigned_to.id if assigned_to else None,
        follow_up_date=follow_up_date,
    )
    if created_at is not None:
        lead.created_at = created_at
    db.add(lead)
    db.commit()
    db.refresh(lead)
    return lead


def caller_for(user: User) -> Caller:
    return Caller.from_user(user)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}


@pytest.fixture
def admin(db) -> User:
    return make_user(db, role="admin", name="Admin User", email="admin@example.com")


@pytest.fixture
def salesperson(db) -> User:
    return make_user(db, role="salesperson", name="John Sales", email="sales@example.com")


@pytest.fixture
def project(db) -> Project:
    return make_project(db)
