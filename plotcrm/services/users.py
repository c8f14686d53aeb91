import uuid
from typing import List

from sqlalchemy.orm import Session

from ..auth.security import get_password_hash
from ..db import unit_of_work
from ..errors import Conflict, NotFound, ValidationError
from ..models.models import Lead, User
from . import audit
from .permissions import Caller, ensure_admin


def list_salespersons(db: Session, actor: Caller) -> List[User]:
    ensure_admin(actor)
    return (
        db.query(User)
        .filter(User.role == "salesperson")
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )


def create_user(db: Session, data: dict, actor: Caller) -> User:
    ensure_admin(actor)
    email = data["email"].lower()
    with unit_of_work(db):
        if db.query(User.id).filter(User.email == email).first():
            raise Conflict("Email already exists")
        user = User(
            name=data["name"],
            email=email,
            password_hash=get_password_hash(data["password"]),
            role=data["role"],
            phone=data.get("phone"),
        )
        db.add(user)
        db.flush()
        audit.record(
            db,
            actor,
            action="Created User",
            entity_type="user",
            entity_id=user.id,
            details=f"Created {user.role} account for {user.name}",
        )
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: uuid.UUID, actor: Caller) -> None:
    """Delete a user; their leads go back to the unassigned pool."""
    ensure_admin(actor)
    if user_id == actor.id:
        raise ValidationError("You cannot delete your own account")
    with unit_of_work(db):
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found")
        released = (
            db.query(Lead)
            .filter(Lead.assigned_to == user.id)
            .update({Lead.assigned_to: None, Lead.assigned_by: None}, synchronize_session=False)
        )
        db.query(Lead).filter(Lead.assigned_by == user.id).update(
            {Lead.assigned_by: None}, synchronize_session=False
        )
        name, role = user.name, user.role
        db.delete(user)
        db.flush()
        audit.record(
            db,
            actor,
            action="Deleted User",
            entity_type="user",
            entity_id=user_id,
            details=f"Deleted {role} account for {name} ({released} leads unassigned)",
        )
