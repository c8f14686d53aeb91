"""
Caller identity and role checks.
"""
import uuid
from dataclasses import dataclass

from ..errors import Forbidden
from ..models.models import User


@dataclass(frozen=True)
class Caller:
    """Identity of whoever is performing an operation, passed explicitly into services."""
    id: uuid.UUID
    role: str
    email: str
    name: str = ""

    @classmethod
    def from_user(cls, user: User) -> "Caller":
        return cls(id=user.id, role=user.role, email=user.email, name=user.name)

    @property
    def display_name(self) -> str:
        return self.name or self.email


def is_admin(caller: Caller) -> bool:
    """Check if caller has admin role."""
    return caller.role == "admin"


def is_salesperson(caller: Caller) -> bool:
    return caller.role == "salesperson"


def ensure_admin(caller: Caller) -> None:
    if not is_admin(caller):
        raise Forbidden("Admin access required")
