import uuid
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .catalog import BuyerInterestSummary


class BuyerInterestCreate(BaseModel):
    plot_id: uuid.UUID
    buyer_name: str = Field(min_length=1, max_length=255)
    buyer_contact: str = Field(min_length=10, max_length=50)
    buyer_email: Optional[EmailStr] = None
    offered_price: float = Field(ge=0)
    salesperson_id: uuid.UUID
    notes: Optional[str] = None

    @field_validator("buyer_email", "notes", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class BuyerInterestResponse(BuyerInterestSummary):
    plot_id: uuid.UUID
