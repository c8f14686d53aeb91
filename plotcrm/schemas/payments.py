import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


PaymentMode = Literal["Cash", "UPI", "Cheque", "Bank Transfer"]
BookingType = Literal["Token", "Full"]


class PaymentCreate(BaseModel):
    lead_id: uuid.UUID
    plot_id: uuid.UUID
    amount: float = Field(ge=0)
    mode: PaymentMode
    booking_type: BookingType
    transaction_id: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("transaction_id", "notes", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class PaymentResponse(BaseModel):
    id: uuid.UUID
    lead_id: uuid.UUID
    plot_id: uuid.UUID
    amount: float
    mode: str
    booking_type: str
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
