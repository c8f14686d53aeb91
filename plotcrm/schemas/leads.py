import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


LeadSource = Literal["Website", "Facebook", "Google Ads", "Referral", "Walk-in", "Other"]
LeadStatus = Literal["New", "Contacted", "Interested", "Site Visit", "Booked", "Lost"]
LeadRating = Literal["Urgent", "Intermediate", "Low"]


class LeadBase(BaseModel):
    @field_validator("email", "notes", mode="before", check_fields=False)
    @classmethod
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class LeadCreate(LeadBase):
    name: str = Field(min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: str = Field(min_length=10, max_length=50)
    source: LeadSource
    status: LeadStatus = "New"
    rating: LeadRating = "Intermediate"
    assigned_to: Optional[uuid.UUID] = None
    follow_up_date: Optional[datetime] = None
    notes: Optional[str] = None


class LeadUpdate(LeadBase):
    """Partial update; only fields that are sent are applied."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=10, max_length=50)
    source: Optional[LeadSource] = None
    status: Optional[LeadStatus] = None
    rating: Optional[LeadRating] = None
    assigned_to: Optional[uuid.UUID] = None
    follow_up_date: Optional[datetime] = None
    notes: Optional[str] = None


class LeadAssign(BaseModel):
    salesperson_id: uuid.UUID


class LeadResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: Optional[str] = None
    phone: str
    source: str
    status: str
    rating: str
    assigned_to: Optional[uuid.UUID] = None
    assigned_by: Optional[uuid.UUID] = None
    follow_up_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
