import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    location: str = Field(min_length=1, max_length=255)
    total_plots: int = Field(ge=1)
    description: Optional[str] = None

    @field_validator("description", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class ProjectResponse(BaseModel):
    id: uuid.UUID
    name: str
    location: str
    total_plots: int
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PlotCreate(BaseModel):
    project_id: uuid.UUID
    plot_number: str = Field(min_length=1, max_length=50)
    size: str = Field(min_length=1, max_length=100)
    price: float = Field(gt=0)
    facing: Optional[str] = None
    category: Optional[str] = None
    # Booked/Sold are only reachable through a booking
    status: Literal["Available", "Hold"] = "Available"

    @field_validator("facing", "category", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None


class PlotStatusUpdate(BaseModel):
    status: Literal["Available", "Hold"]


class PlotResponse(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    plot_number: str
    size: str
    price: float
    facing: Optional[str] = None
    category: Optional[str] = None
    status: str
    booked_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PlotWithProjectResponse(PlotResponse):
    project: Optional[ProjectResponse] = None


class SalespersonRef(BaseModel):
    id: uuid.UUID
    name: str


class BuyerInterestSummary(BaseModel):
    id: uuid.UUID
    buyer_name: str
    buyer_contact: str
    buyer_email: Optional[str] = None
    offered_price: float
    salesperson_id: uuid.UUID
    salesperson_name: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PlotOverview(PlotResponse):
    buyer_interest_count: int = 0
    highest_offer: float = 0
    salespersons: List[SalespersonRef] = []
    buyer_interests: List[BuyerInterestSummary] = []


class ProjectOverview(ProjectResponse):
    available_plots: int = 0
    hold_plots: int = 0
    booked_plots: int = 0
    sold_plots: int = 0
    total_interested_buyers: int = 0
    plots: List[PlotOverview] = []


class PlotStats(BaseModel):
    total_interested_buyers: int
    average_offered_price: float
    highest_offer: float
    buyer_interests: List[BuyerInterestSummary] = []
