import uuid
from datetime import datetime

from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_leads: int
    converted_leads: int
    lost_leads: int
    unassigned_leads: int
    total_projects: int
    total_plots: int
    available_plots: int
    hold_plots: int
    # Booked + Sold, as shown on the admin dashboard
    booked_plots: int
    sold_plots: int
    total_revenue: float
    today_follow_ups: int


class SalespersonStats(BaseModel):
    assigned_leads: int
    today_follow_ups: int
    converted_leads: int
    total_revenue: float


class ActivityLogResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    user_name: str
    action: str
    entity_type: str
    entity_id: uuid.UUID
    details: str
    created_at: datetime

    class Config:
        from_attributes = True
