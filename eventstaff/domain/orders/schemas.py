"""Order domain schemas - Pydantic models for validation"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ...constants import MenuType
from ...shared.validators import validate_iso_date

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class OrderCreate(BaseModel):
    """Schema for booking an event"""

    clientId: Optional[str] = Field(None, description="Client user id when staff book on a client's behalf")
    date: str
    time: str = "19:00"
    attendees: int = Field(..., ge=1)
    menuType: MenuType

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return validate_iso_date(v)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        if not v or not TIME_PATTERN.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v


class StaffSummary(BaseModel):
    id: str
    name: str
    role: str
    phone: Optional[str] = None


class OrderResponse(BaseModel):
    id: str
    userId: str
    clientName: str
    date: str
    time: str
    attendees: int
    menuType: str
    status: str
    assignedStaff: List[str] = []
    invoiceStatus: str
    created_at: Optional[datetime] = None


class AssignedOrderResponse(OrderResponse):
    assignedStaffDetails: List[StaffSummary] = []


class RecentActivity(BaseModel):
    status: str
    date: str


class ConsumerStats(BaseModel):
    totalSpent: float
    upcomingEvents: int
    pendingOrders: int
    recentActivity: Optional[RecentActivity] = None
