"""Availability schemas - Pydantic models for calendar updates"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from ...constants import AvailabilityStatus

MAX_RANGE_DAYS = 366


class AvailabilityUpdate(BaseModel):
    """Mark every day from `from` to `to` (inclusive) with one status"""

    from_date: date = Field(..., alias="from")
    to_date: Optional[date] = Field(None, alias="to")
    status: AvailabilityStatus

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_range(self):
        end = self.to_date or self.from_date
        if end < self.from_date:
            raise ValueError("End date must be on or after the start date")
        if (end - self.from_date).days + 1 > MAX_RANGE_DAYS:
            raise ValueError(f"A range may cover at most {MAX_RANGE_DAYS} days")
        return self


class AvailabilityResponse(BaseModel):
    staffId: str
    dates: dict[str, str]
    updated_at: Optional[datetime] = None
