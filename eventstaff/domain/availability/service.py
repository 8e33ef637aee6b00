"""Availability service - per-staff calendars of available/unavailable days"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...constants import AvailabilityStatus
from ...models import Availability, Staff
from .schemas import AvailabilityUpdate

logger = logging.getLogger(__name__)


def is_unavailable(dates: Optional[dict], day: str) -> bool:
    """True only when the day is explicitly marked unavailable"""
    return (dates or {}).get(day) == AvailabilityStatus.UNAVAILABLE.value


def availability_on(dates: Optional[dict], day: str) -> str:
    """available, unavailable or unknown (never marked)"""
    return (dates or {}).get(day, "unknown")


def expand_range(start: date, end: Optional[date] = None) -> list[str]:
    end = end or start
    return [(start + timedelta(days=i)).isoformat() for i in range((end - start).days + 1)]


class AvailabilityService:
    def __init__(self, db: Session):
        self.db = db

    def get_dates(self, staff_id: str) -> dict:
        record = self.db.query(Availability).filter(Availability.id == staff_id).first()
        return dict(record.dates or {}) if record else {}

    def get_many(self, staff_ids) -> dict[str, dict]:
        """Calendars for several staff members in one query"""
        ids = set(staff_ids)
        if not ids:
            return {}
        rows = self.db.query(Availability).filter(Availability.id.in_(ids)).all()
        return {row.id: dict(row.dates or {}) for row in rows}

    def get_for_staff(self, staff_id: str) -> Availability:
        if not self.db.query(Staff.id).filter(Staff.id == staff_id).scalar():
            raise HTTPException(status_code=404, detail=f"Staff member with ID {staff_id} not found.")
        record = self.db.query(Availability).filter(Availability.id == staff_id).first()
        return record or Availability(id=staff_id, dates={})

    def set_range(self, staff_id: str, data: AvailabilityUpdate) -> Availability:
        """Upsert the status for each day in the range, keeping all other days"""
        days = expand_range(data.from_date, data.to_date)

        record = (
            self.db.query(Availability)
            .filter(Availability.id == staff_id)
            .with_for_update()
            .first()
        )
        if not record:
            record = Availability(id=staff_id, dates={})
            self.db.add(record)

        merged = dict(record.dates or {})
        for day in days:
            merged[day] = data.status.value
        # Reassign so the JSON column is flagged dirty
        record.dates = merged

        self.db.commit()
        self.db.refresh(record)
        logger.info(f"✅ Staff {staff_id} marked {len(days)} day(s) {data.status.value}")
        return record


def require_staff_link(ctx: SessionContext) -> str:
    if not ctx.staff_id:
        raise HTTPException(status_code=404, detail="No staff record is linked to this account")
    return ctx.staff_id
