"""Availability router - staff manage their own calendar, managers read it"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import SessionContext, get_session_context, require_roles
from ...constants import Role
from ...database import get_db
from ...models import Availability
from .schemas import AvailabilityResponse, AvailabilityUpdate
from .service import AvailabilityService, require_staff_link

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def _to_response(record: Availability) -> AvailabilityResponse:
    return AvailabilityResponse(
        staffId=record.id, dates=dict(record.dates or {}), updated_at=record.updated_at
    )


@router.get("/me", response_model=AvailabilityResponse)
async def get_my_availability(
    ctx: SessionContext = Depends(get_session_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    staff_id = require_staff_link(ctx)
    return _to_response(service.get_for_staff(staff_id))


@router.put("/me", response_model=AvailabilityResponse)
async def set_my_availability(
    data: AvailabilityUpdate,
    ctx: SessionContext = Depends(get_session_context),
    service: AvailabilityService = Depends(get_availability_service),
):
    staff_id = require_staff_link(ctx)
    return _to_response(service.set_range(staff_id, data))


@router.get("/{staff_id}", response_model=AvailabilityResponse)
async def get_staff_availability(
    staff_id: str,
    ctx: SessionContext = Depends(
        require_roles(Role.OPERATIONAL_MANAGER, Role.ADMIN, Role.SUPERVISOR)
    ),
    service: AvailabilityService = Depends(get_availability_service),
):
    return _to_response(service.get_for_staff(staff_id))
