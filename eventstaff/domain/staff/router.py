"""Staff router - staff register (HR/admin) and floor roster"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import SessionContext, require_roles
from ...constants import Role
from ...database import get_db
from ...models import Staff
from .schemas import StaffCreate, StaffResponse, StaffUpdate
from .service import StaffService

router = APIRouter(prefix="/staff", tags=["Staff"])

staff_managers = require_roles(Role.ADMIN, Role.HR)


def get_staff_service(db: Session = Depends(get_db)) -> StaffService:
    """Dependency injection for StaffService"""
    return StaffService(db)


def to_staff_response(staff: Staff) -> StaffResponse:
    return StaffResponse(
        id=staff.id,
        name=staff.name,
        phone=staff.phone,
        role=staff.role,
        staffType=staff.staff_type,
        userId=staff.user_id,
        address=staff.address,
        idNumber=staff.id_number,
        bankAccountNumber=staff.bank_account_number,
        bankIfscCode=staff.bank_ifsc_code,
        perEventCharge=staff.per_event_charge,
        monthlySalary=staff.monthly_salary,
        created_at=staff.created_at,
    )


@router.get("", response_model=list[StaffResponse])
async def list_staff(
    ctx: SessionContext = Depends(staff_managers),
    service: StaffService = Depends(get_staff_service),
):
    return [to_staff_response(s) for s in service.get_staff()]


@router.get("/roster", response_model=list[StaffResponse])
async def get_roster(
    ctx: SessionContext = Depends(
        require_roles(Role.SUPERVISOR, Role.OPERATIONAL_MANAGER, Role.ADMIN)
    ),
    service: StaffService = Depends(get_staff_service),
):
    """Waiters, pros, senior pros and captains available to the floor"""
    return [to_staff_response(s) for s in service.get_roster()]


@router.post("", response_model=StaffResponse, status_code=201)
async def create_staff(
    data: StaffCreate,
    ctx: SessionContext = Depends(staff_managers),
    service: StaffService = Depends(get_staff_service),
):
    return to_staff_response(service.create_staff(data, ctx))


@router.get("/{staff_id}", response_model=StaffResponse)
async def get_staff_member(
    staff_id: str,
    ctx: SessionContext = Depends(staff_managers),
    service: StaffService = Depends(get_staff_service),
):
    return to_staff_response(service.get_staff_member(staff_id))


@router.patch("/{staff_id}", response_model=StaffResponse)
async def update_staff(
    staff_id: str,
    data: StaffUpdate,
    ctx: SessionContext = Depends(staff_managers),
    service: StaffService = Depends(get_staff_service),
):
    return to_staff_response(service.update_staff(staff_id, data, ctx))


@router.delete("/{staff_id}", status_code=204)
async def delete_staff(
    staff_id: str,
    ctx: SessionContext = Depends(staff_managers),
    service: StaffService = Depends(get_staff_service),
):
    service.delete_staff(staff_id, ctx)
