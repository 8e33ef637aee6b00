"""Staff service - Business logic for the staff register and roster"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...constants import ROSTER_ROLES
from ...models import Staff, User
from ...utils.sanitization import sanitize_string
from .repository import StaffRepository
from .schemas import StaffCreate, StaffUpdate

logger = logging.getLogger(__name__)


class StaffService:
    """Service layer for staff business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = StaffRepository()

    def get_staff(self) -> list[Staff]:
        return self.repo.get_staff(self.db)

    def get_roster(self) -> list[Staff]:
        return self.repo.get_staff_by_roles(self.db, [r.value for r in ROSTER_ROLES])

    def get_staff_member(self, staff_id: str) -> Staff:
        staff = self.repo.get_staff_by_id(self.db, staff_id)
        if not staff:
            raise HTTPException(status_code=404, detail=f"Staff member with ID {staff_id} not found.")
        return staff

    def _check_user_link(self, user_id: str, staff_id: str = None):
        if not self.db.query(User).filter(User.id == user_id).first():
            raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found.")
        linked = self.repo.get_staff_by_user_id(self.db, user_id)
        if linked and linked.id != staff_id:
            raise HTTPException(
                status_code=409, detail="This user is already linked to another staff record"
            )

    def create_staff(self, data: StaffCreate, ctx: SessionContext) -> Staff:
        if data.userId:
            self._check_user_link(data.userId)

        staff = self.repo.create_staff(
            self.db,
            user_id=data.userId,
            name=data.name,
            phone=data.phone,
            role=data.role.value,
            staff_type=data.staffType.value,
            address=sanitize_string(data.address),
            id_number=data.idNumber,
            bank_account_number=data.bankAccountNumber,
            bank_ifsc_code=data.bankIfscCode,
            per_event_charge=data.perEventCharge,
            monthly_salary=data.monthlySalary,
        )
        logger.info(f"✅ {ctx.user_id} registered staff {staff.id} ({staff.role})")
        return staff

    def update_staff(self, staff_id: str, data: StaffUpdate, ctx: SessionContext) -> Staff:
        staff = self.get_staff_member(staff_id)
        if data.userId:
            self._check_user_link(data.userId, staff_id=staff.id)

        updates = {
            "user_id": data.userId,
            "name": data.name,
            "phone": data.phone,
            "role": data.role.value if data.role else None,
            "staff_type": data.staffType.value if data.staffType else None,
            "address": sanitize_string(data.address),
            "id_number": data.idNumber,
            "bank_account_number": data.bankAccountNumber,
            "bank_ifsc_code": data.bankIfscCode,
            "per_event_charge": data.perEventCharge,
            "monthly_salary": data.monthlySalary,
        }
        staff = self.repo.update_staff(self.db, staff, **updates)
        logger.info(f"✅ {ctx.user_id} updated staff {staff_id}")
        return staff

    def delete_staff(self, staff_id: str, ctx: SessionContext) -> None:
        staff = self.get_staff_member(staff_id)
        if self.repo.has_payouts(self.db, staff.id):
            raise HTTPException(
                status_code=409,
                detail="Staff member has payout history and cannot be deleted",
            )
        self.repo.delete_staff(self.db, staff)
        logger.info(f"🗑️ {ctx.user_id} deleted staff {staff_id}")
