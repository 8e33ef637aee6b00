"""
Assignment service - putting staff on events

Assigned staff are kept as a set of staff ids on the order. Every change locks
the order row for the whole read-modify-write so concurrent managers cannot
overwrite each other's edits.
"""

import logging
from collections import Counter

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...constants import WAITER_TIER_ROLES, AvailabilityStatus
from ...models import Order, Staff
from ..availability.service import AvailabilityService, availability_on, is_unavailable
from ..orders.repository import OrderRepository
from ..orders.status import ASSIGNABLE_STATUSES
from ..staff.repository import StaffRepository
from .schemas import AssignedStaff, AssignmentBoard, AssignmentCandidate

logger = logging.getLogger(__name__)

ELIGIBLE_ROLE_VALUES = frozenset(r.value for r in WAITER_TIER_ROLES)


def _staff_summary(staff: Staff) -> AssignedStaff:
    return AssignedStaff(id=staff.id, name=staff.name, role=staff.role, phone=staff.phone)


class AssignmentService:
    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository()
        self.staff = StaffRepository()
        self.availability = AvailabilityService(db)

    def _get_order(self, order_id: str, lock: bool = False) -> Order:
        if lock:
            order = self.orders.get_order_for_update(self.db, order_id)
        else:
            order = self.orders.get_order(self.db, order_id)
        if not order:
            raise HTTPException(status_code=404, detail=f"Order with ID {order_id} not found.")
        return order

    def assignment_counts(self) -> Counter:
        """Number of orders each staff id appears on, from a single scan"""
        counts = Counter()
        for (assigned,) in self.db.query(Order.assigned_staff).all():
            counts.update(set(assigned or []))
        return counts

    def get_board(self, order_id: str) -> AssignmentBoard:
        order = self._get_order(order_id)
        assigned_ids = list(order.assigned_staff or [])
        assigned_set = set(assigned_ids)

        assigned_staff = self.staff.get_staff_by_ids(self.db, assigned_ids)
        eligible = self.staff.get_staff_by_roles(self.db, ELIGIBLE_ROLE_VALUES)
        pool = [s for s in eligible if s.id not in assigned_set]

        counts = self.assignment_counts()
        calendars = self.availability.get_many(s.id for s in pool)

        candidates = []
        for s in pool:
            status = availability_on(calendars.get(s.id), order.date)
            candidates.append(
                AssignmentCandidate(
                    id=s.id,
                    name=s.name,
                    role=s.role,
                    phone=s.phone,
                    assignmentCount=counts.get(s.id, 0),
                    availability=status,
                    assignable=status != AvailabilityStatus.UNAVAILABLE.value,
                )
            )

        return AssignmentBoard(
            orderId=order.id,
            date=order.date,
            status=order.status,
            assigned=[_staff_summary(assigned_staff[sid]) for sid in assigned_ids if sid in assigned_staff],
            candidates=candidates,
        )

    def _check_editable(self, order: Order) -> None:
        if order.status not in {s.value for s in ASSIGNABLE_STATUSES}:
            raise HTTPException(
                status_code=409,
                detail=f"Staff cannot be changed on an order that is {order.status}",
            )

    def assign_staff(self, order_id: str, staff_id: str, ctx: SessionContext) -> Order:
        order = self._get_order(order_id, lock=True)
        self._check_editable(order)

        staff = self.staff.get_staff_by_id(self.db, staff_id)
        if not staff:
            raise HTTPException(status_code=404, detail=f"Staff member with ID {staff_id} not found.")
        if staff.role not in ELIGIBLE_ROLE_VALUES:
            raise HTTPException(
                status_code=422, detail=f"Staff with role {staff.role} cannot be assigned to events"
            )

        current = list(order.assigned_staff or [])
        if staff_id in current:
            self.db.commit()
            logger.info(f"Staff {staff_id} already assigned to order {order_id}")
            return order

        if is_unavailable(self.availability.get_dates(staff_id), order.date):
            raise HTTPException(
                status_code=409,
                detail=f"{staff.name} is unavailable on {order.date}",
            )

        # Reassign a new list so the JSON column is flagged dirty
        order.assigned_staff = current + [staff_id]
        self.db.commit()
        self.db.refresh(order)
        logger.info(f"✅ {ctx.user_id} assigned staff {staff_id} to order {order_id}")
        return order

    def unassign_staff(self, order_id: str, staff_id: str, ctx: SessionContext) -> Order:
        order = self._get_order(order_id, lock=True)
        self._check_editable(order)

        current = list(order.assigned_staff or [])
        remaining = [sid for sid in current if sid != staff_id]
        if len(remaining) != len(current):
            order.assigned_staff = remaining
            logger.info(f"✅ {ctx.user_id} removed staff {staff_id} from order {order_id}")
        self.db.commit()
        self.db.refresh(order)
        return order

