"""Assignment router - operational managers staff events"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import SessionContext, require_roles
from ...constants import Role
from ...database import get_db
from ..orders.router import get_order_service, to_order_response
from ..orders.schemas import OrderResponse
from ..orders.service import OrderService
from .schemas import AssignmentBoard
from .service import AssignmentService

router = APIRouter(prefix="/orders", tags=["Assignments"])

assignment_managers = require_roles(Role.OPERATIONAL_MANAGER, Role.ADMIN)


def get_assignment_service(db: Session = Depends(get_db)) -> AssignmentService:
    return AssignmentService(db)


@router.get("/{order_id}/assignment", response_model=AssignmentBoard)
async def get_assignment_board(
    order_id: str,
    ctx: SessionContext = Depends(assignment_managers),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Assigned staff plus eligible candidates with workload and availability"""
    return service.get_board(order_id)


@router.post("/{order_id}/assignment/{staff_id}", response_model=OrderResponse)
async def assign_staff(
    order_id: str,
    staff_id: str,
    ctx: SessionContext = Depends(assignment_managers),
    service: AssignmentService = Depends(get_assignment_service),
    orders: OrderService = Depends(get_order_service),
):
    order = service.assign_staff(order_id, staff_id, ctx)
    return to_order_response(order, orders.client_names([order])[order.user_id])


@router.delete("/{order_id}/assignment/{staff_id}", response_model=OrderResponse)
async def unassign_staff(
    order_id: str,
    staff_id: str,
    ctx: SessionContext = Depends(assignment_managers),
    service: AssignmentService = Depends(get_assignment_service),
    orders: OrderService = Depends(get_order_service),
):
    order = service.unassign_staff(order_id, staff_id, ctx)
    return to_order_response(order, orders.client_names([order])[order.user_id])
