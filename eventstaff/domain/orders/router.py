"""Order router - booking, listing and lifecycle transitions"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import SessionContext, get_session_context, require_roles
from ...constants import BACK_OFFICE_ROLES, STAFF_ROLES, OrderStatus, Role
from ...database import get_db
from ...models import Order
from ..staff.repository import StaffRepository
from .schemas import (
    AssignedOrderResponse,
    ConsumerStats,
    OrderCreate,
    OrderResponse,
    StaffSummary,
)
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_readers = require_roles(Role.CONSUMER, *BACK_OFFICE_ROLES)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Dependency injection for OrderService"""
    return OrderService(db)


def to_order_response(order: Order, client_name: str) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        userId=order.user_id,
        clientName=client_name,
        date=order.date,
        time=order.time,
        attendees=order.attendees,
        menuType=order.menu_type,
        status=order.status,
        assignedStaff=list(order.assigned_staff or []),
        invoiceStatus=order.invoice_status,
        created_at=order.created_at,
    )


def _single_response(service: OrderService, order: Order) -> OrderResponse:
    return to_order_response(order, service.client_names([order])[order.user_id])


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    data: OrderCreate,
    ctx: SessionContext = Depends(
        require_roles(Role.CONSUMER, Role.SALES, Role.OPERATIONAL_MANAGER, Role.ADMIN)
    ),
    service: OrderService = Depends(get_order_service),
):
    return _single_response(service, service.create_order(data, ctx))


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    status: Optional[OrderStatus] = None,
    ctx: SessionContext = Depends(order_readers),
    service: OrderService = Depends(get_order_service),
):
    """Clients get their own orders; back office gets every order, newest first"""
    orders = service.list_orders(ctx, status)
    names = service.client_names(orders)
    return [to_order_response(o, names[o.user_id]) for o in orders]


@router.get("/stats/me", response_model=ConsumerStats)
async def get_my_stats(
    ctx: SessionContext = Depends(require_roles(Role.CONSUMER)),
    service: OrderService = Depends(get_order_service),
):
    return service.get_consumer_stats(ctx)


@router.get("/assigned/me", response_model=list[AssignedOrderResponse])
async def get_my_assigned_orders(
    ctx: SessionContext = Depends(require_roles(*STAFF_ROLES)),
    service: OrderService = Depends(get_order_service),
    db: Session = Depends(get_db),
):
    """Events the caller is staffed on, with their teammates"""
    orders = service.get_assigned_orders(ctx)
    names = service.client_names(orders)
    staff_ids = {sid for o in orders for sid in (o.assigned_staff or [])}
    staff = StaffRepository.get_staff_by_ids(db, staff_ids)

    results = []
    for order in orders:
        details = [
            StaffSummary(id=s.id, name=s.name, role=s.role, phone=s.phone)
            for s in (staff.get(sid) for sid in order.assigned_staff or [])
            if s is not None
        ]
        base = to_order_response(order, names[order.user_id])
        results.append(AssignedOrderResponse(**base.model_dump(), assignedStaffDetails=details))
    return results


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    ctx: SessionContext = Depends(get_session_context),
    service: OrderService = Depends(get_order_service),
):
    return _single_response(service, service.get_visible_order(order_id, ctx))


@router.post("/{order_id}/confirm", response_model=OrderResponse)
async def confirm_order(
    order_id: str,
    ctx: SessionContext = Depends(require_roles(Role.OPERATIONAL_MANAGER, Role.ADMIN)),
    service: OrderService = Depends(get_order_service),
):
    return _single_response(service, service.confirm_order(order_id, ctx))


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    ctx: SessionContext = Depends(
        require_roles(Role.CONSUMER, Role.OPERATIONAL_MANAGER, Role.ADMIN)
    ),
    service: OrderService = Depends(get_order_service),
):
    return _single_response(service, service.cancel_order(order_id, ctx))


@router.post("/{order_id}/complete", response_model=OrderResponse)
async def complete_order(
    order_id: str,
    ctx: SessionContext = Depends(
        require_roles(Role.CAPTAIN_BUTLER, Role.OPERATIONAL_MANAGER, Role.ADMIN)
    ),
    service: OrderService = Depends(get_order_service),
):
    """Mark the event as ended so it can go to billing review"""
    return _single_response(service, service.complete_order(order_id, ctx))
