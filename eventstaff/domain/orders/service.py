"""Order service - Business logic for event bookings and their lifecycle"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...constants import BACK_OFFICE_ROLES, InvoiceStatus, OrderStatus, Role
from ...models import Invoice, Order
from ..billing.pricing import calculate_price
from ..users.repository import UserRepository, display_name
from .repository import OrderRepository
from .schemas import ConsumerStats, OrderCreate, RecentActivity
from .status import validate_status_transition

logger = logging.getLogger(__name__)

# Roles allowed to book on behalf of a client
BOOKING_ROLES = frozenset({Role.SALES, Role.OPERATIONAL_MANAGER, Role.ADMIN})

# Statuses a staff member sees on their assigned events list
STAFF_VISIBLE_STATUSES = (
    OrderStatus.PENDING.value,
    OrderStatus.CONFIRMED.value,
    OrderStatus.COMPLETED.value,
)


class OrderService:
    """Service layer for order business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepository()
        self.user_repo = UserRepository()

    def get_order(self, order_id: str) -> Order:
        order = self.repo.get_order(self.db, order_id)
        if not order:
            raise HTTPException(status_code=404, detail=f"Order with ID {order_id} not found.")
        return order

    def get_order_for_update(self, order_id: str) -> Order:
        order = self.repo.get_order_for_update(self.db, order_id)
        if not order:
            raise HTTPException(status_code=404, detail=f"Order with ID {order_id} not found.")
        return order

    def get_visible_order(self, order_id: str, ctx: SessionContext) -> Order:
        """Back office sees any order, clients their own, staff the ones they work"""
        order = self.get_order(order_id)
        if ctx.role in BACK_OFFICE_ROLES:
            return order
        if ctx.role == Role.CONSUMER and order.user_id == ctx.user_id:
            return order
        if ctx.staff_id and ctx.staff_id in (order.assigned_staff or []):
            return order
        raise HTTPException(status_code=403, detail="You do not have access to this order")

    def create_order(self, data: OrderCreate, ctx: SessionContext) -> Order:
        if ctx.role == Role.CONSUMER:
            if data.clientId and data.clientId != ctx.user_id:
                raise HTTPException(status_code=403, detail="Clients can only book events for themselves")
            client_id = ctx.user_id
        elif ctx.role in BOOKING_ROLES:
            if not data.clientId:
                raise HTTPException(status_code=422, detail="clientId is required when booking for a client")
            client = self.user_repo.get_user(self.db, data.clientId)
            if not client:
                raise HTTPException(status_code=404, detail=f"User with ID {data.clientId} not found.")
            if client.role != Role.CONSUMER.value:
                raise HTTPException(status_code=422, detail="Orders can only be booked for client accounts")
            client_id = client.id
        else:
            raise HTTPException(status_code=403, detail="You do not have permission to perform this action")

        order = self.repo.create_order(
            self.db,
            user_id=client_id,
            date=data.date,
            time=data.time,
            attendees=data.attendees,
            menu_type=data.menuType.value,
            status=OrderStatus.PENDING.value,
            assigned_staff=[],
            invoice_status=InvoiceStatus.PENDING.value,
        )
        logger.info(f"🆕 Order {order.id} booked for {client_id} by {ctx.user_id} ({order.attendees} guests, {order.date})")
        return order

    def list_orders(self, ctx: SessionContext, status: Optional[OrderStatus] = None) -> list[Order]:
        statuses = [status.value] if status else None
        if ctx.role == Role.CONSUMER:
            return self.repo.get_orders(self.db, status=statuses, user_id=ctx.user_id)
        return self.repo.get_orders(self.db, status=statuses)

    def client_names(self, orders: list[Order]) -> dict[str, str]:
        """Map user id to client display name for a batch of orders"""
        users = self.user_repo.get_users_by_ids(self.db, (o.user_id for o in orders))
        return {uid: display_name(users.get(uid)) for uid in {o.user_id for o in orders}}

    def get_assigned_orders(self, ctx: SessionContext) -> list[Order]:
        if not ctx.staff_id:
            return []
        return self.repo.get_orders_for_staff(self.db, ctx.staff_id, STAFF_VISIBLE_STATUSES)

    def get_consumer_stats(self, ctx: SessionContext) -> ConsumerStats:
        orders = self.repo.get_orders(self.db, user_id=ctx.user_id)
        billed_statuses = {OrderStatus.COMPLETED.value, OrderStatus.REVIEWED.value}

        billed = [o for o in orders if o.status in billed_statuses]
        invoices = {}
        if billed:
            rows = self.db.query(Invoice).filter(Invoice.id.in_([o.id for o in billed])).all()
            invoices = {inv.id: inv.total_amount for inv in rows}

        total_spent = 0.0
        for order in billed:
            if order.id in invoices:
                total_spent += invoices[order.id]
            else:
                total_spent += calculate_price(order.attendees, order.menu_type).total_amount

        today = date.today().isoformat()
        upcoming = sum(
            1 for o in orders if o.status == OrderStatus.CONFIRMED.value and o.date >= today
        )
        pending = sum(1 for o in orders if o.status == OrderStatus.PENDING.value)

        recent = None
        if orders:
            recent = RecentActivity(status=orders[0].status, date=orders[0].date)

        return ConsumerStats(
            totalSpent=round(total_spent, 2),
            upcomingEvents=upcoming,
            pendingOrders=pending,
            recentActivity=recent,
        )

    def _transition(self, order: Order, target: OrderStatus, ctx: SessionContext) -> Order:
        validate_status_transition(order.id, order.status, target)
        previous = order.status
        order.status = target.value
        self.db.commit()
        self.db.refresh(order)
        logger.info(f"✅ Order {order.id} transitioned: {previous} → {target.value} (by {ctx.user_id})")
        return order

    def confirm_order(self, order_id: str, ctx: SessionContext) -> Order:
        order = self.get_order_for_update(order_id)
        return self._transition(order, OrderStatus.CONFIRMED, ctx)

    def cancel_order(self, order_id: str, ctx: SessionContext) -> Order:
        order = self.get_order_for_update(order_id)
        if ctx.role == Role.CONSUMER:
            if order.user_id != ctx.user_id:
                raise HTTPException(status_code=403, detail="You can only cancel your own orders")
            if order.status != OrderStatus.PENDING.value:
                raise HTTPException(
                    status_code=409, detail="Only pending orders can be cancelled by the client"
                )
        return self._transition(order, OrderStatus.CANCELLED, ctx)

    def complete_order(self, order_id: str, ctx: SessionContext) -> Order:
        """End the event; captains may only end events they are assigned to"""
        order = self.get_order_for_update(order_id)
        if ctx.role == Role.CAPTAIN_BUTLER:
            if not ctx.staff_id or ctx.staff_id not in (order.assigned_staff or []):
                raise HTTPException(status_code=403, detail="You are not assigned to this event")
        return self._transition(order, OrderStatus.COMPLETED, ctx)
