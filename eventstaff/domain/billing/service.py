"""
Billing service - post-event review, staff payouts and invoice generation

Flow: Completed order → accountant review (payouts recorded, status Reviewed)
→ invoice generated (invoice row upserted, invoice status Generated)
"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...constants import InvoiceStatus, OrderStatus, PayoutStatus, Role
from ...models import Firm, Invoice, Order, Payout
from ..orders.repository import OrderRepository
from ..orders.status import validate_status_transition
from ..staff.repository import StaffRepository
from ..users.repository import UserRepository, display_name
from .pricing import calculate_price
from .schemas import ReviewItem, ReviewRequest, SuggestedPayout

logger = logging.getLogger(__name__)


def build_invoice_number(order_id: str, on: Optional[date] = None) -> str:
    """INV-YYYYMMDD-XXXX where XXXX is the tail of the order id"""
    on = on or date.today()
    return f"INV-{on.strftime('%Y%m%d')}-{order_id[-4:].upper()}"


class BillingService:
    """Service layer for review, payouts and invoices"""

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository()
        self.staff = StaffRepository()
        self.users = UserRepository()

    def client_names(self, user_ids) -> dict[str, str]:
        ids = set(user_ids)
        users = self.users.get_users_by_ids(self.db, ids)
        return {uid: display_name(users.get(uid)) for uid in ids}

    def _get_order_for_update(self, order_id: str) -> Order:
        order = self.orders.get_order_for_update(self.db, order_id)
        if not order:
            raise HTTPException(status_code=404, detail=f"Order with ID {order_id} not found.")
        return order

    # Review

    def get_review_queue(self) -> list[ReviewItem]:
        """Completed events awaiting review, with suggested payouts"""
        orders = self.orders.get_orders(self.db, status=[OrderStatus.COMPLETED.value])
        names = self.client_names(o.user_id for o in orders)
        staff = self.staff.get_staff_by_ids(
            self.db, {sid for o in orders for sid in (o.assigned_staff or [])}
        )

        queue = []
        for order in orders:
            suggested = [
                SuggestedPayout(
                    staffId=s.id,
                    staffName=s.name,
                    role=s.role,
                    amount=s.per_event_charge or 0,
                )
                for s in (staff.get(sid) for sid in order.assigned_staff or [])
                if s is not None
            ]
            queue.append(
                ReviewItem(
                    orderId=order.id,
                    clientName=names[order.user_id],
                    date=order.date,
                    attendees=order.attendees,
                    menuType=order.menu_type,
                    status=order.status,
                    suggestedPayouts=suggested,
                )
            )
        return queue

    def review_order(self, order_id: str, data: ReviewRequest, ctx: SessionContext) -> list[Payout]:
        """
        Record one Pending payout per assigned staff member and mark the order
        Reviewed, committed together.
        """
        order = self._get_order_for_update(order_id)
        validate_status_transition(order.id, order.status, OrderStatus.REVIEWED)

        assigned = list(order.assigned_staff or [])
        overrides = {p.staffId: p.amount for p in data.payouts}
        unknown = set(overrides) - set(assigned)
        if unknown:
            raise HTTPException(
                status_code=422,
                detail=f"Staff not assigned to this event: {', '.join(sorted(unknown))}",
            )

        staff = self.staff.get_staff_by_ids(self.db, assigned)
        payouts = []
        try:
            for staff_id in assigned:
                member = staff.get(staff_id)
                if member is None:
                    logger.warning(f"⚠️ Order {order_id}: assigned staff {staff_id} no longer exists, skipping payout")
                    continue
                payout = Payout(
                    order_id=order.id,
                    staff_id=member.id,
                    staff_name=member.name,
                    amount=overrides.get(staff_id, member.per_event_charge or 0),
                    status=PayoutStatus.PENDING.value,
                )
                self.db.add(payout)
                payouts.append(payout)

            order.status = OrderStatus.REVIEWED.value
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Review of order {order_id} failed: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to record review") from e

        logger.info(f"✅ Order {order_id} reviewed by {ctx.user_id}: {len(payouts)} payout(s) recorded")
        return payouts

    # Invoices

    def get_pending_invoices(self) -> list[Order]:
        """Reviewed orders that still have no invoice"""
        orders = self.orders.get_orders(self.db, status=[OrderStatus.REVIEWED.value])
        return [o for o in orders if o.invoice_status == InvoiceStatus.PENDING.value]

    def get_invoices(self) -> list[Invoice]:
        return self.db.query(Invoice).order_by(Invoice.invoice_date.desc()).all()

    def get_invoice(self, order_id: str, ctx: SessionContext) -> Invoice:
        invoice = self.db.query(Invoice).filter(Invoice.id == order_id).first()
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        if ctx.role == Role.CONSUMER and invoice.client_id != ctx.user_id:
            raise HTTPException(status_code=403, detail="You do not have access to this invoice")
        return invoice

    def get_client_invoices(self, client_id: str) -> list[Invoice]:
        return (
            self.db.query(Invoice)
            .filter(Invoice.client_id == client_id)
            .order_by(Invoice.invoice_date.desc())
            .all()
        )

    def generate_invoice(self, order_id: str, ctx: SessionContext, firm_id: Optional[str] = None) -> Invoice:
        """
        Build the invoice for a reviewed order. Regenerating overwrites the
        existing invoice for the order.
        """
        order = self._get_order_for_update(order_id)
        if order.status != OrderStatus.REVIEWED.value:
            raise HTTPException(
                status_code=409,
                detail=f"Invoices can only be generated for reviewed events (order is {order.status})",
            )

        user = self.users.get_user(self.db, order.user_id)
        if not user:
            raise HTTPException(status_code=404, detail=f"User with ID {order.user_id} not found.")

        if firm_id and not self.db.query(Firm.id).filter(Firm.id == firm_id).scalar():
            raise HTTPException(status_code=404, detail="Firm not found")

        price = calculate_price(order.attendees, order.menu_type)
        today = date.today()
        fields = {
            "invoice_number": build_invoice_number(order.id, today),
            "invoice_date": today.isoformat(),
            "event_date": order.date,
            "client_id": user.id,
            "client": {
                "id": user.id,
                "name": user.name or "N/A",
                "companyName": user.company_name or "N/A",
                "address": user.address or "Address not provided",
                "gstin": user.gst_number or "N/A",
            },
            "line_items": [item.to_dict() for item in price.line_items],
            "subtotal": price.subtotal,
            "gst_rate": price.gst_rate,
            "gst_amount": price.gst_amount,
            "total_amount": price.total_amount,
            "firm_id": firm_id,
        }

        try:
            invoice = self.db.query(Invoice).filter(Invoice.id == order.id).first()
            if invoice:
                for key, value in fields.items():
                    setattr(invoice, key, value)
                invoice.updated_at = datetime.utcnow()
            else:
                invoice = Invoice(id=order.id, **fields)
                self.db.add(invoice)

            # Invoice row must exist before the order is flagged
            self.db.flush()
            order.invoice_status = InvoiceStatus.GENERATED.value
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Invoice generation for order {order_id} failed: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to generate invoice") from e

        self.db.refresh(invoice)
        logger.info(f"✅ Invoice {invoice.invoice_number} generated for order {order_id} by {ctx.user_id} (total {invoice.total_amount})")
        return invoice

    def set_invoice_notes(self, invoice: Invoice, notes: str) -> Invoice:
        invoice.notes = notes
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    # Payouts

    def get_payouts(self, status: Optional[PayoutStatus] = None) -> list[Payout]:
        query = self.db.query(Payout)
        if status:
            query = query.filter(Payout.status == status.value)
        return query.order_by(Payout.created_at.desc()).all()

    def mark_payout_paid(self, payout_id: str, ctx: SessionContext) -> Payout:
        payout = self.db.query(Payout).filter(Payout.id == payout_id).with_for_update().first()
        if not payout:
            raise HTTPException(status_code=404, detail="Payout not found")

        if payout.status == PayoutStatus.PAID.value:
            logger.info(f"Payout {payout_id} already marked as paid")
            self.db.commit()
            return payout

        payout.status = PayoutStatus.PAID.value
        payout.paid_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(payout)
        logger.info(f"✅ Payout {payout_id} ({payout.amount}) to {payout.staff_name} marked paid by {ctx.user_id}")
        return payout

    def get_staff_payouts(self, staff_id: str) -> list[Payout]:
        payouts = self.db.query(Payout).filter(Payout.staff_id == staff_id).all()
        return sorted(payouts, key=lambda p: p.order.date if p.order else "", reverse=True)

    def payout_context(self, payouts: list[Payout]) -> dict[str, tuple]:
        """Map order id to (client name, event date) for a batch of payouts"""
        orders = {p.order_id: p.order for p in payouts if p.order is not None}
        names = self.client_names(o.user_id for o in orders.values())
        return {oid: (names[o.user_id], o.date) for oid, o in orders.items()}
