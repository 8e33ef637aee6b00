"""
Client ledger and financial reports

Ledger: invoices are debits, recorded payments are credits, listed by date
with a running balance (positive balance = client owes us).
"""

import logging

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...constants import PayoutStatus, Role
from ...models import Firm, Invoice, Payment, Payout, Staff
from ..users.repository import UserRepository, display_name
from .schemas import (
    FinancialReport,
    FirmTurnover,
    InvoiceSummary,
    LedgerEntry,
    LedgerResponse,
    PaymentCreate,
    PayoutResponse,
)

logger = logging.getLogger(__name__)

RECENT_LIMIT = 10


def payment_reference(payment_id: str) -> str:
    return f"PAY-{payment_id[-6:].upper()}"


class LedgerService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository()

    def _get_client(self, client_id: str):
        client = self.users.get_user(self.db, client_id)
        if not client or client.role != Role.CONSUMER.value:
            raise HTTPException(status_code=404, detail=f"Client with ID {client_id} not found.")
        return client

    def get_ledger(self, client_id: str) -> LedgerResponse:
        client = self._get_client(client_id)

        rows = []
        for inv in self.db.query(Invoice).filter(Invoice.client_id == client_id).all():
            rows.append(
                {
                    "date": inv.invoice_date,
                    "description": f"Invoice for Event on {inv.event_date}",
                    "reference": inv.invoice_number,
                    "type": "invoice",
                    "debit": inv.total_amount,
                    "credit": 0.0,
                }
            )
        for payment in self.db.query(Payment).filter(Payment.client_id == client_id).all():
            rows.append(
                {
                    "date": payment.date,
                    "description": payment.description,
                    "reference": payment_reference(payment.id),
                    "type": "payment",
                    "debit": 0.0,
                    "credit": payment.amount,
                }
            )

        # Stable sort keeps invoices ahead of same-day payments
        rows.sort(key=lambda r: r["date"])

        balance = 0.0
        entries = []
        for row in rows:
            balance = round(balance + row["debit"] - row["credit"], 2)
            entries.append(LedgerEntry(balance=balance, **row))

        total_debit = round(sum(r["debit"] for r in rows), 2)
        total_credit = round(sum(r["credit"] for r in rows), 2)
        return LedgerResponse(
            clientId=client.id,
            clientName=display_name(client),
            entries=entries,
            totalDebit=total_debit,
            totalCredit=total_credit,
            balance=round(total_debit - total_credit, 2),
        )

    def record_payment(self, client_id: str, data: PaymentCreate, ctx: SessionContext) -> Payment:
        self._get_client(client_id)
        payment = Payment(
            client_id=client_id,
            amount=data.amount,
            date=data.date,
            description=data.description,
        )
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        logger.info(f"✅ Payment {payment_reference(payment.id)} of {payment.amount} recorded for {client_id} by {ctx.user_id}")
        return payment


class ReportService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository()

    def get_report(self) -> FinancialReport:
        """
        totalIn: all invoice totals.
        totalOut: actual staff cost (per-event charge) of paid payouts.
        profit: billed staff amount on paid payouts minus that actual cost.
        """
        total_in = self.db.query(func.coalesce(func.sum(Invoice.total_amount), 0.0)).scalar()

        paid = (
            self.db.query(Payout)
            .filter(Payout.status == PayoutStatus.PAID.value)
            .all()
        )
        staff_ids = {p.staff_id for p in paid}
        charges = {}
        if staff_ids:
            charges = dict(
                self.db.query(Staff.id, Staff.per_event_charge).filter(Staff.id.in_(staff_ids)).all()
            )

        billed = sum(p.amount for p in paid)
        total_out = sum(charges.get(p.staff_id) or 0 for p in paid)

        invoices = (
            self.db.query(Invoice)
            .order_by(Invoice.invoice_date.desc(), Invoice.updated_at.desc())
            .limit(RECENT_LIMIT)
            .all()
        )
        recent_paid = sorted(paid, key=lambda p: p.paid_at or p.created_at, reverse=True)[:RECENT_LIMIT]

        return FinancialReport(
            totalIn=round(float(total_in), 2),
            totalOut=round(float(total_out), 2),
            profit=round(float(billed - total_out), 2),
            recentInvoices=[
                InvoiceSummary(
                    orderId=inv.id,
                    invoiceNumber=inv.invoice_number,
                    clientName=(inv.client or {}).get("companyName") or (inv.client or {}).get("name") or "Unknown User",
                    invoiceDate=inv.invoice_date,
                    totalAmount=inv.total_amount,
                )
                for inv in invoices
            ],
            recentPayouts=[
                PayoutResponse(
                    id=p.id,
                    orderId=p.order_id,
                    staffId=p.staff_id,
                    staffName=p.staff_name,
                    amount=p.amount,
                    status=p.status,
                    paidAt=p.paid_at,
                    eventDate=p.order.date if p.order else None,
                )
                for p in recent_paid
            ],
        )

    def get_firm_turnover(self, firm_id: str) -> FirmTurnover:
        firm = self.db.query(Firm).filter(Firm.id == firm_id).first()
        if not firm:
            raise HTTPException(status_code=404, detail="Firm not found")

        count, turnover = (
            self.db.query(func.count(Invoice.id), func.coalesce(func.sum(Invoice.total_amount), 0.0))
            .filter(Invoice.firm_id == firm_id)
            .one()
        )
        return FirmTurnover(
            firmId=firm.id,
            companyName=firm.company_name,
            invoiceCount=count,
            turnover=round(float(turnover), 2),
        )
