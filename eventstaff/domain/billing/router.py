"""Billing router - review, invoices, payouts, earnings, ledger and reports"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ...auth import SessionContext, require_roles
from ...constants import STAFF_ROLES, PayoutStatus, Role
from ...database import get_db
from ...models import Invoice, Payout
from .ledger import LedgerService, ReportService, payment_reference
from .pricing import calculate_price
from .schemas import (
    EarningItem,
    EarningsResponse,
    FinancialReport,
    FirmTurnover,
    InvoiceClient,
    InvoiceGenerateRequest,
    InvoiceResponse,
    LedgerResponse,
    LineItemSchema,
    PaymentCreate,
    PaymentResponse,
    PayoutResponse,
    PendingInvoiceItem,
    ReviewItem,
    ReviewRequest,
)
from .service import BillingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])

accounts = require_roles(Role.ACCOUNTANT, Role.ADMIN)


def get_billing_service(db: Session = Depends(get_db)) -> BillingService:
    """Dependency injection for BillingService"""
    return BillingService(db)


def to_invoice_response(invoice: Invoice) -> InvoiceResponse:
    client = invoice.client or {}
    return InvoiceResponse(
        orderId=invoice.id,
        invoiceNumber=invoice.invoice_number,
        invoiceDate=invoice.invoice_date,
        eventDate=invoice.event_date,
        client=InvoiceClient(
            id=client.get("id", invoice.client_id),
            name=client.get("name", "N/A"),
            companyName=client.get("companyName", "N/A"),
            address=client.get("address", "Address not provided"),
            gstin=client.get("gstin", "N/A"),
        ),
        lineItems=[LineItemSchema(**item) for item in invoice.line_items or []],
        subtotal=invoice.subtotal,
        gstRate=invoice.gst_rate,
        gstAmount=invoice.gst_amount,
        totalAmount=invoice.total_amount,
        firmId=invoice.firm_id,
        notes=invoice.notes,
        updated_at=invoice.updated_at,
    )


def to_payout_response(payout: Payout, context: Optional[dict] = None) -> PayoutResponse:
    client_name, event_date = (context or {}).get(payout.order_id, (None, None))
    return PayoutResponse(
        id=payout.id,
        orderId=payout.order_id,
        staffId=payout.staff_id,
        staffName=payout.staff_name,
        amount=payout.amount,
        status=payout.status,
        paidAt=payout.paid_at,
        clientName=client_name,
        eventDate=event_date,
    )


# Review


@router.get("/review", response_model=list[ReviewItem])
async def get_review_queue(
    ctx: SessionContext = Depends(accounts),
    service: BillingService = Depends(get_billing_service),
):
    return service.get_review_queue()


@router.post("/review/{order_id}", response_model=list[PayoutResponse])
async def review_order(
    order_id: str,
    data: Optional[ReviewRequest] = Body(None),
    ctx: SessionContext = Depends(accounts),
    service: BillingService = Depends(get_billing_service),
):
    """Approve staff payouts for a completed event and mark it Reviewed"""
    payouts = service.review_order(order_id, data or ReviewRequest(), ctx)
    return [to_payout_response(p) for p in payouts]


# Invoices


@router.get("/invoices/pending", response_model=list[PendingInvoiceItem])
async def get_pending_invoices(
    ctx: SessionContext = Depends(accounts),
    service: BillingService = Depends(get_billing_service),
):
    """Reviewed events that have no invoice yet"""
    orders = service.get_pending_invoices()
    names = service.client_names(o.user_id for o in orders)
    return [
        PendingInvoiceItem(
            orderId=o.id,
            clientName=names[o.user_id],
            date=o.date,
            attendees=o.attendees,
            menuType=o.menu_type,
            status=o.status,
            estimatedTotal=calculate_price(o.attendees, o.menu_type).total_amount,
        )
        for o in orders
    ]


@router.get("/invoices", response_model=list[InvoiceResponse])
async def list_invoices(
    ctx: SessionContext = Depends(require_roles(Role.CONSUMER, Role.ACCOUNTANT, Role.ADMIN)),
    service: BillingService = Depends(get_billing_service),
):
    """Clients see their own invoices, accounts see all"""
    if ctx.role == Role.CONSUMER:
        invoices = service.get_client_invoices(ctx.user_id)
    else:
        invoices = service.get_invoices()
    return [to_invoice_response(inv) for inv in invoices]


@router.get("/invoices/{order_id}", response_model=InvoiceResponse)
async def get_invoice(
    order_id: str,
    ctx: SessionContext = Depends(require_roles(Role.CONSUMER, Role.ACCOUNTANT, Role.ADMIN)),
    service: BillingService = Depends(get_billing_service),
):
    return to_invoice_response(service.get_invoice(order_id, ctx))


@router.post("/invoices/{order_id}", response_model=InvoiceResponse)
async def generate_invoice(
    order_id: str,
    data: Optional[InvoiceGenerateRequest] = Body(None),
    ctx: SessionContext = Depends(accounts),
    service: BillingService = Depends(get_billing_service),
):
    firm_id = data.firmId if data else None
    return to_invoice_response(service.generate_invoice(order_id, ctx, firm_id=firm_id))


# Payouts


@router.get("/payouts", response_model=list[PayoutResponse])
async def list_payouts(
    status: Optional[PayoutStatus] = None,
    ctx: SessionContext = Depends(accounts),
    service: BillingService = Depends(get_billing_service),
):
    payouts = service.get_payouts(status)
    context = service.payout_context(payouts)
    return [to_payout_response(p, context) for p in payouts]


@router.post("/payouts/{payout_id}/pay", response_model=PayoutResponse)
async def mark_payout_paid(
    payout_id: str,
    ctx: SessionContext = Depends(accounts),
    service: BillingService = Depends(get_billing_service),
):
    payout = service.mark_payout_paid(payout_id, ctx)
    return to_payout_response(payout, service.payout_context([payout]))


@router.get("/earnings/me", response_model=EarningsResponse)
async def get_my_earnings(
    ctx: SessionContext = Depends(require_roles(*STAFF_ROLES)),
    service: BillingService = Depends(get_billing_service),
):
    """Payouts for the caller's staff record, most recent event first"""
    if not ctx.staff_id:
        return EarningsResponse(totalPaid=0, totalPending=0, payouts=[])

    payouts = service.get_staff_payouts(ctx.staff_id)
    context = service.payout_context(payouts)
    items = []
    for p in payouts:
        client_name, event_date = context.get(p.order_id, ("Unknown User", None))
        items.append(
            EarningItem(
                payoutId=p.id,
                orderId=p.order_id,
                eventDate=event_date,
                clientName=client_name,
                amount=p.amount,
                status=p.status,
            )
        )

    paid = sum(p.amount for p in payouts if p.status == PayoutStatus.PAID.value)
    pending = sum(p.amount for p in payouts if p.status == PayoutStatus.PENDING.value)
    return EarningsResponse(totalPaid=round(paid, 2), totalPending=round(pending, 2), payouts=items)


# Ledger


@router.get("/ledger/{client_id}", response_model=LedgerResponse)
async def get_client_ledger(
    client_id: str,
    ctx: SessionContext = Depends(accounts),
    db: Session = Depends(get_db),
):
    return LedgerService(db).get_ledger(client_id)


@router.post("/ledger/{client_id}/payments", response_model=PaymentResponse, status_code=201)
async def record_payment(
    client_id: str,
    data: PaymentCreate,
    ctx: SessionContext = Depends(accounts),
    db: Session = Depends(get_db),
):
    payment = LedgerService(db).record_payment(client_id, data, ctx)
    return PaymentResponse(
        id=payment.id,
        clientId=payment.client_id,
        amount=payment.amount,
        date=payment.date,
        description=payment.description,
        reference=payment_reference(payment.id),
    )


# Reports


@router.get("/reports", response_model=FinancialReport)
async def get_financial_report(
    ctx: SessionContext = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    return ReportService(db).get_report()


@router.get("/reports/firms/{firm_id}", response_model=FirmTurnover)
async def get_firm_turnover(
    firm_id: str,
    ctx: SessionContext = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    return ReportService(db).get_firm_turnover(firm_id)
