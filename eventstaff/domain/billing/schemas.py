"""Billing schemas - review, invoices, payouts, ledger and reports"""

from datetime import date as date_type
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_iso_date
from ...utils.sanitization import validate_and_sanitize_input


class PayoutOverride(BaseModel):
    staffId: str
    amount: float = Field(..., ge=0)


class ReviewRequest(BaseModel):
    """Optional per-staff payout amounts; others fall back to their per-event charge"""

    payouts: List[PayoutOverride] = []


class SuggestedPayout(BaseModel):
    staffId: str
    staffName: str
    role: Optional[str] = None
    amount: float


class ReviewItem(BaseModel):
    orderId: str
    clientName: str
    date: str
    attendees: int
    menuType: str
    status: str
    suggestedPayouts: List[SuggestedPayout] = []


class PayoutResponse(BaseModel):
    id: str
    orderId: str
    staffId: str
    staffName: str
    amount: float
    status: str
    paidAt: Optional[datetime] = None
    clientName: Optional[str] = None
    eventDate: Optional[str] = None


class LineItemSchema(BaseModel):
    description: str
    amount: float


class InvoiceClient(BaseModel):
    id: str
    name: str
    companyName: str
    address: str
    gstin: str


class InvoiceGenerateRequest(BaseModel):
    firmId: Optional[str] = None


class InvoiceResponse(BaseModel):
    orderId: str
    invoiceNumber: str
    invoiceDate: str
    eventDate: str
    client: InvoiceClient
    lineItems: List[LineItemSchema]
    subtotal: float
    gstRate: float
    gstAmount: float
    totalAmount: float
    firmId: Optional[str] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None


class PendingInvoiceItem(BaseModel):
    orderId: str
    clientName: str
    date: str
    attendees: int
    menuType: str
    status: str
    estimatedTotal: float


class EarningItem(BaseModel):
    payoutId: str
    orderId: str
    eventDate: Optional[str] = None
    clientName: str
    amount: float
    status: str


class EarningsResponse(BaseModel):
    totalPaid: float
    totalPending: float
    payouts: List[EarningItem] = []


class PaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    description: str = Field(..., min_length=3)
    date: str = Field(default_factory=lambda: date_type.today().isoformat())

    @field_validator("description")
    @classmethod
    def clean_description(cls, v):
        return validate_and_sanitize_input(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        # Accept full timestamps, keep the day
        return validate_iso_date(v.split("T")[0])


class PaymentResponse(BaseModel):
    id: str
    clientId: str
    amount: float
    date: str
    description: str
    reference: str


class LedgerEntry(BaseModel):
    date: str
    description: str
    reference: str
    type: str  # invoice | payment
    debit: float
    credit: float
    balance: float


class LedgerResponse(BaseModel):
    clientId: str
    clientName: str
    entries: List[LedgerEntry] = []
    totalDebit: float
    totalCredit: float
    balance: float


class InvoiceSummary(BaseModel):
    orderId: str
    invoiceNumber: str
    clientName: str
    invoiceDate: str
    totalAmount: float


class FinancialReport(BaseModel):
    totalIn: float
    totalOut: float
    profit: float
    recentInvoices: List[InvoiceSummary] = []
    recentPayouts: List[PayoutResponse] = []


class FirmTurnover(BaseModel):
    firmId: str
    companyName: str
    invoiceCount: int
    turnover: float
