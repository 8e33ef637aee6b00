"""
AI helpers - waiter suggestions, staff agreements and invoice cover notes
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from ..auth import SessionContext, get_session_context, require_roles
from ..constants import Role
from ..domain.billing.router import get_billing_service
from ..domain.billing.service import BillingService
from ..domain.staff.router import get_staff_service
from ..domain.staff.service import StaffService
from ..rate_limiter import create_rate_limiter
from ..services import ai_service
from ..services.ai_service import AgreementDraft, InvoiceNotes, WaiterSuggestion

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI"])

# Generation is billed per call: 30 requests per hour per IP
ai_rate_limit = create_rate_limiter(limit=30, window_seconds=3600, key_prefix="ai")


class WaiterSuggestionRequest(BaseModel):
    attendees: int = Field(..., ge=1)


async def _run(flow, *args):
    """Run a blocking generation flow, mapping boundary errors to HTTP errors"""
    try:
        return await run_in_threadpool(flow, *args)
    except ai_service.AINotConfiguredError as e:
        logger.error(f"❌ AI service not configured: {str(e)}")
        raise HTTPException(status_code=503, detail="AI service is not configured") from e
    except ai_service.GenerationError as e:
        raise HTTPException(status_code=502, detail=f"AI generation failed: {str(e)}") from e


@router.post("/suggest-waiters", response_model=WaiterSuggestion)
async def suggest_waiters(
    data: WaiterSuggestionRequest,
    ctx: SessionContext = Depends(get_session_context),
    _: None = Depends(ai_rate_limit),
):
    return await _run(ai_service.suggest_waiters, data.attendees)


@router.post("/staff/{staff_id}/agreement", response_model=AgreementDraft)
async def generate_agreement(
    staff_id: str,
    ctx: SessionContext = Depends(require_roles(Role.HR, Role.ADMIN)),
    service: StaffService = Depends(get_staff_service),
    _: None = Depends(ai_rate_limit),
):
    """Draft an employment agreement from the staff record"""
    staff = service.get_staff_member(staff_id)
    draft = await _run(ai_service.generate_agreement, ai_service.agreement_input_for(staff))
    logger.info(f"✅ Agreement drafted for staff {staff_id} by {ctx.user_id}")
    return draft


@router.post("/invoices/{order_id}/notes", response_model=InvoiceNotes)
async def draft_invoice_notes(
    order_id: str,
    ctx: SessionContext = Depends(require_roles(Role.ACCOUNTANT, Role.ADMIN)),
    service: BillingService = Depends(get_billing_service),
    _: None = Depends(ai_rate_limit),
):
    """Draft a cover note and store it on the invoice"""
    invoice = service.get_invoice(order_id, ctx)
    notes = await _run(ai_service.draft_invoice_notes, invoice)
    service.set_invoice_notes(invoice, notes.summary)
    return notes
