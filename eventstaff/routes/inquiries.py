"""
Staff signup inquiries submitted from the public "join us" form
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from ..auth import SessionContext, require_roles
from ..constants import InquiryStatus, Role
from ..database import get_db
from ..models import Inquiry
from ..rate_limiter import create_rate_limiter
from ..shared.validators import validate_indian_phone
from ..utils.sanitization import validate_and_sanitize_input

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inquiries", tags=["Inquiries"])

# Public endpoint: 5 submissions per hour per IP
inquiry_rate_limit = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="inquiries")


class InquiryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    phone: str

    @field_validator("name")
    @classmethod
    def clean_name(cls, v):
        return validate_and_sanitize_input(v, max_length=255)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_indian_phone(v)


class InquiryStatusUpdate(BaseModel):
    status: InquiryStatus


class InquiryResponse(BaseModel):
    id: str
    name: str
    phone: str
    status: str
    created_at: Optional[datetime] = None


def _to_response(inquiry: Inquiry) -> InquiryResponse:
    return InquiryResponse(
        id=inquiry.id,
        name=inquiry.name,
        phone=inquiry.phone,
        status=inquiry.status,
        created_at=inquiry.created_at,
    )


@router.post("", response_model=InquiryResponse, status_code=201)
async def submit_inquiry(
    data: InquiryCreate,
    db: Session = Depends(get_db),
    _: None = Depends(inquiry_rate_limit),
):
    """Record interest from a prospective staff member (no login required)"""
    inquiry = Inquiry(name=data.name, phone=data.phone, status=InquiryStatus.NEW.value)
    db.add(inquiry)
    db.commit()
    db.refresh(inquiry)
    logger.info(f"📥 New staff inquiry {inquiry.id}")
    return _to_response(inquiry)


@router.get("", response_model=List[InquiryResponse])
async def list_inquiries(
    status: Optional[InquiryStatus] = None,
    ctx: SessionContext = Depends(require_roles(Role.HR, Role.ADMIN)),
    db: Session = Depends(get_db),
):
    query = db.query(Inquiry)
    if status:
        query = query.filter(Inquiry.status == status.value)
    return [_to_response(i) for i in query.order_by(Inquiry.created_at.desc()).all()]


@router.patch("/{inquiry_id}", response_model=InquiryResponse)
async def update_inquiry_status(
    inquiry_id: str,
    data: InquiryStatusUpdate,
    ctx: SessionContext = Depends(require_roles(Role.HR, Role.ADMIN)),
    db: Session = Depends(get_db),
):
    inquiry = db.query(Inquiry).filter(Inquiry.id == inquiry_id).first()
    if not inquiry:
        raise HTTPException(status_code=404, detail="Inquiry not found")

    inquiry.status = data.status.value
    db.commit()
    db.refresh(inquiry)
    logger.info(f"✅ {ctx.user_id} marked inquiry {inquiry_id} as {inquiry.status}")
    return _to_response(inquiry)
