"""
Billing firms - the legal entities invoices can be issued under
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy.orm import Session

from ..auth import SessionContext, require_roles
from ..constants import GstType, Role
from ..database import get_db
from ..models import Firm
from ..shared.validators import validate_gstin
from ..utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/firms", tags=["Firms"])


class FirmCreate(BaseModel):
    companyName: str = Field(..., min_length=2)
    address: str = Field(..., min_length=5)
    contactNumber: str
    gstType: GstType
    gstNumber: Optional[str] = None
    gstPercentage: Optional[float] = None

    @field_validator("contactNumber")
    @classmethod
    def validate_contact(cls, v):
        if not (v.isdigit() and len(v) == 10):
            raise ValueError("Contact number must be 10 digits")
        return v

    @field_validator("gstNumber")
    @classmethod
    def validate_gst(cls, v):
        if v:
            return validate_gstin(v)
        return v

    @model_validator(mode="after")
    def check_gst_fields(self):
        if self.gstType == GstType.GST:
            if not self.gstNumber:
                raise ValueError("GST number is required for GST firms")
            if not self.gstPercentage or self.gstPercentage <= 0:
                raise ValueError("GST percentage must be greater than 0")
        else:
            # Non-GST firms never carry GST details
            self.gstNumber = None
            self.gstPercentage = None
        return self


class FirmResponse(BaseModel):
    id: str
    companyName: str
    address: str
    contactNumber: str
    gstType: str
    gstNumber: Optional[str] = None
    gstPercentage: Optional[float] = None
    created_at: Optional[datetime] = None


def to_firm_response(firm: Firm) -> FirmResponse:
    return FirmResponse(
        id=firm.id,
        companyName=firm.company_name,
        address=firm.address,
        contactNumber=firm.contact_number,
        gstType=firm.gst_type,
        gstNumber=firm.gst_number,
        gstPercentage=firm.gst_percentage,
        created_at=firm.created_at,
    )


@router.post("", response_model=FirmResponse, status_code=201)
async def create_firm(
    data: FirmCreate,
    ctx: SessionContext = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    firm = Firm(
        company_name=data.companyName,
        address=sanitize_string(data.address),
        contact_number=data.contactNumber,
        gst_type=data.gstType.value,
        gst_number=data.gstNumber,
        gst_percentage=data.gstPercentage,
    )
    db.add(firm)
    db.commit()
    db.refresh(firm)
    logger.info(f"✅ Firm {firm.id} ({firm.company_name}) created by {ctx.user_id}")
    return to_firm_response(firm)


@router.get("", response_model=List[FirmResponse])
async def list_firms(
    ctx: SessionContext = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db),
):
    firms = db.query(Firm).order_by(Firm.company_name.asc()).all()
    return [to_firm_response(f) for f in firms]
