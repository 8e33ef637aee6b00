"""
Event alerts - SMS broadcast to the staff assigned to an order
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from ..auth import SessionContext, require_roles
from ..constants import OrderStatus, Role
from ..database import get_db
from ..domain.users.repository import UserRepository, display_name
from ..models import Order
from ..rate_limiter import create_rate_limiter
from ..services import twilio_service
from ..utils.sanitization import validate_and_sanitize_input

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/alerts", tags=["Alerts"])

alert_managers = require_roles(Role.ADMIN, Role.OPERATIONAL_MANAGER)

# 20 broadcasts per hour per IP
alerts_rate_limit = create_rate_limiter(limit=20, window_seconds=3600, key_prefix="alerts")

ALERTABLE_STATUSES = (OrderStatus.CONFIRMED.value, OrderStatus.REVIEWED.value)


class AlertRequest(BaseModel):
    orderId: str = Field(..., min_length=1)
    message: str = Field(..., min_length=10, max_length=1600)

    @field_validator("message")
    @classmethod
    def clean_message(cls, v):
        v = validate_and_sanitize_input(v, max_length=1600)
        if len(v) < 10:
            raise ValueError("Message must be at least 10 characters")
        return v


class AlertResult(BaseModel):
    success: bool
    sent: int
    failed: int
    message: str


class AlertableOrder(BaseModel):
    orderId: str
    clientName: str
    date: str
    status: str
    assignedCount: int


@router.get("/orders", response_model=List[AlertableOrder])
async def list_alertable_orders(
    ctx: SessionContext = Depends(alert_managers),
    db: Session = Depends(get_db),
):
    """Confirmed and reviewed events, latest event date first"""
    orders = (
        db.query(Order)
        .filter(Order.status.in_(ALERTABLE_STATUSES))
        .order_by(Order.date.desc())
        .all()
    )
    users = UserRepository.get_users_by_ids(db, (o.user_id for o in orders))
    return [
        AlertableOrder(
            orderId=o.id,
            clientName=display_name(users.get(o.user_id)),
            date=o.date,
            status=o.status,
            assignedCount=len(o.assigned_staff or []),
        )
        for o in orders
    ]


@router.post("", response_model=AlertResult)
async def send_alert(
    data: AlertRequest,
    ctx: SessionContext = Depends(alert_managers),
    db: Session = Depends(get_db),
    _: None = Depends(alerts_rate_limit),
):
    try:
        result = await twilio_service.send_order_alert(db, data.orderId, data.message)
    except twilio_service.TwilioNotConfiguredError as e:
        logger.error(f"❌ {str(e)}")
        raise HTTPException(status_code=503, detail="SMS service is not configured") from e

    logger.info(f"📨 {ctx.user_id} sent alert for order {data.orderId}: {result['message']}")
    return AlertResult(**result)
