"""
Twilio SMS Service
Sends event alerts to the staff assigned to an order
"""

import asyncio
import logging
from typing import Optional

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ..config import TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_PHONE_NUMBER
from ..models import Order, SmsLog, Staff

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

NO_STAFF_MESSAGE = "No staff assigned to this event. No messages sent."


class TwilioNotConfiguredError(Exception):
    """Twilio credentials are missing from the environment"""


def twilio_configured() -> bool:
    return bool(TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER)


def _build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=10.0)


def _log_attempt(
    db: Session,
    to_phone: str,
    message_body: str,
    status: str,
    order_id: Optional[str] = None,
    staff_id: Optional[str] = None,
    message_sid: Optional[str] = None,
    error_message: Optional[str] = None,
) -> None:
    db.add(
        SmsLog(
            order_id=order_id,
            staff_id=staff_id,
            to_phone=to_phone,
            message_body=message_body,
            status=status,
            provider_message_sid=message_sid,
            error_message=error_message,
        )
    )


async def send_sms(
    db: Session,
    to_phone: str,
    message_body: str,
    order_id: Optional[str] = None,
    staff_id: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> tuple[bool, Optional[str]]:
    """
    Send one SMS via the Twilio REST API and record the attempt in sms_logs.

    Returns:
        Tuple of (success: bool, error_message: Optional[str])
    """
    if not twilio_configured():
        raise TwilioNotConfiguredError("Twilio credentials are not configured in environment variables.")

    if not to_phone.startswith("+"):
        logger.warning(f"Phone number not in E.164 format: {to_phone}")
        _log_attempt(db, to_phone, message_body, "failed", order_id, staff_id,
                     error_message="Phone number must be in E.164 format")
        return False, "Phone number must be in E.164 format (e.g., +1234567890)"

    if client is None:
        async with _build_client() as own_client:
            result = await send_sms(db, to_phone, message_body, order_id, staff_id, client=own_client)
        db.commit()
        return result

    data = {"To": to_phone, "Body": message_body, "From": TWILIO_PHONE_NUMBER}

    try:
        logger.info(f"🚀 Sending SMS to Twilio API for {to_phone}")
        response = await client.post(
            TWILIO_MESSAGES_URL.format(sid=TWILIO_ACCOUNT_SID),
            auth=(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN),
            data=data,
            timeout=10.0,
        )
        logger.info(f"📡 Twilio API response status: {response.status_code}")

        if response.status_code in (200, 201):
            message_sid = response.json().get("sid")
            _log_attempt(db, to_phone, message_body, "sent", order_id, staff_id, message_sid=message_sid)
            logger.info(f"✅ SMS sent to {to_phone} (SID: {message_sid})")
            return True, None

        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        error_message = error_data.get("message", f"HTTP {response.status_code}")
        error_code = error_data.get("code")
        _log_attempt(
            db, to_phone, message_body, "failed", order_id, staff_id,
            error_message=f"[{error_code}] {error_message}" if error_code else error_message,
        )
        logger.error(f"❌ Twilio API error [{error_code}]: {error_message}")
        return False, error_message

    except httpx.HTTPError as e:
        logger.error(f"❌ Twilio API error: {str(e)}")
        _log_attempt(db, to_phone, message_body, "failed", order_id, staff_id, error_message=str(e))
        return False, str(e)


async def send_order_alert(db: Session, order_id: str, message: str) -> dict:
    """
    Text every staff member assigned to an order.

    Staff records that no longer exist or have no phone number are skipped.
    Returns a summary dict: {success, sent, failed, message}.
    """
    if not order_id:
        raise HTTPException(status_code=422, detail="Order ID is required.")
    if not message or not message.strip():
        raise HTTPException(status_code=422, detail="Message is required.")

    if not twilio_configured():
        raise TwilioNotConfiguredError("Twilio credentials are not configured in environment variables.")

    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found.")

    staff_ids = list(order.assigned_staff or [])
    if not staff_ids:
        return {"success": True, "sent": 0, "failed": 0, "message": NO_STAFF_MESSAGE}

    staff = db.query(Staff).filter(Staff.id.in_(staff_ids)).all()
    recipients = [(s.id, s.phone.strip()) for s in staff if s.phone and s.phone.strip()]

    async with _build_client() as client:
        results = await asyncio.gather(
            *(send_sms(db, phone, message, order_id=order.id, staff_id=sid, client=client) for sid, phone in recipients)
        )
    db.commit()

    sent = sum(1 for ok, _ in results if ok)
    failed = len(results) - sent
    summary = f"Messages sent to {sent} staff members."
    if failed:
        summary += f" {failed} failed."

    logger.info(f"📨 Alert for order {order_id}: {sent} sent, {failed} failed")
    return {"success": failed == 0, "sent": sent, "failed": failed, "message": summary}
