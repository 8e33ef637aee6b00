import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from eventstaff.constants import Role
from eventstaff.models import SmsLog
from eventstaff.services import twilio_service

MESSAGE = "Report at the venue by 5pm in black attire."


@pytest.fixture()
def twilio(monkeypatch):
    """Configured Twilio credentials with a mocked REST API"""
    monkeypatch.setattr(twilio_service, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(twilio_service, "TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setattr(twilio_service, "TWILIO_PHONE_NUMBER", "+15005550006")

    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        sent.append(form)
        if form["To"] == "+919000000000":
            return httpx.Response(400, json={"code": 21211, "message": "Invalid 'To' Phone Number"})
        return httpx.Response(201, json={"sid": f"SM{len(sent)}"})

    monkeypatch.setattr(
        twilio_service,
        "_build_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    return sent


@pytest.fixture()
def order_id(client, make_user, headers):
    make_user("alice")
    make_user("om", Role.OPERATIONAL_MANAGER)
    order_id = client.post(
        "/orders",
        json={"date": "2026-12-20", "attendees": 40, "menuType": "veg"},
        headers=headers("alice"),
    ).json()["id"]
    client.post(f"/orders/{order_id}/confirm", headers=headers("om"))
    return order_id


def send_alert(client, headers, order_id, message=MESSAGE):
    return client.post("/alerts", json={"orderId": order_id, "message": message}, headers=headers("om"))


def test_alert_without_staff_sends_nothing(client, headers, twilio, order_id):
    response = send_alert(client, headers, order_id)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "sent": 0,
        "failed": 0,
        "message": twilio_service.NO_STAFF_MESSAGE,
    }
    assert twilio == []


def test_alert_texts_assigned_staff(client, db, make_staff, headers, twilio, order_id):
    first = make_staff("Waiter One", phone="+919811111111")
    second = make_staff("Waiter Two", phone="+919822222222")
    for staff in (first, second):
        client.post(f"/orders/{order_id}/assignment/{staff.id}", headers=headers("om"))

    response = send_alert(client, headers, order_id)

    assert response.json() == {
        "success": True,
        "sent": 2,
        "failed": 0,
        "message": "Messages sent to 2 staff members.",
    }
    assert sorted(m["To"] for m in twilio) == ["+919811111111", "+919822222222"]
    assert all(m["From"] == "+15005550006" and m["Body"] == MESSAGE for m in twilio)

    logs = db.query(SmsLog).filter(SmsLog.order_id == order_id).all()
    assert sorted(log.status for log in logs) == ["sent", "sent"]
    assert all(log.provider_message_sid for log in logs)


def test_blank_phones_are_skipped_and_failures_counted(client, db, make_staff, headers, twilio, order_id):
    good = make_staff("Good", phone="+919811111111")
    blank = make_staff("Blank", phone="   ")
    rejected = make_staff("Rejected", phone="+919000000000")
    for staff in (good, blank, rejected):
        client.post(f"/orders/{order_id}/assignment/{staff.id}", headers=headers("om"))

    body = send_alert(client, headers, order_id).json()

    assert body["success"] is False
    assert body["sent"] == 1
    assert body["failed"] == 1
    assert body["message"] == "Messages sent to 1 staff members. 1 failed."
    assert len(twilio) == 2

    failed = db.query(SmsLog).filter(SmsLog.status == "failed").one()
    assert failed.to_phone == "+919000000000"
    assert "21211" in failed.error_message


def test_unconfigured_twilio_is_unavailable(client, headers, monkeypatch, order_id):
    monkeypatch.setattr(twilio_service, "TWILIO_ACCOUNT_SID", None)

    assert send_alert(client, headers, order_id).status_code == 503


def test_alert_validation(client, headers, twilio, order_id):
    assert send_alert(client, headers, order_id, message="too short").status_code == 422
    assert send_alert(client, headers, "missing-order").status_code == 404


def test_alertable_orders(client, make_user, headers, twilio, order_id):
    make_user("w1", Role.WAITER_STEWARD)

    orders = client.get("/alerts/orders", headers=headers("om")).json()

    assert [(o["orderId"], o["status"], o["assignedCount"]) for o in orders] == [
        (order_id, "Confirmed", 0)
    ]
    assert client.get("/alerts/orders", headers=headers("w1")).status_code == 403


def test_send_sms_rejects_non_e164_numbers(db, twilio):
    ok, error = asyncio.run(twilio_service.send_sms(db, "9876543210", MESSAGE))

    assert ok is False
    assert "E.164" in error
    assert twilio == []
