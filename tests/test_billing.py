from datetime import date

import pytest

from eventstaff.constants import Role
from eventstaff.domain.billing.ledger import payment_reference
from eventstaff.domain.billing.service import build_invoice_number
from eventstaff.models import Firm, Invoice, Order


@pytest.fixture()
def crew(make_user, make_staff):
    make_user("alice", name="Alice", company_name="Alice Events", address="1 Beach Road, Goa")
    make_user("om", Role.OPERATIONAL_MANAGER)
    make_user("acct", Role.ACCOUNTANT)
    make_user("boss", Role.ADMIN)
    make_user("w1", Role.WAITER_STEWARD)
    waiter = make_staff("Waiter One", user_id="w1", per_event_charge=800)
    captain = make_staff("Captain", Role.CAPTAIN_BUTLER, per_event_charge=1200)
    return {"waiter": waiter, "captain": captain}


def completed_event(client, headers, crew, attendees=10, menu="veg"):
    order_id = client.post(
        "/orders",
        json={"date": "2026-11-14", "attendees": attendees, "menuType": menu},
        headers=headers("alice"),
    ).json()["id"]
    client.post(f"/orders/{order_id}/confirm", headers=headers("om"))
    for member in crew.values():
        client.post(f"/orders/{order_id}/assignment/{member.id}", headers=headers("om"))
    client.post(f"/orders/{order_id}/complete", headers=headers("om"))
    return order_id


def test_invoice_number_format():
    assert build_invoice_number("abc123def9", date(2026, 3, 5)) == "INV-20260305-DEF9"


def test_payment_reference_format():
    assert payment_reference("0f3a9b7c2d1e") == "PAY-7C2D1E"


def test_review_records_payouts_with_overrides(client, headers, crew):
    order_id = completed_event(client, headers, crew)

    queue = client.get("/billing/review", headers=headers("acct")).json()
    assert [item["orderId"] for item in queue] == [order_id]
    suggested = {p["staffName"]: p["amount"] for p in queue[0]["suggestedPayouts"]}
    assert suggested == {"Waiter One": 800, "Captain": 1200}

    response = client.post(
        f"/billing/review/{order_id}",
        json={"payouts": [{"staffId": crew["waiter"].id, "amount": 1000}]},
        headers=headers("acct"),
    )

    assert response.status_code == 200
    amounts = {p["staffName"]: p["amount"] for p in response.json()}
    assert amounts == {"Waiter One": 1000, "Captain": 1200}
    assert all(p["status"] == "Pending" for p in response.json())
    assert client.get(f"/orders/{order_id}", headers=headers("om")).json()["status"] == "Reviewed"

    # Reviewing twice is not allowed
    assert client.post(f"/billing/review/{order_id}", headers=headers("acct")).status_code == 409


def test_review_rejects_override_for_unassigned_staff(client, headers, crew):
    order_id = completed_event(client, headers, crew)

    response = client.post(
        f"/billing/review/{order_id}",
        json={"payouts": [{"staffId": "stranger", "amount": 100}]},
        headers=headers("acct"),
    )
    assert response.status_code == 422


def test_review_requires_completed_event(client, headers, crew):
    order_id = client.post(
        "/orders",
        json={"date": "2026-11-14", "attendees": 10, "menuType": "veg"},
        headers=headers("alice"),
    ).json()["id"]

    assert client.post(f"/billing/review/{order_id}", headers=headers("acct")).status_code == 409


def test_pending_invoices_only_lists_reviewed_orders(client, headers, crew):
    unreviewed = completed_event(client, headers, crew)
    reviewed = completed_event(client, headers, crew)
    client.post(f"/billing/review/{reviewed}", headers=headers("acct"))

    pending = client.get("/billing/invoices/pending", headers=headers("acct")).json()

    assert [p["orderId"] for p in pending] == [reviewed]
    assert unreviewed not in [p["orderId"] for p in pending]


def test_end_to_end_invoice(client, db, headers, crew):
    order_id = completed_event(client, headers, crew)

    # Not invoiceable until reviewed
    assert client.post(f"/billing/invoices/{order_id}", headers=headers("acct")).status_code == 409

    client.post(f"/billing/review/{order_id}", headers=headers("acct"))
    pending = client.get("/billing/invoices/pending", headers=headers("acct")).json()
    assert [(p["orderId"], p["estimatedTotal"]) for p in pending] == [(order_id, 15576)]

    response = client.post(f"/billing/invoices/{order_id}", headers=headers("acct"))

    assert response.status_code == 200
    invoice = response.json()
    assert invoice["subtotal"] == 13200
    assert invoice["gstAmount"] == 2376
    assert invoice["totalAmount"] == 15576
    assert invoice["lineItems"] == [
        {"description": "Catering (Veg menu)", "amount": 12000},
        {"description": "Service charge (10%)", "amount": 1200},
    ]
    assert invoice["client"]["companyName"] == "Alice Events"
    assert invoice["client"]["gstin"] == "N/A"
    assert invoice["invoiceNumber"].startswith("INV-")
    assert invoice["invoiceNumber"].endswith(order_id[-4:].upper())

    order = db.query(Order).filter(Order.id == order_id).one()
    db.refresh(order)
    assert order.invoice_status == "Generated"
    assert db.query(Invoice).filter(Invoice.id == order_id).count() == 1
    assert client.get("/billing/invoices/pending", headers=headers("acct")).json() == []


def test_regenerating_overwrites_single_invoice(client, db, headers, crew):
    order_id = completed_event(client, headers, crew)
    client.post(f"/billing/review/{order_id}", headers=headers("acct"))

    client.post(f"/billing/invoices/{order_id}", headers=headers("acct"))
    again = client.post(f"/billing/invoices/{order_id}", headers=headers("acct"))

    assert again.status_code == 200
    assert db.query(Invoice).count() == 1


def test_unknown_firm_leaves_order_uninvoiced(client, db, headers, crew):
    order_id = completed_event(client, headers, crew)
    client.post(f"/billing/review/{order_id}", headers=headers("acct"))

    response = client.post(
        f"/billing/invoices/{order_id}", json={"firmId": "nope"}, headers=headers("acct")
    )

    assert response.status_code == 404
    order = db.query(Order).filter(Order.id == order_id).one()
    db.refresh(order)
    assert order.invoice_status == "Pending"
    assert db.query(Invoice).count() == 0


def test_clients_read_only_their_invoices(client, make_user, headers, crew):
    make_user("bob")
    order_id = completed_event(client, headers, crew)
    client.post(f"/billing/review/{order_id}", headers=headers("acct"))
    client.post(f"/billing/invoices/{order_id}", headers=headers("acct"))

    assert client.get(f"/billing/invoices/{order_id}", headers=headers("alice")).status_code == 200
    assert client.get(f"/billing/invoices/{order_id}", headers=headers("bob")).status_code == 403
    assert len(client.get("/billing/invoices", headers=headers("alice")).json()) == 1
    assert client.get("/billing/invoices", headers=headers("bob")).json() == []


def test_payouts_are_paid_once_and_show_in_earnings(client, headers, crew):
    order_id = completed_event(client, headers, crew)
    payouts = client.post(
        f"/billing/review/{order_id}",
        json={"payouts": [{"staffId": crew["waiter"].id, "amount": 1000}]},
        headers=headers("acct"),
    ).json()
    waiter_payout = next(p for p in payouts if p["staffId"] == crew["waiter"].id)

    first = client.post(f"/billing/payouts/{waiter_payout['id']}/pay", headers=headers("acct"))
    second = client.post(f"/billing/payouts/{waiter_payout['id']}/pay", headers=headers("acct"))

    assert first.json()["status"] == "Paid"
    assert second.json()["paidAt"] == first.json()["paidAt"]
    assert first.json()["clientName"] == "Alice"
    assert first.json()["eventDate"] == "2026-11-14"

    pending = client.get("/billing/payouts", params={"status": "Pending"}, headers=headers("acct")).json()
    assert [p["staffName"] for p in pending] == ["Captain"]

    earnings = client.get("/billing/earnings/me", headers=headers("w1")).json()
    assert earnings["totalPaid"] == 1000
    assert earnings["totalPending"] == 0
    assert earnings["payouts"][0]["clientName"] == "Alice"


def test_ledger_running_balance(client, headers, crew):
    order_id = completed_event(client, headers, crew)
    client.post(f"/billing/review/{order_id}", headers=headers("acct"))
    client.post(f"/billing/invoices/{order_id}", headers=headers("acct"))

    payment = client.post(
        "/billing/ledger/alice/payments",
        json={"amount": 5000, "description": "Advance by UPI"},
        headers=headers("acct"),
    )
    assert payment.status_code == 201
    assert payment.json()["reference"].startswith("PAY-")
    assert payment.json()["date"] == date.today().isoformat()

    ledger = client.get("/billing/ledger/alice", headers=headers("acct")).json()

    assert [e["type"] for e in ledger["entries"]] == ["invoice", "payment"]
    assert [e["balance"] for e in ledger["entries"]] == [15576, 10576]
    assert ledger["totalDebit"] == 15576
    assert ledger["totalCredit"] == 5000
    assert ledger["balance"] == 10576


def test_ledger_rejects_non_clients(client, headers, crew):
    assert client.get("/billing/ledger/om", headers=headers("acct")).status_code == 404
    response = client.post(
        "/billing/ledger/alice/payments",
        json={"amount": 0, "description": "Nothing"},
        headers=headers("acct"),
    )
    assert response.status_code == 422


def test_financial_report_and_firm_turnover(client, db, headers, crew):
    firm = Firm(
        company_name="Royal Catering LLP",
        address="12 MG Road, Pune",
        contact_number="9876543210",
        gst_type="gst",
        gst_number="27AAPFU0939F1ZV",
        gst_percentage=18,
    )
    db.add(firm)
    db.commit()

    order_id = completed_event(client, headers, crew)
    payouts = client.post(
        f"/billing/review/{order_id}",
        json={"payouts": [{"staffId": crew["waiter"].id, "amount": 1000}]},
        headers=headers("acct"),
    ).json()
    client.post(f"/billing/invoices/{order_id}", json={"firmId": firm.id}, headers=headers("acct"))
    waiter_payout = next(p for p in payouts if p["staffId"] == crew["waiter"].id)
    client.post(f"/billing/payouts/{waiter_payout['id']}/pay", headers=headers("acct"))

    report = client.get("/billing/reports", headers=headers("boss")).json()

    assert report["totalIn"] == 15576
    # Paid payout billed at 1000 against an 800 per-event charge
    assert report["totalOut"] == 800
    assert report["profit"] == 200
    assert [i["clientName"] for i in report["recentInvoices"]] == ["Alice Events"]
    assert len(report["recentPayouts"]) == 1

    turnover = client.get(f"/billing/reports/firms/{firm.id}", headers=headers("boss")).json()
    assert turnover == {
        "firmId": firm.id,
        "companyName": "Royal Catering LLP",
        "invoiceCount": 1,
        "turnover": 15576,
    }
    assert client.get("/billing/reports", headers=headers("acct")).status_code == 403
    assert client.get("/billing/reports/firms/nope", headers=headers("boss")).status_code == 404
