import json
from types import SimpleNamespace

import pytest

from eventstaff.constants import Role, StaffType
from eventstaff.services import ai_service


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_openai(monkeypatch, content):
    completions = FakeCompletions(content)
    fake_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(ai_service, "get_openai_client", lambda: fake_client)
    return completions


def test_response_format_requires_every_field():
    response_format = ai_service.build_response_format(ai_service.WaiterSuggestion, "waiter_suggestion")

    schema = response_format["json_schema"]["schema"]
    assert response_format["json_schema"]["strict"] is True
    assert schema["additionalProperties"] is False
    assert sorted(schema["required"]) == ["reasoning", "waiterCount"]


def test_suggest_waiters(client, make_user, headers, monkeypatch):
    make_user("om", Role.OPERATIONAL_MANAGER)
    completions = fake_openai(
        monkeypatch, json.dumps({"waiterCount": 8, "reasoning": "1 per 25 guests for a buffet."})
    )

    response = client.post("/ai/suggest-waiters", json={"attendees": 200}, headers=headers("om"))

    assert response.status_code == 200
    assert response.json()["waiterCount"] == 8
    assert "Number of Attendees: 200" in completions.calls[0]["messages"][1]["content"]


def test_invalid_json_is_a_bad_gateway(client, make_user, headers, monkeypatch):
    make_user("om", Role.OPERATIONAL_MANAGER)
    fake_openai(monkeypatch, "eight waiters")

    response = client.post("/ai/suggest-waiters", json={"attendees": 200}, headers=headers("om"))
    assert response.status_code == 502


def test_schema_mismatch_is_a_bad_gateway(client, make_user, headers, monkeypatch):
    make_user("om", Role.OPERATIONAL_MANAGER)
    fake_openai(monkeypatch, json.dumps({"waiterCount": 0, "reasoning": "none"}))

    response = client.post("/ai/suggest-waiters", json={"attendees": 200}, headers=headers("om"))
    assert response.status_code == 502


def test_missing_api_key_is_unavailable(client, make_user, headers, monkeypatch):
    make_user("om", Role.OPERATIONAL_MANAGER)
    monkeypatch.setattr(ai_service, "OPENAI_API_KEY", None)

    response = client.post("/ai/suggest-waiters", json={"attendees": 50}, headers=headers("om"))
    assert response.status_code == 503


def test_agreement_uses_staff_record(client, make_user, make_staff, headers, monkeypatch):
    make_user("hr1", Role.HR)
    staff = make_staff(
        "Priya Nair",
        Role.SUPERVISOR,
        staff_type=StaffType.SALARIED.value,
        monthly_salary=25000,
        per_event_charge=900,
    )
    completions = fake_openai(monkeypatch, json.dumps({"agreementText": "Employment Agreement\n..."}))

    response = client.post(f"/ai/staff/{staff.id}/agreement", headers=headers("hr1"))

    assert response.status_code == 200
    assert response.json()["agreementText"].startswith("Employment Agreement")
    user_content = completions.calls[0]["messages"][1]["content"]
    assert "Priya Nair" in user_content
    assert "25000" in user_content
    assert "monthly salary" in user_content


def test_agreement_input_for_event_staff(make_staff):
    staff = make_staff("Kiran", per_event_charge=800)

    data = ai_service.agreement_input_for(staff)

    assert data.compensationAmount == 800
    assert data.compensationType == "per event charge"
    assert data.staffAddress == "Not provided"


def test_agreement_for_unknown_staff(client, make_user, headers, monkeypatch):
    make_user("hr1", Role.HR)
    fake_openai(monkeypatch, json.dumps({"agreementText": "unused"}))

    assert client.post("/ai/staff/nobody/agreement", headers=headers("hr1")).status_code == 404


@pytest.fixture()
def invoiced_order(client, make_user, make_staff, headers):
    make_user("alice", company_name="Alice Events")
    make_user("om", Role.OPERATIONAL_MANAGER)
    make_user("acct", Role.ACCOUNTANT)
    order_id = client.post(
        "/orders",
        json={"date": "2026-11-14", "attendees": 10, "menuType": "veg"},
        headers=headers("alice"),
    ).json()["id"]
    client.post(f"/orders/{order_id}/confirm", headers=headers("om"))
    client.post(f"/orders/{order_id}/complete", headers=headers("om"))
    client.post(f"/billing/review/{order_id}", headers=headers("acct"))
    client.post(f"/billing/invoices/{order_id}", headers=headers("acct"))
    return order_id


def test_invoice_notes_are_stored(client, headers, monkeypatch, invoiced_order):
    completions = fake_openai(
        monkeypatch, json.dumps({"summary": "Thank you for choosing us for your event."})
    )

    response = client.post(f"/ai/invoices/{invoiced_order}/notes", headers=headers("acct"))

    assert response.status_code == 200
    assert "Total: ₹15576.00" in completions.calls[0]["messages"][1]["content"]
    invoice = client.get(f"/billing/invoices/{invoiced_order}", headers=headers("acct")).json()
    assert invoice["notes"] == "Thank you for choosing us for your event."
