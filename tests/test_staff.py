import pytest
from sqlalchemy import text

from eventstaff.constants import OrderStatus, Role
from eventstaff.models import Availability, Order, Payout


def staff_payload(**overrides):
    payload = {
        "name": "Kiran Rao",
        "phone": "+919812345678",
        "role": "waiter-steward",
        "staffType": "individual",
        "perEventCharge": 800,
    }
    payload.update(overrides)
    return payload


def test_hr_registers_and_updates_staff(client, make_user, headers):
    make_user("hr1", Role.HR)

    created = client.post("/staff", json=staff_payload(), headers=headers("hr1"))
    assert created.status_code == 201
    staff_id = created.json()["id"]

    updated = client.patch(
        f"/staff/{staff_id}", json={"perEventCharge": 950, "role": "pro"}, headers=headers("hr1")
    )
    assert updated.status_code == 200
    assert updated.json()["perEventCharge"] == 950
    assert updated.json()["role"] == "pro"


def test_staff_cannot_be_registered_as_consumer(client, make_user, headers):
    make_user("hr1", Role.HR)

    response = client.post("/staff", json=staff_payload(role="consumer"), headers=headers("hr1"))
    assert response.status_code == 422


def test_invalid_phone_is_rejected(client, make_user, headers):
    make_user("hr1", Role.HR)

    response = client.post("/staff", json=staff_payload(phone="abc"), headers=headers("hr1"))
    assert response.status_code == 422


def test_staff_list_is_sorted_by_name(client, make_user, make_staff, headers):
    make_user("boss", Role.ADMIN)
    make_staff("Zoya")
    make_staff("Arjun")

    names = [s["name"] for s in client.get("/staff", headers=headers("boss")).json()]
    assert names == ["Arjun", "Zoya"]


def test_roster_lists_floor_staff_only(client, make_user, make_staff, headers):
    make_user("sup", Role.SUPERVISOR)
    make_staff("Waiter", Role.WAITER_STEWARD)
    make_staff("Captain", Role.CAPTAIN_BUTLER)
    make_staff("Super", Role.SUPERVISOR)
    make_staff("Hari", Role.HR)

    response = client.get("/staff/roster", headers=headers("sup"))

    assert response.status_code == 200
    assert sorted(s["name"] for s in response.json()) == ["Captain", "Waiter"]


def test_roster_is_forbidden_for_waiters(client, make_user, headers):
    make_user("w1", Role.WAITER_STEWARD)

    assert client.get("/staff/roster", headers=headers("w1")).status_code == 403


def test_delete_staff(client, make_user, make_staff, headers):
    make_user("boss", Role.ADMIN)
    staff = make_staff("Temp")

    assert client.delete(f"/staff/{staff.id}", headers=headers("boss")).status_code == 204
    assert client.get(f"/staff/{staff.id}", headers=headers("boss")).status_code == 404


@pytest.fixture()
def foreign_keys(db):
    """Enforce SQLite foreign keys the way a production database would"""
    db.execute(text("PRAGMA foreign_keys=ON"))
    db.commit()
    yield
    db.execute(text("PRAGMA foreign_keys=OFF"))
    db.commit()


def test_delete_staff_with_calendar(client, db, make_user, make_staff, headers, foreign_keys):
    make_user("boss", Role.ADMIN)
    staff = make_staff("Temp")
    db.add(Availability(id=staff.id, dates={"2026-12-20": "available"}))
    db.commit()

    assert client.delete(f"/staff/{staff.id}", headers=headers("boss")).status_code == 204
    assert db.query(Availability).filter(Availability.id == staff.id).count() == 0


def test_staff_with_payouts_cannot_be_deleted(client, db, make_user, make_staff, headers, foreign_keys):
    make_user("boss", Role.ADMIN)
    make_user("alice")
    staff = make_staff("Paid Waiter")
    order = Order(
        user_id="alice", date="2026-12-20", attendees=40, menu_type="veg",
        status=OrderStatus.REVIEWED.value, assigned_staff=[staff.id],
    )
    db.add(order)
    db.flush()
    db.add(Payout(order_id=order.id, staff_id=staff.id, staff_name=staff.name, amount=800))
    db.commit()

    response = client.delete(f"/staff/{staff.id}", headers=headers("boss"))

    assert response.status_code == 409
    assert client.get(f"/staff/{staff.id}", headers=headers("boss")).status_code == 200
    assert db.query(Payout).filter(Payout.staff_id == staff.id).count() == 1


def test_linking_a_user_to_two_staff_records_conflicts(client, make_user, make_staff, headers):
    make_user("boss", Role.ADMIN)
    make_user("w1", Role.WAITER_STEWARD)
    make_staff("First", user_id="w1")

    response = client.post("/staff", json=staff_payload(userId="w1"), headers=headers("boss"))
    assert response.status_code == 409
