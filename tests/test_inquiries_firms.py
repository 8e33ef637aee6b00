from eventstaff.constants import Role


def test_public_inquiry_is_stored_with_country_code(client, make_user, headers):
    response = client.post("/inquiries", json={"name": "Meena", "phone": "9876543210"})

    assert response.status_code == 201
    assert response.json()["phone"] == "+919876543210"
    assert response.json()["status"] == "New"

    make_user("hr1", Role.HR)
    listed = client.get("/inquiries", headers=headers("hr1")).json()
    assert [i["name"] for i in listed] == ["Meena"]


def test_inquiry_rejects_short_phone(client):
    response = client.post("/inquiries", json={"name": "Meena", "phone": "98765"})
    assert response.status_code == 422


def test_hr_updates_inquiry_status(client, make_user, headers):
    make_user("hr1", Role.HR)
    inquiry_id = client.post("/inquiries", json={"name": "Meena", "phone": "9876543210"}).json()["id"]

    response = client.patch(f"/inquiries/{inquiry_id}", json={"status": "Hired"}, headers=headers("hr1"))

    assert response.status_code == 200
    assert response.json()["status"] == "Hired"


def test_gst_firm_requires_number_and_percentage(client, make_user, headers):
    make_user("boss", Role.ADMIN)

    response = client.post(
        "/firms",
        json={
            "companyName": "Royal Catering LLP",
            "address": "12 MG Road, Pune",
            "contactNumber": "9876543210",
            "gstType": "gst",
        },
        headers=headers("boss"),
    )
    assert response.status_code == 422


def test_non_gst_firm_drops_gst_fields(client, make_user, headers):
    make_user("boss", Role.ADMIN)

    response = client.post(
        "/firms",
        json={
            "companyName": "Small Kitchen",
            "address": "4 Park Street, Kolkata",
            "contactNumber": "9876543210",
            "gstType": "non-gst",
            "gstNumber": "27AAPFU0939F1ZV",
            "gstPercentage": 18,
        },
        headers=headers("boss"),
    )

    assert response.status_code == 201
    assert response.json()["gstNumber"] is None
    assert response.json()["gstPercentage"] is None


def test_firm_contact_number_must_be_ten_digits(client, make_user, headers):
    make_user("boss", Role.ADMIN)

    response = client.post(
        "/firms",
        json={
            "companyName": "Royal Catering LLP",
            "address": "12 MG Road, Pune",
            "contactNumber": "12345",
            "gstType": "gst",
            "gstNumber": "27AAPFU0939F1ZV",
            "gstPercentage": 18,
        },
        headers=headers("boss"),
    )
    assert response.status_code == 422
