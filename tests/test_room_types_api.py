from hotel_booking.models.audit_log import AuditLog


def _create(client, headers, **over):
    payload = {"name": "Suite", "code": "SUITE", "pricePerNight": 250, "maxGuests": 4,
               "amenities": ["wifi", "balcony"], "displayOrder": 3, **over}
    return client.post("/room-types", json=payload, headers=headers)


def test_room_type_lifecycle(client, db, admin_headers):
    res = _create(client, admin_headers)
    assert res.status_code == 201
    created = res.json()
    assert created["code"] == "suite"
    assert created["amenities"] == ["balcony", "wifi"]

    assert client.get("/room-types/code/SUITE").json()["id"] == created["id"]
    assert client.get(f"/room-types/{created['id']}").json()["name"] == "Suite"

    res = client.patch(f"/room-types/{created['id']}", json={"pricePerNight": 275}, headers=admin_headers)
    assert res.json()["pricePerNight"] == 275.0

    assert client.delete(f"/room-types/{created['id']}", headers=admin_headers).status_code == 204
    assert client.get(f"/room-types/{created['id']}").status_code == 404
    assert client.get("/room-types/code/suite").status_code == 404
    assert db.query(AuditLog).filter(AuditLog.entity_type == "room_type").count() == 3


def test_room_types_listed_in_display_order(client, db, admin_headers):
    _create(client, admin_headers)
    _create(client, admin_headers, name="Single", code="single", displayOrder=0)
    _create(client, admin_headers, name="Double", code="double", displayOrder=1)
    assert [t["code"] for t in client.get("/room-types").json()] == ["single", "double", "suite"]


def test_room_type_uniqueness(client, db, admin_headers):
    _create(client, admin_headers)
    assert _create(client, admin_headers, name="Other").status_code == 409
    assert _create(client, admin_headers, code="other").status_code == 409
    other = _create(client, admin_headers, name="Other", code="other").json()
    assert client.patch(f"/room-types/{other['id']}", json={"code": "suite"}, headers=admin_headers).status_code == 409


def test_room_type_mutations_require_admin(client, db, guest_headers):
    assert _create(client, guest_headers).status_code == 403
