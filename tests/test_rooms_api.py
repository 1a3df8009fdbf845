from sqlalchemy.exc import OperationalError

from conftest import make_booking, make_room, utc
from hotel_booking.db.session import get_db
from hotel_booking.main import app
from hotel_booking.models.audit_log import AuditLog


def test_search_endpoint_scenario(client, db, guest):
    r101 = make_room(db, "101", price="100.00", max_guests=2)
    make_room(db, "102", status="maintenance")
    make_booking(db, r101, guest, utc(2024, 3, 20), utc(2024, 3, 25))

    res = client.get("/rooms/search", params={"checkInDate": "2024-03-22", "checkOutDate": "2024-03-24"})
    assert res.status_code == 200
    assert res.json() == []

    res = client.get("/rooms/search", params={"checkInDate": "2024-03-25", "checkOutDate": "2024-03-27"})
    assert res.status_code == 200
    body = res.json()
    assert [r["roomNumber"] for r in body] == ["101"]
    room = body[0]
    assert room["type"] == "single"
    assert room["pricePerNight"] == 100.0
    assert room["maxGuests"] == 2
    assert room["availabilityStatus"] == "available"


def test_search_accepts_repeated_and_json_amenities(client, db):
    make_room(db, "101", amenities=["wifi", "tv"])
    make_room(db, "102", amenities=["wifi"])
    dates = {"checkInDate": "2024-05-01", "checkOutDate": "2024-05-02"}

    res = client.get("/rooms/search", params=[*dates.items(), ("amenities", "wifi"), ("amenities", "tv")])
    assert [r["roomNumber"] for r in res.json()] == ["101"]

    res = client.get("/rooms/search", params={**dates, "amenities": '["WiFi"]'})
    assert [r["roomNumber"] for r in res.json()] == ["101", "102"]


def test_search_sorting_params(client, db):
    make_room(db, "101", price="150.00")
    make_room(db, "102", price="90.00")
    res = client.get("/rooms/search", params={
        "checkInDate": "2024-05-01", "checkOutDate": "2024-05-02", "sortBy": "price", "sortOrder": "DESC",
    })
    assert [r["roomNumber"] for r in res.json()] == ["101", "102"]


def test_search_rejects_bad_parameters(client, db):
    cases = [
        {"checkOutDate": "2024-05-02"},
        {"checkInDate": "2024-05-02", "checkOutDate": "2024-05-01"},
        {"checkInDate": "2024-05-01", "checkOutDate": "2024-05-01"},
        {"checkInDate": "not-a-date", "checkOutDate": "2024-05-01"},
        {"checkInDate": "2024-05-01", "checkOutDate": "2024-05-02", "sortBy": "colour"},
        {"checkInDate": "2024-05-01", "checkOutDate": "2024-05-02", "roomType": "penthouse"},
        {"checkInDate": "2024-05-01", "checkOutDate": "2024-05-02", "maxGuests": "0"},
        {"checkInDate": "2024-05-01", "checkOutDate": "2024-05-02", "maxGuests": "many"},
        {"checkInDate": "2024-05-01", "checkOutDate": "2024-05-02", "minPrice": "-1"},
    ]
    for params in cases:
        res = client.get("/rooms/search", params=params)
        assert res.status_code == 400, params
        body = res.json()
        assert body["statusCode"] == 400
        assert body["error"]["code"] == "VALIDATION_ERROR"


def test_search_storage_failure_is_503(client, db):
    class Broken:
        def execute(self, *args, **kwargs):
            raise OperationalError("SELECT rooms.id FROM rooms WHERE secret_col", {},
                                   Exception("password authentication failed for user hotel"))

        def close(self):
            pass

    def _broken():
        yield Broken()

    app.dependency_overrides[get_db] = _broken
    res = client.get("/rooms/search", params={"checkInDate": "2024-05-01", "checkOutDate": "2024-05-02"})
    assert res.status_code == 503
    assert res.json()["error"]["code"] == "DATABASE_ERROR"
    text = res.text
    assert "[SQL:" not in text
    assert "secret_col" not in text
    assert "password authentication" not in text
    assert "details" not in res.json()["error"]


def test_legacy_available_endpoint(client, db, guest):
    r101 = make_room(db, "101", room_type="double", price="120.00")
    make_room(db, "102", room_type="single")
    make_booking(db, r101, guest, utc(2024, 3, 20), utc(2024, 3, 25), status="cancelled")
    res = client.get("/rooms/available", params={
        "checkInDate": "2024-03-21", "checkOutDate": "2024-03-22", "roomType": "double",
    })
    assert res.status_code == 200
    assert [r["roomNumber"] for r in res.json()] == ["101"]


def test_list_and_get_rooms(client, db):
    make_room(db, "101", description="Sea view")
    r = make_room(db, "102", description="Garden view")
    assert [x["roomNumber"] for x in client.get("/rooms").json()] == ["101", "102"]
    assert [x["roomNumber"] for x in client.get("/rooms", params={"q": "GARDEN"}).json()] == ["102"]
    assert client.get(f"/rooms/{r.id}").json()["description"] == "Garden view"

    res = client.get("/rooms/999")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"
    assert res.json()["message"] == "Room with ID 999 not found"


def test_admin_creates_room(client, db, admin_headers):
    payload = {
        "roomNumber": "501",
        "type": "Suite",
        "pricePerNight": 300,
        "maxGuests": 4,
        "amenities": ["WiFi", " tv ", "wifi"],
    }
    res = client.post("/rooms", json=payload, headers=admin_headers)
    assert res.status_code == 201
    body = res.json()
    assert body["type"] == "suite"
    assert body["amenities"] == ["tv", "wifi"]
    assert body["availabilityStatus"] == "available"
    assert db.query(AuditLog).filter(AuditLog.action == "room.create").count() == 1

    dup = client.post("/rooms", json=payload, headers=admin_headers)
    assert dup.status_code == 409
    assert dup.json()["error"]["code"] == "CONFLICT"


def test_room_mutations_require_admin(client, db, guest_headers):
    payload = {"roomNumber": "501", "pricePerNight": 100, "maxGuests": 2}
    assert client.post("/rooms", json=payload).status_code == 401
    assert client.post("/rooms", json=payload, headers=guest_headers).status_code == 403


def test_create_room_validation(client, db, admin_headers):
    res = client.post("/rooms", json={"roomNumber": "1", "pricePerNight": -5, "maxGuests": 2}, headers=admin_headers)
    assert res.status_code == 400
    res = client.post("/rooms", json={"roomNumber": "1", "type": "cave", "pricePerNight": 5, "maxGuests": 2},
                      headers=admin_headers)
    assert res.status_code == 400


def test_update_room_and_renumber_conflict(client, db, admin_headers):
    make_room(db, "101")
    r = make_room(db, "102")
    res = client.patch(f"/rooms/{r.id}", json={"pricePerNight": 150.5, "amenities": "tv,balcony"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["pricePerNight"] == 150.5
    assert res.json()["amenities"] == ["balcony", "tv"]

    res = client.patch(f"/rooms/{r.id}", json={"roomNumber": "101"}, headers=admin_headers)
    assert res.status_code == 409


def test_availability_status_takes_room_out_of_search(client, db, admin_headers):
    r = make_room(db, "101")
    res = client.patch(f"/rooms/{r.id}/availability", json={"availabilityStatus": "Maintenance"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["availabilityStatus"] == "maintenance"
    found = client.get("/rooms/search", params={"checkInDate": "2024-05-01", "checkOutDate": "2024-05-02"})
    assert found.json() == []


def test_delete_room_is_soft(client, db, admin_headers):
    r = make_room(db, "101")
    assert client.delete(f"/rooms/{r.id}", headers=admin_headers).status_code == 204
    assert client.get(f"/rooms/{r.id}").status_code == 404
    assert client.delete(f"/rooms/{r.id}", headers=admin_headers).status_code == 404
    db.expire_all()
    assert db.get(type(r), r.id).deleted_at is not None
    # number stays taken
    res = client.post("/rooms", json={"roomNumber": "101", "pricePerNight": 100, "maxGuests": 2}, headers=admin_headers)
    assert res.status_code == 409


def test_room_bookings_listing_is_admin_only(client, db, guest, admin_headers, guest_headers):
    r = make_room(db, "101")
    make_booking(db, r, guest, utc(2024, 3, 20), utc(2024, 3, 25))
    assert client.get(f"/rooms/{r.id}/bookings", headers=guest_headers).status_code == 403
    res = client.get(f"/rooms/{r.id}/bookings", headers=admin_headers)
    assert res.status_code == 200
    assert len(res.json()) == 1


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_price_is_rendered_to_the_cent(client, db):
    r = make_room(db, "101", price="33.33")
    res = client.get(f"/rooms/{r.id}")
    assert res.status_code == 200
    assert res.json()["pricePerNight"] == 33.33
    assert "33.33" in res.text
