from datetime import timedelta

from fastapi.testclient import TestClient

SETTINGS_URL = "/api/v1/admin/settings"
BLOCKED_URL = "/api/v1/admin/blocked-windows"


def test_settings_require_admin(client: TestClient, staff_headers) -> None:
    assert client.get(SETTINGS_URL).status_code == 403
    assert client.get(SETTINGS_URL, headers=staff_headers).status_code == 403


def test_read_and_update_settings(client: TestClient, admin_headers) -> None:
    current = client.get(SETTINGS_URL, headers=admin_headers)
    assert current.status_code == 200
    assert current.json()["settings"]["booking_buffer"] == 0

    updated = client.put(
        SETTINGS_URL, json={"booking_buffer": 15, "advance_booking_days": 60}, headers=admin_headers
    )
    assert updated.status_code == 200
    settings = updated.json()["settings"]
    assert settings["booking_buffer"] == 15
    assert settings["advance_booking_days"] == 60
    assert settings["default_open_time"] == "08:00"
    assert updated.json()["updated_at"] is not None


def test_inconsistent_settings_rejected(client: TestClient, admin_headers) -> None:
    response = client.put(
        SETTINGS_URL, json={"default_open_time": "23:00"}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_settings"


def test_settings_out_of_bounds(client: TestClient, admin_headers) -> None:
    response = client.put(SETTINGS_URL, json={"booking_buffer": -5}, headers=admin_headers)
    assert response.status_code == 422


def test_buffer_applies_to_next_booking(client: TestClient, admin_headers, tomorrow) -> None:
    client.put(SETTINGS_URL, json={"booking_buffer": 30}, headers=admin_headers)
    booking = {
        "studio": "Studio A",
        "date": tomorrow.isoformat(),
        "start_time": "10:00",
        "end_time": "11:00",
        "phone_number": "9876543210",
    }
    assert client.post("/api/v1/bookings", json=booking).status_code == 201

    adjacent = dict(booking, start_time="11:00", end_time="12:00")
    assert client.post("/api/v1/bookings", json=adjacent).status_code == 409


def test_blocked_window_lifecycle(client: TestClient, admin_headers, tomorrow) -> None:
    window = {
        "studio": "Studio A",
        "date": tomorrow.isoformat(),
        "start_time": "14:00",
        "end_time": "16:00",
        "reason": "Maintenance",
    }

    created = client.post(BLOCKED_URL, json=window, headers=admin_headers)
    assert created.status_code == 201
    window_id = created.json()["id"]
    assert created.json()["created_by"] == "admin"

    duplicate = client.post(BLOCKED_URL, json=window, headers=admin_headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "blocked_window_exists"

    booking = client.post(
        "/api/v1/bookings",
        json={
            "studio": "Studio A",
            "date": tomorrow.isoformat(),
            "start_time": "15:00",
            "end_time": "16:00",
            "phone_number": "9876543210",
        },
    )
    assert booking.status_code == 409
    assert booking.json()["errors"]["conflicts"][0]["kind"] == "blocked"

    listed = client.get(
        BLOCKED_URL, params={"start_date": tomorrow.isoformat()}, headers=admin_headers
    )
    assert [w["id"] for w in listed.json()] == [window_id]

    assert client.delete(f"{BLOCKED_URL}/{window_id}", headers=admin_headers).status_code == 204
    assert client.delete(f"{BLOCKED_URL}/{window_id}", headers=admin_headers).status_code == 404


def test_blocked_windows_require_admin(client: TestClient, tomorrow) -> None:
    response = client.get(BLOCKED_URL, params={"start_date": tomorrow.isoformat()})
    assert response.status_code == 403


def test_bulk_block_skips_past_dates(client: TestClient, tomorrow, admin_headers) -> None:
    payload = {
        "studio": "Studio A",
        "dates": [
            (tomorrow + timedelta(days=1)).isoformat(),
            tomorrow.isoformat(),
            (tomorrow - timedelta(days=2)).isoformat(),
        ],
        "start_time": "14:00",
        "end_time": "16:00",
        "reason": "Workshop",
    }

    response = client.post(f"{BLOCKED_URL}/bulk", json=payload, headers=admin_headers)
    assert response.status_code == 201
    body = response.json()
    assert [w["date"] for w in body["created"]] == [
        tomorrow.isoformat(),
        (tomorrow + timedelta(days=1)).isoformat(),
    ]
    assert body["skipped"] == [
        {"date": (tomorrow - timedelta(days=2)).isoformat(), "reason": "past"}
    ]

    again = client.post(f"{BLOCKED_URL}/bulk", json=payload, headers=admin_headers)
    assert again.status_code == 409
    assert again.json()["code"] == "bulk_block_conflict"


def test_bulk_block_requires_admin(client: TestClient, tomorrow, staff_headers) -> None:
    payload = {
        "studio": "Studio A",
        "dates": [tomorrow.isoformat()],
        "start_time": "14:00",
        "end_time": "16:00",
    }
    assert client.post(f"{BLOCKED_URL}/bulk", json=payload).status_code == 403
    response = client.post(f"{BLOCKED_URL}/bulk", json=payload, headers=staff_headers)
    assert response.status_code == 403
