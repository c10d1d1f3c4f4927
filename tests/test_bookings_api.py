FUTURE_DATE = "2099-06-01"


def booking_payload(**overrides):
    payload = {
        "room_id": 5,
        "user_name": "Terrier Student",
        "user_email": "student@bu.edu",
        "booking_date": FUTURE_DATE,
        "start_time": "14:00",
        "end_time": "15:00",
        "purpose": "Group study",
    }
    payload.update(overrides)
    return payload


def test_root(client):
    assert client.get("/").json() == {"message": "Backend running successfully"}


def test_public_building_listing(client, rooms):
    buildings = client.get("/buildings/").json()

    assert [b["short_name"] for b in buildings] == ["MUG"]
    assert buildings[0]["contacts"] == {"phone": "617-353-3732", "email": "askalibrarian@bu.edu"}

    building_rooms = client.get(f"/buildings/{buildings[0]['id']}/rooms").json()
    assert len(building_rooms) == 5


def test_unknown_building_is_404(client):
    assert client.get("/buildings/77").status_code == 404


def test_closed_rooms_are_hidden(client, db, rooms):
    rooms[0].available = False
    db.commit()

    listed = client.get("/rooms/").json()

    assert 1 not in [r["id"] for r in listed]
    assert client.get("/rooms/1").status_code == 404


def test_multi_room_availability(client, rooms, make_booking):
    make_booking(2, FUTURE_DATE, "13:30", "14:30", reference="MUGR0002")

    response = client.post("/bookings/availability", json={
        "room_ids": [3, 2, 1],
        "start_time": "14:00",
        "end_time": "15:00",
        "date": FUTURE_DATE,
    })

    assert response.status_code == 200
    statuses = response.json()
    assert [s["room_id"] for s in statuses] == [3, 2, 1]
    assert [s["available"] for s in statuses] == [True, False, True]
    assert statuses[1]["status"] == "conflict"
    assert statuses[1]["conflict_details"]["conflicting_booking"]["booking_reference"] == "MUGR0002"


def test_availability_for_past_date_is_rejected(client, rooms):
    response = client.post("/bookings/availability", json={
        "room_ids": [1],
        "start_time": "14:00",
        "end_time": "15:00",
        "date": "2020-01-01",
    })

    assert response.status_code == 400
    assert "You cannot book a room for a past time." in response.json()["detail"]


def test_availability_requires_rooms(client):
    response = client.post("/bookings/availability", json={
        "room_ids": [],
        "start_time": "14:00",
        "end_time": "15:00",
    })

    assert response.status_code == 422


def test_single_room_conflict_check(client, rooms, make_booking):
    make_booking(4, FUTURE_DATE, "15:00", "16:00")

    touching = client.get("/bookings/rooms/4/conflicts", params={
        "start_time": "14:00", "end_time": "15:00", "booking_date": FUTURE_DATE,
    })
    overlapping = client.get("/bookings/rooms/4/conflicts", params={
        "start_time": "14:30", "end_time": "15:30", "booking_date": FUTURE_DATE,
    })

    assert touching.json()["available"] is True
    assert overlapping.json()["available"] is False
    assert overlapping.json()["message"] == "Booked from 15:00 - 16:00"


def test_submit_verify_and_lookup(client, rooms, mailer):
    submitted = client.post("/bookings/", json=booking_payload())

    assert submitted.status_code == 201
    body = submitted.json()
    assert body["email_sent"] is True
    code = mailer.verification_emails[0]["verification_code"]

    wrong = client.post(f"/bookings/{body['booking_id']}/verify", json={"verification_code": "wrong"})
    assert wrong.status_code == 400
    assert wrong.json()["detail"] == {
        "reason": "invalid_code",
        "message": "Invalid verification code",
    }

    verified = client.post(f"/bookings/{body['booking_id']}/verify", json={"verification_code": code})
    assert verified.status_code == 200
    assert verified.json()["message"] == "Booking confirmed"

    again = client.post(f"/bookings/{body['booking_id']}/verify", json={"verification_code": code})
    assert again.status_code == 409
    assert again.json()["detail"]["reason"] == "already_verified"

    found = client.get("/bookings/lookup", params={
        "email": "student@bu.edu", "reference": body["booking_reference"],
    })
    assert found.status_code == 200
    assert found.json()["status"] == "confirmed"
    assert found.json()["verification_status"] == "verified"

    mine = client.get("/bookings/user", params={"email": "student@bu.edu"}).json()
    assert [b["booking_reference"] for b in mine] == [body["booking_reference"]]


def test_confirmed_slot_blocks_new_submission(client, rooms, make_booking):
    make_booking(5, FUTURE_DATE, "14:30", "15:30")

    response = client.post("/bookings/", json=booking_payload())

    assert response.status_code == 409
    assert response.json()["detail"] == "This room has been booked from 14:30 - 15:30"


def test_submission_for_past_time(client, rooms):
    response = client.post("/bookings/", json=booking_payload(booking_date="2020-01-01"))

    assert response.status_code == 400


def test_submission_for_unknown_room(client, rooms):
    assert client.post("/bookings/", json=booking_payload(room_id=99)).status_code == 404


def test_submission_validates_interval(client, rooms):
    response = client.post("/bookings/", json=booking_payload(start_time="15:00", end_time="14:00"))

    assert response.status_code == 422


def test_verify_unknown_booking(client):
    response = client.post("/bookings/4242/verify", json={"verification_code": "123456"})

    assert response.status_code == 404
    assert response.json()["detail"]["message"] == "Booking not found"


def test_user_cancels_with_reference(client, rooms):
    body = client.post("/bookings/", json=booking_payload()).json()

    wrong_email = client.post(f"/bookings/{body['booking_id']}/cancel", json={
        "user_email": "intruder@bu.edu",
        "booking_reference": body["booking_reference"],
    })
    cancelled = client.post(f"/bookings/{body['booking_id']}/cancel", json={
        "user_email": "student@bu.edu",
        "booking_reference": body["booking_reference"],
        "reason": "exam moved",
    })
    twice = client.post(f"/bookings/{body['booking_id']}/cancel", json={
        "user_email": "student@bu.edu",
        "booking_reference": body["booking_reference"],
    })

    assert wrong_email.status_code == 404
    assert cancelled.status_code == 200
    assert twice.status_code == 409


def test_lookup_miss_is_404(client, rooms):
    response = client.get("/bookings/lookup", params={"email": "student@bu.edu", "reference": "NOPE0000"})

    assert response.status_code == 404


def test_availability_without_date_checks_today(client, rooms):
    response = client.post("/bookings/availability", json={
        "room_ids": [1],
        "start_time": "00:00",
        "end_time": "00:30",
    })

    assert response.status_code == 400
    assert "You cannot book a room for a past time." in response.json()["detail"]
