import uuid
from datetime import date, timedelta

import pytest

from booking_service.models import ApplicationStatus, Booking, BookingApplication, BookingStatus

pytestmark = pytest.mark.anyio


def _booking_body(**overrides) -> dict:
    body = {
        "title": "Replace kitchen cabinets",
        "scheduled_date": (date.today() + timedelta(days=5)).isoformat(),
        "location": "77 Mill Street",
        "duration_hours": 8,
        "total_cost": 900,
    }
    body.update(overrides)
    return body


async def test_health(client):
    r = await client.get("/health")

    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "booking-service"}
    assert r.headers["X-Request-Id"]


async def test_requires_token(client):
    r = await client.get("/bookings/open")

    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized", "message": "Authorization header is required"}


async def test_rejects_bad_token(client):
    r = await client.get("/bookings/open", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


async def test_wrong_user_type_is_forbidden(client, auth):
    r = await client.get("/bookings/open", headers=auth(uuid.uuid4(), "customer"))

    assert r.status_code == 403
    assert r.json() == {"error": "forbidden", "message": "Only workers can view open bookings"}


# ---- bookings ----

async def test_create_booking(client, auth, make_customer):
    customer = await make_customer()

    r = await client.post(
        "/bookings", json=_booking_body(is_open=True), headers=auth(customer.user_id, "customer")
    )

    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Booking created successfully"
    assert body["booking"]["status"] == "pending"
    assert body["booking"]["is_open"] is True
    assert body["booking"]["customer"]["id"] == str(customer.id)


async def test_create_booking_without_profile(client, auth, db_schema):
    r = await client.post("/bookings", json=_booking_body(), headers=auth(uuid.uuid4(), "customer"))

    assert r.status_code == 404
    assert r.json()["error"] == "profile_not_found"


async def test_create_booking_in_the_past(client, auth, make_customer):
    customer = await make_customer()
    past = (date.today() - timedelta(days=2)).isoformat()

    r = await client.post(
        "/bookings", json=_booking_body(scheduled_date=past), headers=auth(customer.user_id, "customer")
    )

    assert r.status_code == 400
    assert r.json() == {"error": "validation_failed", "message": "Cannot book dates in the past"}


async def test_create_booking_with_malformed_body(client, auth, make_customer):
    customer = await make_customer()

    r = await client.post(
        "/bookings", json={"location": "nowhere"}, headers=auth(customer.user_id, "customer")
    )

    assert r.status_code == 400
    assert r.json()["error"] == "validation_failed"
    assert r.json()["details"]


async def test_malformed_booking_id(client, auth, db_schema):
    r = await client.put("/bookings/not-a-uuid/accept", headers=auth(uuid.uuid4(), "worker"))

    assert r.status_code == 400
    assert r.json()["error"] == "validation_failed"


async def test_open_bookings_and_claim(client, auth, make_customer, make_worker, make_booking, load):
    customer = await make_customer()
    booking = await make_booking(customer, is_open=True)
    await make_booking(customer, worker=await make_worker())
    claimer_user = uuid.uuid4()

    r = await client.get("/bookings/open", headers=auth(claimer_user, "worker"))
    assert r.status_code == 200
    assert r.json()["count"] == 1
    assert r.json()["bookings"][0]["id"] == str(booking.id)

    # no body: claims for the caller's own worker profile, creating it on first use
    r = await client.put(f"/bookings/{booking.id}/claim", headers=auth(claimer_user, "worker"))
    assert r.status_code == 200
    claimed = r.json()["booking"]
    assert claimed["is_open"] is False
    assert claimed["worker"]["user_id"] == str(claimer_user)

    r = await client.put(f"/bookings/{booking.id}/claim", headers=auth(uuid.uuid4(), "worker"))
    assert r.status_code == 409
    assert r.json()["error"] == "already_claimed"

    stored = await load(Booking, booking.id)
    assert str(stored.worker_id) == claimed["worker_id"]

    r = await client.get("/bookings/open", headers=auth(claimer_user, "worker"))
    assert r.json()["count"] == 0


async def test_claim_with_explicit_worker(client, auth, make_customer, make_worker, make_booking):
    booking = await make_booking(await make_customer(), is_open=True)
    worker = await make_worker()

    r = await client.put(
        f"/bookings/{booking.id}/claim",
        json={"worker_id": str(worker.id)},
        headers=auth(worker.user_id, "worker"),
    )

    assert r.status_code == 200
    assert r.json()["booking"]["worker_id"] == str(worker.id)


async def test_accept_and_complete(client, auth, make_customer, make_worker, make_booking):
    worker = await make_worker()
    booking = await make_booking(await make_customer(), worker=worker)
    headers = auth(worker.user_id, "worker")

    r = await client.put(f"/bookings/{booking.id}/accept", headers=headers)
    assert r.status_code == 200
    assert r.json()["booking"]["status"] == "accepted"

    r = await client.put(f"/bookings/{booking.id}/complete", headers=headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Booking completed successfully"

    r = await client.put(f"/bookings/{booking.id}/accept", headers=headers)
    assert r.status_code == 400
    assert r.json() == {
        "error": "invalid_transition",
        "message": "Cannot move booking from completed to accepted",
    }


async def test_decline_unknown_booking(client, auth, db_schema):
    r = await client.put(f"/bookings/{uuid.uuid4()}/decline", headers=auth(uuid.uuid4(), "worker"))

    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


async def test_declined_open_booking_leaves_the_board(client, auth, make_customer, make_booking):
    booking = await make_booking(await make_customer(), is_open=True)
    headers = auth(uuid.uuid4(), "worker")

    r = await client.put(f"/bookings/{booking.id}/decline", headers=headers)
    assert r.status_code == 200
    assert r.json()["booking"]["is_open"] is False

    r = await client.get("/bookings/open", headers=headers)
    assert r.json()["count"] == 0

    r = await client.put(f"/bookings/{booking.id}/claim", headers=headers)
    assert r.status_code == 409
    assert r.json()["error"] == "already_claimed"

    r = await client.post("/applications", json={"booking_id": str(booking.id)}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "not_accepting_applications"


async def test_status_override(client, auth, make_customer, make_worker, make_booking, load):
    booking = await make_booking(await make_customer(), worker=await make_worker())

    r = await client.patch(
        f"/bookings/{booking.id}/status",
        json={"status": "declined"},
        headers=auth(uuid.uuid4(), "admin"),
    )

    assert r.status_code == 200
    assert (await load(Booking, booking.id)).status == BookingStatus.DECLINED


async def test_cancel_keeps_the_booking(client, auth, make_customer, make_booking):
    customer = await make_customer()
    booking = await make_booking(customer, is_open=True)
    headers = auth(customer.user_id, "customer")

    r = await client.delete(f"/bookings/{booking.id}", headers=headers)
    assert r.status_code == 200
    assert r.json()["booking"]["status"] == "cancelled"

    r = await client.get(f"/bookings/user/{customer.user_id}", headers=headers)
    assert r.json()["count"] == 1
    assert r.json()["bookings"][0]["status"] == "cancelled"

    r = await client.delete(f"/bookings/{booking.id}", headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_transition"


async def test_worker_bookings(client, auth, make_customer, make_worker, make_booking):
    worker = await make_worker()
    booking = await make_booking(await make_customer(), worker=worker)
    headers = auth(worker.user_id, "worker")

    by_worker = await client.get(f"/bookings/worker/{worker.id}", headers=headers)
    by_user = await client.get(f"/bookings/user/{worker.user_id}", headers=headers)

    assert [b["id"] for b in by_worker.json()["bookings"]] == [str(booking.id)]
    assert by_user.json() == by_worker.json()


# ---- applications ----

async def test_application_flow(client, auth, make_customer, make_booking, load):
    customer = await make_customer()
    booking = await make_booking(customer, is_open=True)
    first_user, second_user = uuid.uuid4(), uuid.uuid4()
    body = {"booking_id": str(booking.id), "message": "Five years of tiling", "proposed_price": 300}

    r = await client.post("/applications", json=body, headers=auth(first_user, "worker"))
    assert r.status_code == 201
    first = r.json()["application"]
    assert first["status"] == "pending"

    r = await client.post("/applications", json=body, headers=auth(first_user, "worker"))
    assert r.status_code == 409
    assert r.json()["error"] == "duplicate_application"

    r = await client.post("/applications", json=body, headers=auth(second_user, "worker"))
    second = r.json()["application"]

    customer_headers = auth(customer.user_id, "customer")
    r = await client.get(f"/applications/booking/{booking.id}", headers=customer_headers)
    assert r.json()["count"] == 2

    r = await client.put(f"/applications/{first['id']}/accept", headers=customer_headers)
    assert r.status_code == 200
    assert r.json()["application"]["status"] == "accepted"

    stored_booking = await load(Booking, booking.id)
    assert str(stored_booking.worker_id) == first["worker_id"]
    assert stored_booking.is_open is False
    assert (await load(BookingApplication, uuid.UUID(second["id"]))).status == ApplicationStatus.REJECTED

    r = await client.get("/applications/my", headers=auth(second_user, "worker"))
    assert [a["status"] for a in r.json()["applications"]] == ["rejected"]

    r = await client.post("/applications", json=body, headers=auth(uuid.uuid4(), "worker"))
    assert r.status_code == 400
    assert r.json()["error"] == "not_accepting_applications"


async def test_reject_application(client, auth, make_customer, make_worker, make_booking, make_application):
    customer = await make_customer()
    booking = await make_booking(customer, is_open=True)
    application = await make_application(booking, await make_worker())
    headers = auth(customer.user_id, "customer")

    r = await client.put(f"/applications/{application.id}/reject", headers=headers)
    assert r.status_code == 200
    assert r.json()["application"]["status"] == "rejected"

    r = await client.put(f"/applications/{application.id}/accept", headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_state"


async def test_only_customers_decide_applications(client, auth, db_schema):
    r = await client.put(f"/applications/{uuid.uuid4()}/accept", headers=auth(uuid.uuid4(), "worker"))
    assert r.status_code == 403
