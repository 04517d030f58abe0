"""API tests: health, courts, availability, quote, booking lifecycle, stats."""

from datetime import date, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from futsal.core.database import get_db
from futsal.main import app
from futsal.schemas import BookingDocument

API = "/api/v1"


def _future(days: int = 7) -> date:
    return date.today() + timedelta(days=days)


@pytest.fixture
async def client(session_factory):
    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _booking_body(court_id: int, time_slot: str = "14:00", duration: int = 3, day: date | None = None, **extra) -> dict:
    body = {
        "court_id": court_id,
        "date": (day or _future()).isoformat(),
        "time_slot": time_slot,
        "duration": duration,
    }
    body.update(extra)
    return body


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_list_courts(client, court):
    resp = await client.get(f"{API}/courts")
    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()] == ["Court 1"]


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


async def test_availability_empty_court(client, court):
    day = _future()
    resp = await client.get(f"{API}/courts/{court.id}/availability", params={"date": day.isoformat()})
    assert resp.status_code == 200
    data = resp.json()
    assert data["court_name"] == "Court 1"
    assert len(data["slots"]) == 18
    assert all(s["is_available"] for s in data["slots"])
    assert data["slots"][-1] == {
        "date": (day + timedelta(days=1)).isoformat(),
        "time_slot": "01:00",
        "is_available": True,
        "max_duration": 1,
    }


async def test_availability_after_booking(client, court, player, auth_headers):
    day = _future()
    resp = await client.post(
        f"{API}/bookings", json=_booking_body(court.id, "23:00", 2, day), headers=auth_headers(player)
    )
    assert resp.status_code == 201

    resp = await client.get(f"{API}/courts/{court.id}/availability", params={"date": day.isoformat()})
    taken = [(s["date"], s["time_slot"]) for s in resp.json()["slots"] if not s["is_available"]]
    assert taken == [(day.isoformat(), "23:00"), ((day + timedelta(days=1)).isoformat(), "00:00")]


async def test_availability_unknown_court(client, court):
    resp = await client.get(f"{API}/courts/999/availability", params={"date": _future().isoformat()})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Quote
# ---------------------------------------------------------------------------


async def test_quote_afternoon(client):
    resp = await client.get(f"{API}/bookings/quote", params={"time_slot": "14:00", "duration": 3})
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_price"] == 150
    assert data["end_time"] == "17:00"
    assert (data["normal_hours"], data["night_hours"]) == (3, 0)


async def test_quote_full_window(client):
    resp = await client.get(f"{API}/bookings/quote", params={"time_slot": "08:00", "duration": 18})
    data = resp.json()
    assert data["total_price"] == 1110
    assert data["end_time"] == "02:00 (+1 day)"
    assert (data["normal_hours"], data["normal_rate"], data["night_hours"], data["night_rate"]) == (11, 50, 7, 80)


async def test_quote_exceeded(client):
    resp = await client.get(f"{API}/bookings/quote", params={"time_slot": "22:00", "duration": 5})
    assert resp.status_code == 422
    assert resp.json()["detail"][0]["rule"] == "exceeded"


async def test_quote_invalid_hour(client):
    resp = await client.get(f"{API}/bookings/quote", params={"time_slot": "03:00", "duration": 1})
    assert resp.status_code == 422
    assert resp.json()["detail"][0]["rule"] == "invalid_hour"


# ---------------------------------------------------------------------------
# Booking lifecycle
# ---------------------------------------------------------------------------


async def test_create_booking_unauthenticated(client, court):
    resp = await client.post(f"{API}/bookings", json=_booking_body(court.id))
    assert resp.status_code == 401


async def test_create_booking_charges_the_quoted_price(client, court, player, auth_headers):
    quote = (await client.get(f"{API}/bookings/quote", params={"time_slot": "17:00", "duration": 3})).json()

    resp = await client.post(f"{API}/bookings", json=_booking_body(court.id, "17:00", 3), headers=auth_headers(player))
    assert resp.status_code == 201
    doc = resp.json()
    assert doc["totalPrice"] == quote["total_price"] == 180
    assert doc["courtId"] == court.id
    assert doc["userId"] == player.id
    assert doc["timeSlot"] == "17:00"
    assert doc["status"] == "confirmed"
    assert [s["timeSlot"] for s in doc["affectedSlots"]] == ["17:00", "18:00", "19:00"]


async def test_create_booking_conflict(client, court, player, other_player, auth_headers):
    day = _future()
    resp = await client.post(f"{API}/bookings", json=_booking_body(court.id, "14:00", 3, day), headers=auth_headers(player))
    assert resp.status_code == 201

    resp = await client.post(
        f"{API}/bookings", json=_booking_body(court.id, "16:00", 2, day), headers=auth_headers(other_player)
    )
    assert resp.status_code == 409
    detail = resp.json()["detail"][0]
    assert detail["rule"] == "slot_conflict"
    assert detail["slots"] == [{"date": day.isoformat(), "timeSlot": "16:00"}]


async def test_create_booking_exceeded(client, court, player, auth_headers):
    resp = await client.post(f"{API}/bookings", json=_booking_body(court.id, "22:00", 5), headers=auth_headers(player))
    assert resp.status_code == 422
    assert resp.json()["detail"][0]["rule"] == "exceeded"


async def test_create_booking_unknown_court(client, court, player, auth_headers):
    resp = await client.post(f"{API}/bookings", json=_booking_body(999), headers=auth_headers(player))
    assert resp.status_code == 404


async def test_cancel_then_rebook(client, court, player, other_player, auth_headers):
    day = _future()
    resp = await client.post(f"{API}/bookings", json=_booking_body(court.id, "14:00", 3, day), headers=auth_headers(player))
    booking_id = resp.json()["id"]

    resp = await client.delete(f"{API}/bookings/{booking_id}", headers=auth_headers(player))
    assert resp.status_code == 204

    resp = await client.get(f"{API}/bookings", headers=auth_headers(player))
    mine = resp.json()
    assert [(b["id"], b["status"]) for b in mine] == [(booking_id, "cancelled")]
    assert mine[0]["cancelledAt"] is not None

    resp = await client.post(
        f"{API}/bookings", json=_booking_body(court.id, "14:00", 2, day), headers=auth_headers(other_player)
    )
    assert resp.status_code == 201


async def test_cancel_other_users_booking(client, court, player, other_player, auth_headers):
    resp = await client.post(f"{API}/bookings", json=_booking_body(court.id), headers=auth_headers(player))
    booking_id = resp.json()["id"]

    resp = await client.delete(f"{API}/bookings/{booking_id}", headers=auth_headers(other_player))
    assert resp.status_code == 404


async def test_cancel_twice_rejected(client, court, player, auth_headers):
    resp = await client.post(f"{API}/bookings", json=_booking_body(court.id), headers=auth_headers(player))
    booking_id = resp.json()["id"]

    await client.delete(f"{API}/bookings/{booking_id}", headers=auth_headers(player))
    resp = await client.delete(f"{API}/bookings/{booking_id}", headers=auth_headers(player))
    assert resp.status_code == 400
    assert resp.json()["detail"][0]["rule"] == "cancellation_not_allowed"


async def test_create_booking_in_the_past(client, court, player, auth_headers):
    body = _booking_body(court.id, "20:00", 1, day=date.today() - timedelta(days=1))
    resp = await client.post(f"{API}/bookings", json=body, headers=auth_headers(player))
    assert resp.status_code == 422
    assert resp.json()["detail"][0]["rule"] == "slot_in_past"


# ---------------------------------------------------------------------------
# Store unavailable
# ---------------------------------------------------------------------------


def _store_down():
    return patch.object(
        AsyncSession, "execute", AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("connection refused")))
    )


async def test_create_booking_store_unavailable(client, court, player, auth_headers):
    with _store_down():
        resp = await client.post(f"{API}/bookings", json=_booking_body(court.id), headers=auth_headers(player))
    assert resp.status_code == 503
    assert resp.json()["detail"][0]["rule"] == "store_unavailable"

    mine = await client.get(f"{API}/bookings", headers=auth_headers(player))
    assert mine.json() == []


async def test_reads_store_unavailable(client, court, player, admin, auth_headers):
    with _store_down():
        courts = await client.get(f"{API}/courts")
        mine = await client.get(f"{API}/bookings", headers=auth_headers(player))
        stats = await client.get(f"{API}/bookings/stats", headers=auth_headers(admin))
        grid = await client.get(f"{API}/courts/{court.id}/availability", params={"date": _future().isoformat()})

    for resp in (courts, mine, stats, grid):
        assert resp.status_code == 503
        assert resp.json()["detail"][0]["rule"] == "store_unavailable"


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


async def test_stats_requires_admin(client, player, auth_headers):
    resp = await client.get(f"{API}/bookings/stats", headers=auth_headers(player))
    assert resp.status_code == 403


async def test_stats(client, court, player, admin, auth_headers):
    await client.post(f"{API}/bookings", json=_booking_body(court.id, "10:00", 1), headers=auth_headers(player))
    resp = await client.get(f"{API}/bookings/stats", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json() == {"confirmed": 1, "cancelled": 0, "total": 1}


# ---------------------------------------------------------------------------
# Document boundary
# ---------------------------------------------------------------------------


def test_document_accepts_legacy_total_amount():
    doc = BookingDocument.model_validate(
        {
            "courtId": 1,
            "userId": "user-1",
            "date": "2026-03-16",
            "timeSlot": "14:00",
            "duration": 2,
            "status": "confirmed",
            "affectedSlots": [
                {"date": "2026-03-16", "timeSlot": "14:00"},
                {"date": "2026-03-16", "timeSlot": "15:00"},
            ],
            "normalHours": 2,
            "nightHours": 0,
            "totalAmount": 100,
        }
    )
    assert doc.total_price == 100

    out = doc.model_dump(by_alias=True)
    assert out["totalPrice"] == 100
    assert "totalAmount" not in out
