"""
Integration tests for the booking access view, slot creation and the app shell.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from interval_api.domain.bookings.reservation import BookingDetails, ReservationEngine
from tests.conftest import new_wallet


@pytest.fixture
def receipt(session_factory, slot):
    return ReservationEngine(session_factory).reserve(
        slot.id, new_wallet(), slot.price, BookingDetails(name="Ann", email="a@x.com")
    )


def parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestBookingAccess:
    """GET /api/booking/{id} requires the exact access token."""

    def test_valid_token(self, client, receipt):
        response = client.get(f"/api/booking/{receipt.booking_id}", params={"token": receipt.access_token})

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == receipt.booking_id
        assert data["creator"] == "alice"
        assert parse_time(data["startTime"]) == receipt.start_time
        assert parse_time(data["endTime"]) == receipt.end_time
        assert data["meetLink"] == receipt.meet_link
        assert Decimal(str(data["amountSol"])) == Decimal("0.5")

    def test_missing_token(self, client, receipt):
        response = client.get(f"/api/booking/{receipt.booking_id}")
        assert response.status_code == 401
        assert response.json()["message"].startswith("Access required")

    def test_wrong_token(self, client, receipt):
        response = client.get(
            f"/api/booking/{receipt.booking_id}", params={"token": receipt.access_token[:-1]}
        )
        assert response.status_code == 403
        assert response.json() == {"message": "Invalid or expired link"}

    def test_unknown_booking_looks_like_wrong_token(self, client, receipt):
        response = client.get("/api/booking/no-such-booking", params={"token": receipt.access_token})
        assert response.status_code == 403
        assert response.json() == {"message": "Invalid or expired link"}


class TestCreateSlot:
    """POST /api/slot/create"""

    def _payload(self, creator, **overrides):
        payload = {
            "creatorId": creator.id,
            "startTime": "2030-04-01T10:00:00Z",
            "endTime": "2030-04-01T10:30:00Z",
            "price": "1.5",
            "meetLink": "https://meet.example.com/xyz",
        }
        payload.update(overrides)
        return payload

    def test_creates_available_slot(self, client, creator):
        response = client.post("/api/slot/create", json=self._payload(creator))

        assert response.status_code == 200
        data = response.json()
        assert data["creatorId"] == creator.id
        assert data["status"] == "available"
        assert Decimal(str(data["price"])) == Decimal("1.5")
        assert parse_time(data["startTime"]) == parse_time("2030-04-01T10:00:00Z")
        assert data["meetLink"] == "https://meet.example.com/xyz"

        # New slot is immediately bookable through the action
        descriptor = client.get("/api/action/book", params={"slotId": data["id"]}).json()
        assert descriptor["label"] == "Book for 1.50 SOL"

    def test_offset_times_are_normalized(self, client, creator):
        response = client.post(
            "/api/slot/create",
            json=self._payload(creator, startTime="2030-04-01T12:00:00+02:00", endTime="2030-04-01T12:30:00+02:00"),
        )
        assert response.status_code == 200
        assert parse_time(response.json()["startTime"]) == parse_time("2030-04-01T10:00:00Z")

    def test_unknown_creator(self, client, creator):
        response = client.post("/api/slot/create", json=self._payload(creator, creatorId="nobody"))
        assert response.status_code == 400
        assert response.json()["error"].startswith("Creator not found")

    def test_end_before_start(self, client, creator):
        response = client.post(
            "/api/slot/create",
            json=self._payload(creator, endTime="2030-04-01T09:00:00Z"),
        )
        assert response.status_code == 400
        assert "endTime must be after startTime" in response.json()["error"]

    def test_negative_price(self, client, creator):
        response = client.post("/api/slot/create", json=self._payload(creator, price="-1"))
        assert response.status_code == 400
        assert "price" in response.json()["error"]

    @pytest.mark.parametrize(
        "price, message",
        [
            ("1000000000", "price must be at most 999999999.999999999 SOL"),
            ("100000000000", "price must be at most 999999999.999999999 SOL"),
            ("0.0000000001", "price must have at most 9 decimal places"),
        ],
    )
    def test_unsettleable_price(self, client, creator, price, message):
        response = client.post("/api/slot/create", json=self._payload(creator, price=price))
        assert response.status_code == 400
        assert response.json() == {"error": f"price: {message}"}

    def test_largest_price_is_accepted(self, client, creator):
        response = client.post("/api/slot/create", json=self._payload(creator, price="999999999.999999999"))
        assert response.status_code == 200

    def test_missing_fields(self, client):
        response = client.post("/api/slot/create", json={"price": "1"})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_invalid_json(self, client):
        response = client.post(
            "/api/slot/create", content=b"nope", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON body"}


class TestAppShell:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root(self, client):
        assert client.get("/").status_code == 200
