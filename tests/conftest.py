"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides an in-memory SmartPass client, the test client and admin
header fixtures.

==============================================================================
"""

import os

# Settings are cached on first use, so the environment must be ready
# before the application is imported
os.environ["SMARTPASS_API_URL"] = "https://smartpass.test/exec"
os.environ["ADMIN_PASSCODE"] = "test-passcode"

import pytest
from typing import Dict, Generator, List
from fastapi.testclient import TestClient

from smartpass.main import app
from smartpass.core import exceptions
from smartpass.core.dependencies import get_smartpass_client
from smartpass.schemas import PassRecord, SeatRecord, TripCounts, TripLogCreate, TripRecord, TripType


ADMIN_PASSCODE = "test-passcode"


# ============================================================================
# FAKE SMARTPASS ENDPOINT
# ============================================================================

class FakeSmartPassClient:
    """In-memory stand-in for the spreadsheet endpoint."""

    def __init__(self):
        self.base_url = "https://smartpass.test/exec"
        self.seats: Dict[str, SeatRecord] = {
            "S-42": SeatRecord(seat_number="S-42", position="Window", section="B", row="7"),
            "1": SeatRecord(seat_number="1", position="Aisle", section="A", row="1"),
        }
        self.passes: Dict[str, PassRecord] = {
            "P-100": PassRecord(pass_id="P-100", student_name="Asha Rao", pass_type="Semester"),
        }
        self.trips: List[TripLogCreate] = []
        self.seat_requests: List[str] = []

    def fetch_seat(self, seat_number: str) -> SeatRecord:
        self.seat_requests.append(seat_number)
        if seat_number not in self.seats:
            raise exceptions.smartpass_api_error("Seat not found")
        return self.seats[seat_number]

    def fetch_seats(self) -> List[SeatRecord]:
        return list(self.seats.values())

    def create_seat(self, seat: SeatRecord) -> str:
        self.seats[seat.seat_number] = seat
        return "Seat saved"

    def remove_seat(self, seat_number: str) -> str:
        if self.seats.pop(seat_number, None) is None:
            raise exceptions.smartpass_api_error("Seat not found")
        return "Seat deleted"

    def fetch_passes(self) -> List[PassRecord]:
        return list(self.passes.values())

    def create_pass(self, bus_pass: PassRecord) -> str:
        self.passes[bus_pass.pass_id] = bus_pass
        return "Pass saved"

    def remove_pass(self, pass_id: str) -> str:
        if self.passes.pop(pass_id, None) is None:
            raise exceptions.smartpass_api_error("Pass not found")
        return "Pass deleted"

    def log_trip(self, trip: TripLogCreate) -> str:
        self.trips.append(trip)
        return "Trip logged"

    def fetch_trip_counts(self) -> TripCounts:
        return TripCounts(
            morning=sum(1 for t in self.trips if t.trip_type == TripType.MORNING),
            evening=sum(1 for t in self.trips if t.trip_type == TripType.EVENING),
        )

    def fetch_trips(self) -> List[TripRecord]:
        return [
            TripRecord(
                trip_type=t.trip_type.value,
                seat_number=t.seat_number,
                pass_id=t.pass_id,
                name=t.full_name,
                semester=t.semester.value,
                program=t.program.value,
                fare_paid=t.fare_paid,
            )
            for t in self.trips
        ]

    def close(self) -> None:
        pass


# ============================================================================
# CLIENT FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def smartpass() -> FakeSmartPassClient:
    """Fresh in-memory SmartPass endpoint for each test."""
    return FakeSmartPassClient()


@pytest.fixture(scope="function")
def client(smartpass: FakeSmartPassClient) -> Generator[TestClient, None, None]:
    """Create test client with the SmartPass client override."""
    app.dependency_overrides[get_smartpass_client] = lambda: smartpass

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================================================
# HEADER FIXTURES
# ============================================================================

@pytest.fixture
def admin_headers() -> Dict[str, str]:
    """Admin passcode header."""
    return {"X-Admin-Passcode": ADMIN_PASSCODE}


@pytest.fixture
def trip_payload() -> dict:
    """A valid morning trip submission."""
    return {
        "tripType": "morning",
        "seatNumber": "s-42",
        "seatPosition": "Window",
        "passId": "P-100",
        "fullName": "Asha Rao",
        "semester": "3",
        "program": "cse",
        "destination": "Main Gate",
        "farePaid": True,
    }
