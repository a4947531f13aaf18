"""
==============================================================================
SmartPass API Client Module
==============================================================================

Client for the spreadsheet-backed SmartPass endpoint.

Request Contract:
-----------------
- One URL for everything; the `action` parameter selects the operation
- Reads are GET with the parameters in the query string
- Writes are POST, form-encoded; booleans are sent as TRUE/FALSE and
  None values are left out
- Every response is {"success": bool, "message": str, "data": ...}

Actions:
--------
    getSeat, getSeats, addSeat, deleteSeat,
    getPasses, addPass, deletePass,
    addTrip, countTrips, getTrips

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from smartpass.core import exceptions
from smartpass.schemas import PassRecord, SeatRecord, TripCounts, TripLogCreate, TripRecord


# Module logger
logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class SmartPassClient:
    """
    Thin client over the SmartPass endpoint.

    All failures surface as AppException so routes can let them
    propagate to the registered exception handler.

    Attributes:
        base_url: Endpoint URL, None when not configured

    Example:
        >>> client = SmartPassClient("https://script.example.com/exec")
        >>> seat = client.fetch_seat("S-42")
        >>> print(seat.position)
        'Window'
    """

    def __init__(
        self,
        base_url: Optional[str],
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: SmartPass endpoint URL
            timeout: Per-request timeout in seconds
            session: requests session to reuse (a new one if None)
        """
        self.base_url = base_url
        self._timeout = timeout
        self._session = session or requests.Session()

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _ensure_base_url(self) -> str:
        if not self.base_url:
            raise exceptions.api_not_configured()
        return self.base_url

    @staticmethod
    def encode_form(body: Mapping[str, Any]) -> Dict[str, str]:
        """
        Encode a POST body the way the sheet script expects.

        Args:
            body: Field mapping

        Returns:
            String-valued form fields
        """
        form: Dict[str, str] = {}

        for key, value in body.items():
            if value is None:
                continue
            if isinstance(value, bool):
                form[key] = "TRUE" if value else "FALSE"
                continue
            form[key] = str(value.value) if hasattr(value, "value") else str(value)

        return form

    def _handle_response(self, response: requests.Response) -> Any:
        if not response.ok:
            logger.warning(f"SmartPass HTTP {response.status_code}")
            raise exceptions.smartpass_request_failed(response.text, response.status_code)

        try:
            payload = response.json()
        except ValueError:
            raise exceptions.smartpass_invalid_response("SmartPass API returned invalid JSON")

        if not isinstance(payload, dict):
            raise exceptions.smartpass_invalid_response("SmartPass API returned an unexpected payload")

        if not payload.get("success"):
            raise exceptions.smartpass_api_error(payload.get("message"))

        if "data" not in payload:
            raise exceptions.smartpass_invalid_response("SmartPass API did not return data")

        return payload["data"]

    def _get(self, params: Dict[str, str]) -> Any:
        url = self._ensure_base_url()
        logger.debug(f"GET action={params.get('action')}")

        try:
            response = self._session.get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error(f"SmartPass request failed: {e}")
            raise exceptions.smartpass_unreachable(str(e))

        return self._handle_response(response)

    def _post(self, body: Mapping[str, Any]) -> Any:
        url = self._ensure_base_url()
        logger.debug(f"POST action={body.get('action')}")

        try:
            response = self._session.post(
                url,
                data=self.encode_form(body),
                headers={
                    "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error(f"SmartPass request failed: {e}")
            raise exceptions.smartpass_unreachable(str(e))

        return self._handle_response(response)

    @staticmethod
    def _parse(model: Type[ModelT], data: Any) -> ModelT:
        """
        Validate one record from the sheet.

        Raises:
            AppException: SMARTPASS_INVALID_RESPONSE if the record is malformed
        """
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Malformed {model.__name__} from SmartPass: {e.error_count()} errors")
            raise exceptions.smartpass_invalid_response(
                f"SmartPass API returned an invalid {model.__name__}"
            )

    @classmethod
    def _parse_list(cls, model: Type[ModelT], data: Any) -> List[ModelT]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise exceptions.smartpass_invalid_response(
                f"SmartPass API returned an invalid {model.__name__} list"
            )
        return [cls._parse(model, item) for item in data]

    @staticmethod
    def _message(data: Any, default: str) -> str:
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return default

    # =========================================================================
    # SEATS
    # =========================================================================

    def fetch_seat(self, seat_number: str) -> SeatRecord:
        data = self._get({"action": "getSeat", "seatNumber": seat_number})
        return self._parse(SeatRecord, data)

    def fetch_seats(self) -> List[SeatRecord]:
        data = self._get({"action": "getSeats"})
        return self._parse_list(SeatRecord, data)

    def create_seat(self, seat: SeatRecord) -> str:
        data = self._post({"action": "addSeat", **seat.model_dump(by_alias=True)})
        return self._message(data, "Seat saved")

    def remove_seat(self, seat_number: str) -> str:
        data = self._post({"action": "deleteSeat", "seatNumber": seat_number})
        return self._message(data, "Seat deleted")

    # =========================================================================
    # PASSES
    # =========================================================================

    def fetch_passes(self) -> List[PassRecord]:
        data = self._get({"action": "getPasses"})
        return self._parse_list(PassRecord, data)

    def create_pass(self, bus_pass: PassRecord) -> str:
        data = self._post({"action": "addPass", **bus_pass.model_dump(by_alias=True)})
        return self._message(data, "Pass saved")

    def remove_pass(self, pass_id: str) -> str:
        data = self._post({"action": "deletePass", "passId": pass_id})
        return self._message(data, "Pass deleted")

    # =========================================================================
    # TRIPS
    # =========================================================================

    def log_trip(self, trip: TripLogCreate) -> str:
        data = self._post({"action": "addTrip", **trip.model_dump(by_alias=True, mode="json")})
        return self._message(data, "Trip logged")

    def fetch_trip_counts(self) -> TripCounts:
        data = self._get({"action": "countTrips"})
        return self._parse(TripCounts, data or {})

    def fetch_trips(self) -> List[TripRecord]:
        data = self._get({"action": "getTrips"})
        return self._parse_list(TripRecord, data)

    def close(self) -> None:
        self._session.close()
