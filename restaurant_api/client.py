"""
HTTP client for the reservation service.

Error responses are turned back into the exceptions of ``errors`` so callers
deal with one taxonomy whether a failure happened locally or on the server.
"""
import logging
from datetime import date
import requests
from .errors import ConflictError, NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5001"


def _first_field(details) -> str | None:
    if isinstance(details, list) and details and isinstance(details[0], dict):
        return details[0].get("field")
    return None


class ReservationClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, session=None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.http = session if session is not None else requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise StoreError("Could not reach the reservation service.") from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.status_code < 400:
            return body

        body = body if isinstance(body, dict) else {}
        message = body.get("message") or f"Request failed with status {resp.status_code}."
        details = body.get("details")
        if resp.status_code == 400:
            raise ValidationError(message, field=_first_field(details), details=details)
        if resp.status_code == 404:
            raise NotFoundError(message, details)
        if resp.status_code == 409:
            raise ConflictError(message, tables=details)
        raise StoreError(message, details)

    def list_tables(self) -> list[dict]:
        return self._request("GET", "/tables")

    def reserved_tables(self, day: date, time_slot: str, exclude_order_id: str | None = None) -> set[str]:
        params = {"date": day.isoformat(), "time": time_slot}
        if exclude_order_id:
            params["excludeOrderId"] = exclude_order_id
        return set(self._request("GET", "/reserved-tables", params=params))

    def reserve(self, payload: dict) -> str:
        return self._request("POST", "/reserve", json=payload)["orderId"]

    def update_reservation(self, payload: dict) -> str:
        return self._request("PUT", "/update-reservation", json=payload)["orderId"]

    def get_reservation(self, order_id: str) -> dict:
        return self._request("GET", f"/reservation/{order_id}")

    def cancel(self, order_id: str) -> None:
        self._request("DELETE", f"/reservation/{order_id}")

    def orders_by_phone(self, phone: str) -> list[dict]:
        return self._request("GET", f"/orders-by-phone/{phone}")

    def place_takeaway(self, payload: dict) -> dict:
        return self._request("POST", "/takeaway", json=payload)

    def get_takeaway(self, order_id: str) -> dict:
        return self._request("GET", f"/takeaway/{order_id}")
