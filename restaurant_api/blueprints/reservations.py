import logging
from flask import Blueprint, request, jsonify, current_app
from pydantic import ValidationError as SchemaError
from ..availability import get_reserved_tables
from ..http import jerror, client_ip, allow_write, schema_details
from ..schemas import ReservationRequest, UpdateReservationRequest
from ..utils.time import parse_date
from .. import store

logger = logging.getLogger(__name__)

bp = Blueprint("reservations", __name__)


def _context():
    return {"max_guests": current_app.config["MAX_GUESTS"]}


@bp.get("/tables")
def tables():
    return jsonify([t.to_dict() for t in store.list_tables()])


@bp.get("/reserved-tables")
def reserved_tables():
    date_str = request.args.get("date")
    time_slot = request.args.get("time")
    if not date_str or not time_slot:
        return jerror(400, "MISSING_PARAMS", "Date and time are required.")
    try:
        day = parse_date(date_str)
    except ValueError as e:
        return jerror(400, "BAD_DATE", "Invalid date format. Use YYYY-MM-DD.", str(e))

    reserved = get_reserved_tables(day, time_slot, request.args.get("excludeOrderId"))
    return jsonify(sorted(reserved))


@bp.post("/reserve")
def create_reservation():
    ip = client_ip()
    if not allow_write(ip):
        logger.warning("Rate limited reservation from %s", ip)
        return jerror(429, "RATE_LIMITED", "Too many requests. Try again shortly.")

    payload = request.get_json(silent=True)
    if not payload:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = ReservationRequest.model_validate(payload, context=_context())
    except SchemaError as e:
        return jerror(400, "VALIDATION_ERROR", "Invalid input.", details=schema_details(e))

    res = store.create_reservation(data)
    return jsonify(message="Reservation successful", orderId=res.order_id), 201


@bp.get("/reservation/<order_id>")
def get_reservation(order_id):
    return jsonify(store.get_reservation(order_id).to_dict())


@bp.put("/update-reservation")
def update_reservation():
    ip = client_ip()
    if not allow_write(ip):
        logger.warning("Rate limited reservation update from %s", ip)
        return jerror(429, "RATE_LIMITED", "Too many requests. Try again shortly.")

    payload = request.get_json(silent=True)
    if not payload:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = UpdateReservationRequest.model_validate(payload, context=_context())
    except SchemaError as e:
        return jerror(400, "VALIDATION_ERROR", "Invalid input.", details=schema_details(e))

    res = store.update_reservation(data)
    return jsonify(message="Reservation updated", orderId=res.order_id), 200


@bp.delete("/reservation/<order_id>")
def cancel(order_id):
    kind = store.cancel_order(order_id)
    return jsonify(message="Order deleted successfully", orderId=order_id, kind=kind), 200
