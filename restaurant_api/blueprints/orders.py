import logging
from flask import Blueprint, request, jsonify
from pydantic import ValidationError as SchemaError
from ..http import jerror, client_ip, allow_write, schema_details
from ..schemas import TakeawayRequest
from .. import store

logger = logging.getLogger(__name__)

bp = Blueprint("orders", __name__)


@bp.post("/takeaway")
def place_takeaway():
    ip = client_ip()
    if not allow_write(ip):
        logger.warning("Rate limited takeaway order from %s", ip)
        return jerror(429, "RATE_LIMITED", "Too many requests. Try again shortly.")

    payload = request.get_json(silent=True)
    if not payload:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = TakeawayRequest.model_validate(payload)
    except SchemaError as e:
        return jerror(400, "VALIDATION_ERROR", "Invalid input.", details=schema_details(e))

    order = store.create_takeaway(data)
    body = order.to_dict()
    return jsonify(
        message="Takeaway order placed successfully",
        orderId=order.order_id,
        bill={k: body[k] for k in ("subtotal", "tax", "acTax", "gst", "deliveryCharge", "total")},
    ), 201


@bp.get("/takeaway/<order_id>")
def get_takeaway(order_id):
    return jsonify(store.get_takeaway(order_id).to_dict())


@bp.get("/orders-by-phone/", defaults={"phone": None})
@bp.get("/orders-by-phone/<phone>")
def orders_by_phone(phone):
    """Reservations and takeaway orders for one phone number, newest first."""
    return jsonify(store.orders_by_phone(phone))
