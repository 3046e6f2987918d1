from flask import Blueprint, request, jsonify
from ..auth import admin_required
from ..http import jerror
from ..utils.time import parse_date
from .. import store

bp = Blueprint("admin", __name__)


def _paging():
    page = max(request.args.get("page", 1, type=int), 1)
    page_size = min(max(request.args.get("page_size", 20, type=int), 1), 100)
    return page, page_size


@bp.get("/reservations")
@admin_required
def list_reservations():
    """
    Admin list for a single day with pagination.
    Query: ?date=YYYY-MM-DD&page=1&page_size=20
    """
    date_str = request.args.get("date")
    if not date_str:
        return jerror(400, "MISSING_DATE", "Missing 'date' query parameter (YYYY-MM-DD).")
    try:
        day = parse_date(date_str)
    except ValueError as e:
        return jerror(400, "BAD_DATE", "Invalid date format. Use YYYY-MM-DD.", str(e))

    page, page_size = _paging()
    total, rows = store.reservations_for_day(day, page, page_size)
    return jsonify(page=page, pageSize=page_size, total=total, reservations=[r.to_dict() for r in rows])


@bp.delete("/reservations/<order_id>")
@admin_required
def cancel_reservation(order_id):
    store.cancel_reservation(order_id)
    return jsonify(message="Reservation cancelled", orderId=order_id), 200


@bp.get("/takeaway")
@admin_required
def list_takeaway():
    page, page_size = _paging()
    total, rows = store.takeaway_page(page, page_size)
    return jsonify(page=page, pageSize=page_size, total=total, orders=[o.to_dict() for o in rows])
