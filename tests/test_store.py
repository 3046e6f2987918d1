import random
from datetime import datetime, timezone
from itertools import combinations

import pytest

from restaurant_api import store
from restaurant_api.availability import get_reserved_tables
from restaurant_api.errors import ConflictError, NotFoundError, ValidationError
from restaurant_api.extensions import db
from restaurant_api.models import Reservation
from restaurant_api.schemas import ReservationRequest, UpdateReservationRequest
from restaurant_api.utils.time import TIME_SLOTS

from conftest import FUTURE_DAY, NEXT_DAY

DAY = FUTURE_DAY


def _request(make_payload, **overrides):
    return ReservationRequest.model_validate(make_payload(**overrides))


def test_resolver_rejects_missing_inputs(app):
    with pytest.raises(ValidationError) as exc:
        get_reserved_tables(None, "07:00 PM")
    assert exc.value.field == "date"
    with pytest.raises(ValidationError) as exc:
        get_reserved_tables(DAY, "")
    assert exc.value.field == "time"


def test_resolver_matches_date_and_slot_exactly(app, make_payload):
    store.create_reservation(_request(make_payload, tables=["T1", "T2"]))
    store.create_reservation(_request(make_payload, tables=["T3"], time="05:00 PM"))

    assert get_reserved_tables(DAY, "7:00 PM") == {"T1", "T2"}
    assert get_reserved_tables(DAY, "05:00 PM") == {"T3"}
    assert get_reserved_tables(NEXT_DAY, "07:00 PM") == set()


def test_storage_constraint_rejects_race_loser(app, make_payload, monkeypatch):
    store.create_reservation(_request(make_payload, tables=["T1", "T2"]))

    # Simulate a writer whose availability check ran before the first commit.
    monkeypatch.setattr(store, "_ensure_free", lambda *args, **kwargs: None)
    with pytest.raises(ConflictError) as exc:
        store.create_reservation(_request(make_payload, tables=["T2", "T3"]))

    assert exc.value.tables == ["T2"]
    assert get_reserved_tables(DAY, "07:00 PM") == {"T1", "T2"}
    assert db.session.query(Reservation).count() == 1


def test_storage_constraint_guards_updates(app, make_payload, monkeypatch):
    mine = store.create_reservation(_request(make_payload, tables=["T1"]))
    store.create_reservation(_request(make_payload, tables=["T2"]))
    order_id = mine.order_id

    monkeypatch.setattr(store, "_ensure_free", lambda *args, **kwargs: None)
    update = UpdateReservationRequest.model_validate(make_payload(orderId=order_id, tables=["T1", "T2"]))
    with pytest.raises(ConflictError):
        store.update_reservation(update)

    assert store.get_reservation(order_id).table_ids == ["T1"]


def test_random_bookings_never_double_book(app, make_payload):
    rng = random.Random(7)
    tables = [f"T{n}" for n in range(1, 11)]
    days = [FUTURE_DAY.isoformat(), NEXT_DAY.isoformat()]
    booked = 0
    for _ in range(80):
        chosen = rng.sample(tables, rng.randint(1, 3))
        request = _request(make_payload, date=rng.choice(days), time=rng.choice(TIME_SLOTS[:2]), tables=chosen)
        try:
            store.create_reservation(request)
            booked += 1
        except ConflictError:
            pass

    reservations = db.session.query(Reservation).all()
    assert len(reservations) == booked
    for a, b in combinations(reservations, 2):
        if a.date == b.date and a.time_slot == b.time_slot:
            assert not set(a.table_ids) & set(b.table_ids)


def test_cancel_unknown_order_raises_not_found(app):
    with pytest.raises(NotFoundError):
        store.cancel_order("missing")


def test_provision_tables_is_idempotent(app):
    assert store.provision_tables(10) == 0
    assert store.provision_tables(12) == 2
    assert [t.identifier for t in store.list_tables()][-2:] == ["T11", "T12"]


def test_history_order_puts_missing_created_at_last():
    records = [
        (None, {"orderId": "undated"}),
        (datetime(2026, 1, 2, 9, 0), {"orderId": "naive"}),
        (datetime(2026, 1, 3, 9, 0, tzinfo=timezone.utc), {"orderId": "aware"}),
        (datetime(2026, 1, 1, 9, 0), {"orderId": "oldest"}),
    ]
    assert [b["orderId"] for b in store._newest_first(records)] == ["aware", "naive", "oldest", "undated"]
