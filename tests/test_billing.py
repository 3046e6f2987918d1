from decimal import Decimal
from types import SimpleNamespace

from restaurant_api.billing import compute_bill


def _item(quantity, price):
    return SimpleNamespace(quantity=quantity, price=Decimal(str(price)))


def test_small_order_pays_delivery():
    bill = compute_bill([_item(2, 180), _item(1, 80)])
    assert bill.subtotal == Decimal("440.00")
    assert bill.tax == Decimal("22.00")
    assert bill.ac_tax == Decimal("8.80")
    assert bill.gst == Decimal("35.20")
    assert bill.delivery_charge == Decimal("50.00")
    assert bill.total == Decimal("556.00")


def test_delivery_is_free_only_above_threshold():
    assert compute_bill([_item(1, 500)]).delivery_charge == Decimal("50.00")
    assert compute_bill([_item(1, 501)]).delivery_charge == Decimal("0.00")


def test_large_order():
    bill = compute_bill([_item(3, 200)])
    assert bill.to_dict() == {
        "subtotal": 600.0,
        "tax": 30.0,
        "acTax": 12.0,
        "gst": 48.0,
        "deliveryCharge": 0.0,
        "total": 690.0,
    }


def test_charges_round_half_up_to_cents():
    bill = compute_bill([_item(1, "99.99")])
    assert bill.tax == Decimal("5.00")
    assert bill.ac_tax == Decimal("2.00")
    assert bill.gst == Decimal("8.00")
    assert bill.total == Decimal("164.99")
