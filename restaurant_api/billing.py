from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

TAX_RATE = Decimal("0.05")
AC_TAX_RATE = Decimal("0.02")
GST_RATE = Decimal("0.08")
DELIVERY_CHARGE = Decimal("50")
FREE_DELIVERY_ABOVE = Decimal("500")

_CENT = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Bill:
    subtotal: Decimal
    tax: Decimal
    ac_tax: Decimal
    gst: Decimal
    delivery_charge: Decimal
    total: Decimal

    def to_dict(self):
        return {
            "subtotal": float(self.subtotal),
            "tax": float(self.tax),
            "acTax": float(self.ac_tax),
            "gst": float(self.gst),
            "deliveryCharge": float(self.delivery_charge),
            "total": float(self.total),
        }


def compute_bill(items) -> Bill:
    """Bill for a takeaway basket of objects with ``quantity`` and ``price``.

    All percentage charges apply to the subtotal. Delivery is free once the
    subtotal exceeds ``FREE_DELIVERY_ABOVE``.
    """
    subtotal = sum((Decimal(item.quantity) * Decimal(item.price) for item in items), Decimal("0"))
    tax = _money(subtotal * TAX_RATE)
    ac_tax = _money(subtotal * AC_TAX_RATE)
    gst = _money(subtotal * GST_RATE)
    delivery = Decimal("0") if subtotal > FREE_DELIVERY_ABOVE else DELIVERY_CHARGE
    subtotal = _money(subtotal)
    return Bill(
        subtotal=subtotal,
        tax=tax,
        ac_tax=ac_tax,
        gst=gst,
        delivery_charge=_money(delivery),
        total=_money(subtotal + tax + ac_tax + gst + delivery),
    )
