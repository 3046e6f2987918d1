import pytest

from restaurant_api.schemas import normalize_phone
from restaurant_api.utils.time import normalize_slot


@pytest.mark.parametrize("label", ["7:00 PM", "07:00 PM", "7:00 pm", " 07:00PM "])
def test_slot_labels_normalise(label):
    assert normalize_slot(label) == "07:00 PM"


@pytest.mark.parametrize("label", ["", "8:00 PM", "19:00", "seven"])
def test_unknown_slots_rejected(label):
    with pytest.raises(ValueError):
        normalize_slot(label)


def test_phone_keeps_digits_only():
    assert normalize_phone("9876543210") == "9876543210"
    assert normalize_phone("98765-43210") == "9876543210"
    assert normalize_phone("(987) 654 3210") == "9876543210"


@pytest.mark.parametrize("phone", ["98765", "98765432101", "", None])
def test_phone_must_be_ten_digits(phone):
    with pytest.raises(ValueError):
        normalize_phone(phone)
