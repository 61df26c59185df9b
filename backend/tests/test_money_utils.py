from decimal import Decimal

import pytest

from posadmin.errors import ValidationError
from posadmin.money_utils import format_cents, parse_money_to_cents, round_cents


@pytest.mark.parametrize("raw,cents", [
    ("4.00", 400),
    ("4", 400),
    (4, 400),
    (4.5, 450),
    ("0.1", 10),
    (" 12.34 ", 1234),
    ("0", 0),
])
def test_parse_money(raw, cents):
    assert parse_money_to_cents(raw) == cents


@pytest.mark.parametrize("raw", ["1.001", "", "four", None, True, "Infinity", "1e30", "-1e40"])
def test_parse_money_rejects(raw):
    with pytest.raises(ValidationError):
        parse_money_to_cents(raw)


def test_format_cents():
    assert format_cents(434) == "4.34"
    assert format_cents(5) == "0.05"
    assert format_cents(0) == "0.00"
    assert format_cents(None) is None


def test_round_cents_half_up():
    assert round_cents(Decimal("34.5")) == 35
    assert round_cents(Decimal("34.49")) == 34
