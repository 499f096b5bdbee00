from decimal import Decimal, ROUND_HALF_UP

import pytest

from tax_engine.domain.fixed_decimal import (
    add, divide, fix, is_positive, multiply, rate_from_quote, subtract, to_decimal,
)


def reference_product(a: str, b: str) -> str:
    exact = Decimal(a) * Decimal(b)
    return format(exact.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP), "f")


@pytest.mark.parametrize("a,b", [
    ("0.1", "0.2"),
    ("1.005", "3.3"),
    ("0.123456", "789.654321"),
    ("123456.789012", "0.000001"),
    ("0.00005", "1"),
    ("19.99", "0.075"),
])
def test_multiply_matches_exact_product(a, b):
    assert multiply(a, b) == reference_product(a, b)


def test_multiply_avoids_float_noise():
    assert multiply("0.1", "0.2") == "0.0200"
    assert multiply("1.15", "100") == "115.0000"
    assert multiply("1000.0000", "0.10") == "100.0000"


def test_multiply_negative_operand_keeps_sign():
    assert multiply("-2.5", "4") == "-10.0000"
    # rounds to zero without a minus sign
    assert multiply("-0.00001", "1") == "0.0000"


@pytest.mark.parametrize("a,b", [("abc", "2"), ("2", ""), (None, "1"), ("NaN", "1"), ("1", "Infinity")])
def test_multiply_unparseable_returns_zero(a, b):
    assert multiply(a, b) == "0"


def test_divide_truncates_to_four_digits():
    assert divide("100.0000", "1.10") == "90.9090"
    assert divide("1", "3") == "0.3333"
    assert divide("2", "3") == "0.6666"
    assert divide("0.0006", "0.00004") == "15.0000"


def test_divide_by_zero_returns_zero():
    assert divide("10", "0") == "0"
    assert divide("10", "0.0000") == "0"


def test_divide_unparseable_returns_zero():
    assert divide("ten", "2") == "0"
    assert divide("10", "two") == "0"


def test_add_ignores_unparseable_operands():
    assert add("1.5", "2.25", "x") == "3.7500"
    assert add() == "0.0000"


def test_subtract():
    assert subtract("1000", "90.9090") == "909.0910"


def test_fix_rounds_half_up():
    assert fix("2.345", places=2) == "2.35"
    assert fix("2.344", places=2) == "2.34"


def test_to_decimal_parses_floats_by_their_repr():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(True) is None
    assert to_decimal("  12.5 ") == Decimal("12.5")


def test_is_positive():
    assert is_positive("0.01")
    assert not is_positive("0")
    assert not is_positive("-1")
    assert not is_positive(None)


def test_rate_from_quote():
    assert rate_from_quote("25000") == "0.0000400000"
    assert rate_from_quote(Decimal("24000")) == "0.0000416667"
    assert rate_from_quote("0") == "0"
    assert rate_from_quote("bad") == "0"


@pytest.mark.parametrize("operation,a,b", [
    (multiply, "1e60", "1"),
    (multiply, "1e40", "1e40"),
    (divide, "1", "1e-70"),
    (subtract, "1e70", "1"),
])
def test_results_beyond_working_precision_return_zero(operation, a, b):
    assert operation(a, b) == "0"


def test_fix_and_add_of_huge_amounts_return_zero():
    assert fix("1e57") == "0"
    assert add("1e57", "1") == "0"
    assert add("9e999999", "9e999999") == "0"
    assert rate_from_quote("1e-70") == "0"
