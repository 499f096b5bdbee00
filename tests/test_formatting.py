from tax_engine.domain.formatting import (
    format_amount, format_compact_usd, format_compact_vnd, format_usd, format_vnd,
)


def test_format_usd():
    assert format_usd("1234.567") == "$1,234.57"
    assert format_usd("0.0040") == "$0.00"
    assert format_usd("-12.5") == "-$12.50"
    assert format_usd("oops") == "$0.00"


def test_format_vnd_rounds_to_whole_dong():
    assert format_vnd("1234567.5") == "1.234.568 ₫"
    assert format_vnd("115.0000") == "115 ₫"
    assert format_vnd(None) == "0 ₫"


def test_format_amount_for_other_currencies():
    assert format_amount("1234.5", "EUR") == "1,234.50 EUR"
    assert format_amount("10", "USD") == "$10.00"
    assert format_amount("", "JPY") == "0"


def test_compact_vnd():
    assert format_compact_vnd("1234567890") == "1.2 tỷ ₫"
    assert format_compact_vnd("25000000") == "25.0 tr ₫"
    assert format_compact_vnd("-12400") == "-12K ₫"
    assert format_compact_vnd("999") == "999 ₫"


def test_compact_usd():
    assert format_compact_usd("2500000000") == "2.5B"
    assert format_compact_usd("3400000") == "3.4M"
    assert format_compact_usd("12500") == "13K"
    assert format_compact_usd("12.345") == "$12.35"


def test_amounts_too_large_to_round_format_as_zero():
    assert format_usd("1e40") == "$0.00"
    assert format_vnd("1e40") == "0 ₫"
    assert format_amount("1e40", "EUR") == "0"
    assert format_compact_vnd("1e40") == "0 ₫"
    assert format_compact_usd("1e40") == "$0"
