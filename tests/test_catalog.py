from datetime import date, datetime, timedelta

import pytest

from helpers import TODAY, make_medicine
from pharmacy_pos.catalog import filter_sellable, fold_text, format_expiry, parse_expiry, sort_by_name


def test_filter_sellable_never_returns_inactive_records():
    records = [
        make_medicine("A", active=True),
        make_medicine("B", active=False),
        make_medicine("C", active=False, expiry="2099-01-01"),
    ]
    result = filter_sellable(records, TODAY)
    assert [m.medicine_id for m in result] == ["A"]
    assert all(m.active for m in result)


def test_filter_sellable_excludes_past_expiry_and_keeps_same_day():
    yesterday = (TODAY - timedelta(days=1)).isoformat()
    records = [
        make_medicine("past", expiry=yesterday),
        make_medicine("today", expiry=TODAY.isoformat()),
        make_medicine("future", expiry="2030-12-31"),
    ]
    assert [m.medicine_id for m in filter_sellable(records, TODAY)] == ["today", "future"]


def test_filter_sellable_compares_dates_only():
    records = [make_medicine("A", expiry="2025-06-15T00:00:00")]
    reference = datetime(2025, 6, 15, 23, 59)
    assert [m.medicine_id for m in filter_sellable(records, reference)] == ["A"]


def test_filter_sellable_preserves_relative_order():
    records = [make_medicine(str(i), name=f"Zeta {i}") for i in range(5)]
    assert filter_sellable(records, TODAY) == records


def test_unparseable_expiry_is_excluded_and_blank_is_included():
    records = [
        make_medicine("bad", expiry="not a date"),
        make_medicine("blank", expiry="   "),
        make_medicine("empty", expiry=""),
        make_medicine("none", expiry=None),
    ]
    assert [m.medicine_id for m in filter_sellable(records, TODAY)] == ["blank", "empty", "none"]


def test_brazilian_expiry_format_is_understood():
    records = [
        make_medicine("expired", expiry="14/06/2025"),
        make_medicine("valid", expiry="15/06/2025"),
    ]
    assert [m.medicine_id for m in filter_sellable(records, TODAY)] == ["valid"]


def test_parse_expiry_variants():
    assert parse_expiry("2025-01-31") == date(2025, 1, 31)
    assert parse_expiry("31/01/2025") == date(2025, 1, 31)
    assert parse_expiry(date(2025, 1, 31)) == date(2025, 1, 31)
    assert parse_expiry("") is None
    with pytest.raises(ValueError):
        parse_expiry("2025-13-40")
    with pytest.raises(ValueError):
        parse_expiry(20250131)


def test_format_expiry():
    assert format_expiry("2025-01-31") == "31/01/2025"
    assert format_expiry(None) == "No expiry"
    assert format_expiry("garbage") == "Invalid date"


def test_sort_by_name_is_case_and_accent_insensitive():
    records = [
        make_medicine("1", name="dipirona"),
        make_medicine("2", name="Álcool"),
        make_medicine("3", name="Buscopan"),
        make_medicine("4", name="amoxicilina"),
    ]
    assert [m.name for m in sort_by_name(records)] == ["Álcool", "amoxicilina", "Buscopan", "dipirona"]


def test_fold_text():
    assert fold_text("Ação PARACETAMOL") == "acao paracetamol"
