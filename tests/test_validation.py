import pytest

from pharmacy_pos.validation import format_tax_id, tax_id_digits, validate_tax_id


@pytest.mark.parametrize("value", ["123.456.789-09", "12345678909", " 123.456.789-09 "])
def test_valid_tax_ids(value):
    result = validate_tax_id(value)
    assert result.valid
    assert result.field_errors == {}


@pytest.mark.parametrize("value", ["", None, "123.456.789", "123-456-789-09", "1234567890a"])
def test_invalid_tax_ids_report_field_error(value):
    result = validate_tax_id(value)
    assert not result.valid
    assert "cpf" in result.field_errors


def test_format_tax_id_masks_progressively():
    assert format_tax_id("123") == "123"
    assert format_tax_id("1234") == "123.4"
    assert format_tax_id("1234567") == "123.456.7"
    assert format_tax_id("12345678909") == "123.456.789-09"
    assert format_tax_id("123.456.789-0912") == "123.456.789-09"


def test_tax_id_digits():
    assert tax_id_digits("999.999.999-99") == "99999999999"
