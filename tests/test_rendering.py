from decimal import Decimal

from helpers import make_customer, make_medicine
from pharmacy_pos.models import CartLine
from pharmacy_pos.rendering import format_cart_line, format_customer, format_medicine_label, format_money


def test_format_money():
    assert format_money(Decimal("20")) == "R$ 20.00"
    assert format_money(Decimal("3.456")) == "R$ 3.46"
    assert format_money(None) == "R$ 0.00"


def test_format_medicine_label():
    medicine = make_medicine(name="Dipirona", price="4.5", stock=3, expiry="2026-01-31", category="Analgésicos")
    assert format_medicine_label(medicine).plain == "Dipirona (Analgésicos)  R$ 4.50   3   exp 31/01/2026"


def test_format_cart_line():
    line = CartLine(make_medicine(name="Aspirin", price="2.50"), 3)
    assert format_cart_line(line).plain == "3 x Aspirin  @ R$ 2.50  = R$ 7.50"


def test_format_customer():
    assert "Maria Silva" in format_customer(make_customer()).plain
    assert "No customer" in format_customer(None).plain
