"""Rendering helpers for medicines, cart lines and money."""

from __future__ import annotations

from decimal import Decimal

from rich.text import Text

from pharmacy_pos.catalog import format_expiry
from pharmacy_pos.config import CURRENCY_SYMBOL
from pharmacy_pos.models import CartLine, Customer, Medicine


def format_money(amount: Decimal | int | None) -> str:
    value = Decimal(amount or 0).quantize(Decimal("0.01"))
    return f"{CURRENCY_SYMBOL} {value}"


def stock_style(stock: int) -> str:
    """Return a consistent badge style for stock levels."""
    if stock <= 0:
        return "bold #ffffff on #b23a48"
    if stock < 10:
        return "bold #0b1f0f on #e0b44c"
    return "bold #0b1f0f on #5fbf72"


def format_medicine_label(medicine: Medicine) -> Text:
    """Render a search result: name, category, price, stock badge and expiry."""
    text = Text()
    text.append(medicine.name, style="bold")
    if medicine.category_name:
        text.append(f" ({medicine.category_name})", style="dim")
    text.append(f"  {format_money(medicine.price)}  ")
    text.append(f" {medicine.stock} ", style=stock_style(medicine.stock))
    text.append(f"  exp {format_expiry(medicine.expiry)}", style="dim")
    return text


def format_cart_line(line: CartLine) -> Text:
    text = Text()
    text.append(f"{line.quantity} x ", style="bold")
    text.append(line.medicine.name)
    text.append(f"  @ {format_money(line.medicine.price)}", style="dim")
    text.append(f"  = {format_money(line.subtotal)}")
    return text


def format_customer(customer: Customer | None) -> Text:
    if customer is None:
        return Text("No customer. Press C to look up a CPF.", style="dim")
    text = Text()
    text.append("Customer: ", style="bold")
    text.append(customer.name)
    text.append(f"  CPF {customer.tax_id}", style="dim")
    return text
