"""Sellable-catalog filtering and expiry handling."""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from typing import Iterable

from pharmacy_pos.models import Medicine

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_BR_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})")


def parse_expiry(value: date | str | None) -> date | None:
    """Parse a backend expiry value into a calendar date.

    Returns ``None`` when there is no expiry (absent or blank). Raises
    ``ValueError`` when a value is present but cannot be read as a date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"unsupported expiry value: {value!r}")

    text = value.strip()
    if not text:
        return None

    match = _ISO_DATE.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return date(year, month, day)

    match = _BR_DATE.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return date(year, month, day)

    return datetime.fromisoformat(text).date()


def is_sellable(record: Medicine, reference_date: date) -> bool:
    """Active and not expired as of ``reference_date``."""
    if not record.active:
        return False
    try:
        expiry = parse_expiry(record.expiry)
    except ValueError:
        # When in doubt, keep the item off the shelf.
        return False
    return expiry is None or expiry >= reference_date


def filter_sellable(records: Iterable[Medicine], reference_date: date | datetime) -> list[Medicine]:
    """Keep the sellable records, preserving their relative order."""
    if isinstance(reference_date, datetime):
        reference_date = reference_date.date()
    return [record for record in records if is_sellable(record, reference_date)]


def format_expiry(value: date | str | None) -> str:
    """Display form of an expiry value (DD/MM/YYYY)."""
    try:
        expiry = parse_expiry(value)
    except ValueError:
        return "Invalid date"
    if expiry is None:
        return "No expiry"
    return expiry.strftime("%d/%m/%Y")


def fold_text(text: str) -> str:
    """Case- and accent-insensitive form used for matching and collation."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def sort_by_name(records: Iterable[Medicine]) -> list[Medicine]:
    return sorted(records, key=lambda record: (fold_text(record.name), record.name))
