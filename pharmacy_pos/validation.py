"""Tax id (CPF) validation and input masking."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

TAX_ID_FIELD = "cpf"
TAX_ID_DIGITS = 11
_MASKED_TAX_ID = re.compile(r"^\d{3}\.\d{3}\.\d{3}-\d{2}$")
_BARE_TAX_ID = re.compile(r"^\d{11}$")


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    field_errors: dict[str, str] = field(default_factory=dict)


def tax_id_digits(value: str) -> str:
    """Strip everything but digits, the form used for comparisons."""
    return re.sub(r"\D", "", value or "")


def format_tax_id(raw: str) -> str:
    """Apply the 000.000.000-00 mask progressively, as the user types."""
    digits = tax_id_digits(raw)[:TAX_ID_DIGITS]
    if len(digits) > 9:
        return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"
    if len(digits) > 6:
        return f"{digits[:3]}.{digits[3:6]}.{digits[6:]}"
    if len(digits) > 3:
        return f"{digits[:3]}.{digits[3:]}"
    return digits


def validate_tax_id(value: str | None) -> ValidationResult:
    """Accept a masked CPF or eleven bare digits."""
    text = (value or "").strip()
    if not text:
        return ValidationResult(False, {TAX_ID_FIELD: "CPF is required."})
    if not (_MASKED_TAX_ID.match(text) or _BARE_TAX_ID.match(text)):
        return ValidationResult(False, {TAX_ID_FIELD: "CPF must use the format 000.000.000-00."})
    return ValidationResult(True)
