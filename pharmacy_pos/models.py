"""Domain models for the pharmacy point of sale."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from pharmacy_pos.errors import RemoteError


def _decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise RemoteError(f"Invalid decimal value from API: {value!r}") from exc


def _price(value: Any) -> Decimal:
    amount = _decimal(value)
    if not amount.is_finite() or amount < 0:
        raise RemoteError(f"Invalid price from API: {value!r}")
    return amount


@dataclass(frozen=True)
class Category:
    """A medicine category."""

    category_id: str
    name: str

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Category:
        return cls(category_id=str(payload.get("id", "")), name=str(payload.get("nome") or ""))


@dataclass(frozen=True)
class Medicine:
    """A catalog record as loaded from the backend.

    ``expiry`` keeps the raw backend text when it is not already a ``date`` so
    that the sellable filter can decide what to do with unparseable values.
    """

    medicine_id: str
    name: str
    price: Decimal
    stock: int
    active: bool = True
    expiry: date | str | None = None
    category: Category | None = None

    @property
    def category_name(self) -> str:
        return self.category.name if self.category is not None else ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Medicine:
        try:
            category_payload = payload.get("categoria")
            return cls(
                medicine_id=str(payload["id"]),
                name=str(payload["nome"]),
                price=_price(payload.get("preco", 0)),
                stock=int(payload.get("quantidadeEstoque") or 0),
                active=bool(payload.get("ativo", False)),
                expiry=payload.get("validade"),
                category=Category.from_api(category_payload) if category_payload else None,
            )
        except (AttributeError, KeyError, OverflowError, TypeError, ValueError) as exc:
            raise RemoteError(f"Malformed medicine payload: {exc}") from exc


@dataclass(frozen=True)
class CartLine:
    """One medicine and the quantity requested for it."""

    medicine: Medicine
    quantity: int

    @property
    def medicine_id(self) -> str:
        return self.medicine.medicine_id

    @property
    def subtotal(self) -> Decimal:
        return self.medicine.price * self.quantity

    def with_quantity(self, quantity: int) -> CartLine:
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class Customer:
    """Customer reference used for display and as the order's owner."""

    customer_id: str
    name: str
    tax_id: str

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Customer:
        try:
            return cls(
                customer_id=str(payload["id"]),
                name=str(payload.get("nome") or ""),
                tax_id=str(payload.get("cpf") or ""),
            )
        except (AttributeError, KeyError, OverflowError, TypeError) as exc:
            raise RemoteError(f"Malformed customer payload: {exc}") from exc


@dataclass(frozen=True)
class OrderItem:
    medicine_id: str
    quantity: int


@dataclass(frozen=True)
class OrderRequest:
    """Snapshot of a sale sent to the backend."""

    customer_id: str
    items: tuple[OrderItem, ...] = field(default_factory=tuple)

    @classmethod
    def from_cart(cls, customer: Customer, lines: Iterable[CartLine]) -> OrderRequest:
        return cls(
            customer_id=customer.customer_id,
            items=tuple(OrderItem(line.medicine_id, line.quantity) for line in lines),
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "clienteId": self.customer_id,
            "itens": [{"medicamentoId": item.medicine_id, "quantidade": item.quantity} for item in self.items],
        }


@dataclass(frozen=True)
class SaleConfirmation:
    """Sale as acknowledged by the backend."""

    sale_id: str
    customer_name: str
    total: Decimal | None = None
    status: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> SaleConfirmation:
        try:
            return cls(
                sale_id=str(payload["id"]),
                customer_name=str(payload.get("clienteNome") or ""),
                total=_price(payload["valorTotal"]) if payload.get("valorTotal") is not None else None,
                status=payload.get("status"),
            )
        except (AttributeError, KeyError, OverflowError, TypeError) as exc:
            raise RemoteError(f"Malformed sale payload: {exc}") from exc
