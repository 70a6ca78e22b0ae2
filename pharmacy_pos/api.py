"""REST client for the pharmacy backend."""

from __future__ import annotations

from typing import Any

import requests

from pharmacy_pos.config import API_BASE_URL, API_TOKEN, REQUEST_TIMEOUT_SECONDS
from pharmacy_pos.debug_log import log_debug
from pharmacy_pos.errors import RemoteError
from pharmacy_pos.models import Customer, Medicine, OrderRequest, SaleConfirmation
from pharmacy_pos.validation import tax_id_digits


def _server_message(response: requests.Response) -> str | None:
    """Extract the backend's ``{"error": ...}`` text, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


class PharmacyApi:
    """Thin wrapper over the endpoints the sale screen needs.

    Every transport or protocol failure is raised as ``RemoteError``.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: str = API_TOKEN,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            log_debug(f"api_unreachable method={method} path={path} error={exc!r}")
            raise RemoteError(f"Could not reach the pharmacy API: {exc}") from exc

        if not response.ok:
            server_message = _server_message(response)
            log_debug(f"api_error method={method} path={path} status={response.status_code} message={server_message!r}")
            raise RemoteError(
                f"{method} {path} failed with HTTP {response.status_code}",
                status_code=response.status_code,
                server_message=server_message,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError(f"{method} {path} returned a non-JSON body", status_code=response.status_code) from exc

    def _list(self, path: str) -> list[dict[str, Any]]:
        body = self._request("GET", path)
        if not isinstance(body, list):
            raise RemoteError(f"GET {path} did not return a list")
        return body

    def list_medicines(self, active_only: bool = True) -> list[Medicine]:
        path = "/medicamentos/ativos" if active_only else "/medicamentos"
        medicines: list[Medicine] = []
        for item in self._list(path):
            # One bad record must not hide the rest of the catalog.
            try:
                medicines.append(Medicine.from_api(item))
            except RemoteError as exc:
                log_debug(f"medicine_skipped path={path} error={exc}")
        return medicines

    def list_customers(self) -> list[Customer]:
        return [Customer.from_api(item) for item in self._list("/clientes")]

    def find_customer_by_tax_id(self, tax_id: str) -> Customer | None:
        # The backend has no lookup endpoint; list and match on digits only.
        wanted = tax_id_digits(tax_id)
        for customer in self.list_customers():
            if tax_id_digits(customer.tax_id) == wanted:
                return customer
        return None

    def create_sale(self, order: OrderRequest) -> SaleConfirmation:
        return SaleConfirmation.from_api(self._request("POST", "/vendas", order.to_api()))

    def create_cancelled_sale(self, order: OrderRequest) -> SaleConfirmation:
        return SaleConfirmation.from_api(self._request("POST", "/vendas/cancelada", order.to_api()))
