"""Checkout orchestration for one sale at a time.

The orchestrator owns the transaction state (customer, cart, catalog and
search results) and drives it through::

    NO_CUSTOMER -> CUSTOMER_RESOLVED -> FINALIZED | ABORTED -> NO_CUSTOMER

Remote calls go through an injected ``dispatch(call, on_success, on_error)``
so the UI can run them off its event thread and hand the callbacks back to
it. Every state change therefore happens where the callbacks run.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Callable, TypeVar

from pharmacy_pos.api import PharmacyApi
from pharmacy_pos.cart import CartStore, Notify
from pharmacy_pos.catalog import filter_sellable, sort_by_name
from pharmacy_pos.config import SEARCH_DEBOUNCE_SECONDS
from pharmacy_pos.debug_log import log_action, log_debug
from pharmacy_pos.errors import BestEffortFailure, PosError, RemoteError
from pharmacy_pos.models import Customer, Medicine, OrderRequest, SaleConfirmation
from pharmacy_pos.rendering import format_money
from pharmacy_pos.search import Scheduler, SearchDebouncer, SearchTicket, is_text_query, search
from pharmacy_pos.state import Observable
from pharmacy_pos.validation import TAX_ID_FIELD, validate_tax_id

T = TypeVar("T")

GENERIC_SALE_ERROR = "Could not register the sale. Please try again."


def run_inline(call: Callable[[], T], on_success: Callable[[T], None], on_error: Callable[[PosError], None]) -> None:
    """Run ``call`` synchronously and route its outcome."""
    try:
        result = call()
    except PosError as exc:
        on_error(exc)
        return
    except Exception as exc:
        on_error(as_pos_error(exc))
        return
    on_success(result)


def as_pos_error(exc: Exception) -> PosError:
    """Wrap an unexpected failure so callers can still clear their busy flags."""
    log_debug(f"unexpected_error error={exc!r}")
    return RemoteError(f"Unexpected error: {exc}")


Dispatch = Callable[[Callable[[], T], Callable[[T], None], Callable[[PosError], None]], None]


class SaleState(str, Enum):
    NO_CUSTOMER = "no_customer"
    CUSTOMER_RESOLVED = "customer_resolved"
    FINALIZED = "finalized"
    ABORTED = "aborted"


class CheckoutOrchestrator:
    """Coordinates customer lookup, catalog loading, search and checkout."""

    def __init__(
        self,
        api: PharmacyApi,
        notify: Notify,
        schedule: Scheduler,
        dispatch: Dispatch = run_inline,
        today: Callable[[], date] = date.today,
        debounce_delay: float = SEARCH_DEBOUNCE_SECONDS,
    ) -> None:
        self.api = api
        self._notify = notify
        self._dispatch = dispatch
        self._today = today

        self.state: Observable[SaleState] = Observable(SaleState.NO_CUSTOMER)
        self.customer: Observable[Customer | None] = Observable(None)
        self.catalog: Observable[tuple[Medicine, ...]] = Observable(())
        self.results: Observable[tuple[Medicine, ...]] = Observable(())
        self.search_text: Observable[str] = Observable("")
        self.searching: Observable[bool] = Observable(False)
        self.submitting: Observable[bool] = Observable(False)
        self.last_sale: Observable[SaleConfirmation | None] = Observable(None)

        self.cart = CartStore(notify)
        self.debouncer = SearchDebouncer(schedule, self._run_search, delay=debounce_delay)

        # Bumped on every reset; callbacks from an older transaction are dropped.
        self._transaction = 0
        # Bumped on every catalog fetch; only the newest fetch replaces the pool.
        self._catalog_generation = 0

    # -------------------- customer --------------------

    def resolve_customer(self, tax_id: str) -> None:
        result = validate_tax_id(tax_id)
        if not result.valid:
            self._notify("error", "Invalid CPF", result.field_errors[TAX_ID_FIELD])
            log_debug(f"resolve_customer_rejected reason=invalid_tax_id value={tax_id!r}")
            return
        if self.state.get() != SaleState.NO_CUSTOMER:
            self._notify("warning", "Sale in progress", "Finish or cancel the current sale first.")
            return

        transaction = self._transaction

        def on_found(customer: Customer | None) -> None:
            if transaction != self._transaction or self.customer.get() is not None:
                return
            if customer is None:
                self._notify("error", "Customer not found", "No customer with this CPF. Register them first.")
                log_debug(f"resolve_customer_not_found tax_id={tax_id!r}")
                return
            self.customer.set(customer)
            self.state.set(SaleState.CUSTOMER_RESOLVED)
            self._notify("information", "Customer found", f"Starting sale for {customer.name}.")
            log_debug(f"resolve_customer_ok customer_id={customer.customer_id}")
            self.load_catalog()

        def on_error(exc: PosError) -> None:
            if transaction != self._transaction:
                return
            self._notify("error", "Customer lookup failed", str(exc))
            log_debug(f"resolve_customer_failed error={exc!r}")

        self._dispatch(lambda: self.api.find_customer_by_tax_id(tax_id), on_found, on_error)

    # -------------------- catalog & search --------------------

    def load_catalog(self) -> None:
        """Fetch the active catalog and show every sellable medicine."""
        generation = self._next_catalog_generation()
        self.searching.set(True)

        def on_loaded(records: list[Medicine]) -> None:
            if generation != self._catalog_generation:
                return
            pool = self._replace_catalog(records)
            self.results.set(tuple(search(self.search_text.get(), pool)))
            self.searching.set(False)

        def on_error(exc: PosError) -> None:
            if generation != self._catalog_generation:
                return
            self.searching.set(False)
            self._notify("error", "Catalog unavailable", "Could not load the medicines.")
            log_debug(f"load_catalog_failed error={exc!r}")

        self._dispatch(lambda: self.api.list_medicines(active_only=True), on_loaded, on_error)

    def search_input(self, text: str) -> None:
        """Feed one keystroke's worth of search text to the debouncer."""
        if self.customer.get() is None:
            return
        self.search_text.set(text)
        self.debouncer.input_changed(text)

    def _run_search(self, ticket: SearchTicket) -> None:
        if not is_text_query(ticket.query):
            self.searching.set(False)
            self.results.set(tuple(search(ticket.query, self.catalog.get())))
            return

        generation = self._next_catalog_generation()
        self.searching.set(True)

        def on_loaded(records: list[Medicine]) -> None:
            if generation == self._catalog_generation:
                self._replace_catalog(records)
            if not self.debouncer.is_current(ticket):
                log_debug(f"search_stale seq={ticket.sequence} query={ticket.query!r}")
                return
            pool = filter_sellable(records, self._today())
            self.results.set(tuple(search(ticket.query, pool)))
            self.searching.set(False)

        def on_error(exc: PosError) -> None:
            if not self.debouncer.is_current(ticket):
                return
            self.searching.set(False)
            self._notify("error", "Search failed", "Could not search the medicines.")
            log_debug(f"search_failed query={ticket.query!r} error={exc!r}")

        log_debug(f"search_dispatch seq={ticket.sequence} query={ticket.query!r}")
        self._dispatch(lambda: self.api.list_medicines(active_only=True), on_loaded, on_error)

    def _next_catalog_generation(self) -> int:
        self._catalog_generation += 1
        return self._catalog_generation

    def _replace_catalog(self, records: list[Medicine]) -> list[Medicine]:
        pool = sort_by_name(filter_sellable(records, self._today()))
        self.catalog.set(tuple(pool))
        self.cart.refresh_stock(pool)
        return pool

    # -------------------- terminal transitions --------------------

    def finalize(self) -> None:
        if self.submitting.get():
            return
        customer = self.customer.get()
        if customer is None:
            self._notify("warning", "No customer", "Find a customer by CPF before finalizing.")
            return
        if self.cart.is_empty():
            self._notify("error", "Empty cart", "Add at least one item to finalize the sale.")
            return

        order = OrderRequest.from_cart(customer, self.cart.lines.get())
        computed_total = self.cart.total()
        transaction = self._transaction
        self.submitting.set(True)
        log_debug(f"finalize_submit customer_id={customer.customer_id} items={len(order.items)}")

        def on_success(sale: SaleConfirmation) -> None:
            self.submitting.set(False)
            total = sale.total if sale.total is not None else computed_total
            self.last_sale.set(sale)
            self._notify("information", "Sale completed", f"Sale #{sale.sale_id} registered. Total {format_money(total)}.")
            log_action(
                "create",
                "sale",
                f"Sale #{sale.sale_id} finalized for customer '{sale.customer_name or customer.name}' "
                f"with total {format_money(total)}.",
            )
            if transaction != self._transaction:
                return
            self.state.set(SaleState.FINALIZED)
            self.reset()

        def on_error(exc: PosError) -> None:
            self.submitting.set(False)
            message = exc.server_message if isinstance(exc, RemoteError) and exc.server_message else GENERIC_SALE_ERROR
            self._notify("error", "Sale failed", message)
            log_debug(f"finalize_failed customer_id={customer.customer_id} error={exc!r}")

        self._dispatch(lambda: self.api.create_sale(order), on_success, on_error)

    def abort(self) -> None:
        """Cancel the sale; a non-empty cart is recorded as a cancelled sale first."""
        if self.submitting.get():
            self._notify("warning", "Sale in progress", "Wait for the current submission to finish.")
            return
        customer = self.customer.get()
        if customer is None or self.cart.is_empty():
            self._finish_abort()
            return

        order = OrderRequest.from_cart(customer, self.cart.lines.get())
        self.submitting.set(True)

        def on_recorded(sale: SaleConfirmation) -> None:
            self.submitting.set(False)
            self._notify("information", "Sale cancelled", "Cancelled sale recorded.")
            log_action("create", "sale", f"Cancelled sale recorded for customer '{customer.name}'.")
            self._finish_abort()

        def on_failed(exc: PosError) -> None:
            self.submitting.set(False)
            failure = BestEffortFailure(f"cancelled sale not recorded: {exc}")
            log_debug(f"abort_record_failed customer_id={customer.customer_id} error={failure!r}")
            self._finish_abort()

        self._dispatch(lambda: self.api.create_cancelled_sale(order), on_recorded, on_failed)

    def _finish_abort(self) -> None:
        if self.state.get() == SaleState.CUSTOMER_RESOLVED:
            self.state.set(SaleState.ABORTED)
        self.reset()

    def reset(self) -> None:
        """Tear down the whole transaction."""
        self._transaction += 1
        self._catalog_generation += 1
        self.debouncer.reset()
        self.customer.set(None)
        self.cart.clear()
        self.catalog.set(())
        self.results.set(())
        self.search_text.set("")
        self.searching.set(False)
        self.submitting.set(False)
        self.state.set(SaleState.NO_CUSTOMER)
        log_debug("sale_reset")
