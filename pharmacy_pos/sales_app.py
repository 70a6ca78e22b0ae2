"""Main Textual app class for the sale screen."""

from __future__ import annotations

from typing import Callable, TypeVar

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from pharmacy_pos.api import PharmacyApi
from pharmacy_pos.checkout import CheckoutOrchestrator, SaleState, as_pos_error
from pharmacy_pos.debug_log import log_debug
from pharmacy_pos.errors import PosError
from pharmacy_pos.models import CartLine, Medicine
from pharmacy_pos.quantity_modal import QuantityModal
from pharmacy_pos.rendering import format_cart_line, format_customer, format_medicine_label, format_money
from pharmacy_pos.tax_id_modal import TaxIdModal

T = TypeVar("T")


class SalesApp(App):
    """A Textual app for running one pharmacy sale at a time."""

    TITLE = "Pharmacy POS"
    SUB_TITLE = "Sales"

    CSS = """
    Screen {
        layout: vertical;
    }

    #customer-bar {
        height: 3;
        border: round $accent;
        padding: 0 1;
    }

    #main-layout {
        height: 1fr;
    }

    #cart-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #search-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 3;
    }

    #results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-total {
        height: 1;
        text-style: bold;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    search_query = reactive("")
    selected_index = reactive(0)
    line_selected_index = reactive(None)

    BINDINGS = [
        ("tab", "cycle_results(1)", "Next result"),
        ("up", "cycle_results(-1)", "Previous result"),
        ("down", "cycle_results(1)", "Next result"),
        ("enter", "add_selected", "Add to cart"),
        ("backspace", "backspace_query", "Delete query char"),
        Binding("ctrl+s", "finalize_sale", "Finalize sale", priority=True),
        Binding("ctrl+x", "abort_sale", "Cancel sale", priority=True),
        ("escape", "cancel_active_mode", "Exit search"),
        ("ctrl+c", "cancel_active_mode", "Exit search"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, api: PharmacyApi | None = None) -> None:
        super().__init__()
        self.orchestrator = CheckoutOrchestrator(
            api or PharmacyApi(),
            notify=self._notify_user,
            schedule=self.set_timer,
            dispatch=self._dispatch_worker,
        )
        log_debug("app_init")

    # -------------------- plumbing --------------------

    def _notify_user(self, severity: str, title: str, message: str) -> None:
        self.notify(message, title=title, severity=severity)

    def _dispatch_worker(
        self,
        call: Callable[[], T],
        on_success: Callable[[T], None],
        on_error: Callable[[PosError], None],
    ) -> None:
        """Run a backend call in a thread and hand its outcome back to the UI thread."""

        def work() -> None:
            try:
                result = call()
            except PosError as exc:
                self.call_from_thread(on_error, exc)
                return
            except Exception as exc:
                self.call_from_thread(on_error, as_pos_error(exc))
                return
            self.call_from_thread(on_success, result)

        self.run_worker(work, thread=True, group="api", exit_on_error=False)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="customer-bar")
        with Horizontal(id="main-layout"):
            with Vertical(id="cart-pane"):
                yield Static("Cart", classes="pane-title")
                yield Static("(cart is empty)", id="cart-list")
                yield Static(id="cart-total")
            with Vertical(id="search-pane"):
                yield Static(id="search-bar")
                yield Static(id="results")

    def on_mount(self) -> None:
        orchestrator = self.orchestrator
        orchestrator.customer.subscribe(lambda _: self._refresh_customer())
        orchestrator.state.subscribe(self._on_state_change)
        orchestrator.cart.lines.subscribe(lambda _: self._refresh_cart())
        orchestrator.cart.total_amount.subscribe(lambda _: self._refresh_total())
        orchestrator.results.subscribe(lambda _: self._refresh_search())
        orchestrator.searching.subscribe(lambda _: self._refresh_search_bar())
        orchestrator.submitting.subscribe(lambda _: self._refresh_customer())
        self._refresh_all()

    def _on_state_change(self, state: SaleState) -> None:
        log_debug(f"state_change state={state.value}")
        if state == SaleState.NO_CUSTOMER:
            self.input_state = "normal"
            self.search_query = ""
            self.selected_index = 0
            self.line_selected_index = None
        self._refresh_all()

    # -------------------- keys --------------------

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return

        if not event.is_printable or not event.character or len(event.character) != 1:
            return

        char = event.character
        if self.input_state == "active":
            self.search_query += char
            self.selected_index = 0
            self.orchestrator.search_input(self.search_query)
            self._refresh_search_bar()
            event.stop()
            return

        key = char.lower()
        handlers: dict[str, Callable[[], None]] = {
            "c": self._open_customer_lookup,
            "/": self._enter_search_mode,
            "j": lambda: self._move_line_selection(1),
            "k": lambda: self._move_line_selection(-1),
            "+": lambda: self._adjust_selected_quantity(1),
            "-": lambda: self._adjust_selected_quantity(-1),
            "x": self._open_quantity_for_selected_line,
            "d": self._remove_selected_line,
        }
        handler = handlers.get(key)
        if handler is None:
            return
        handler()
        event.stop()

    def action_cancel_active_mode(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state == "normal":
            return
        self.input_state = "normal"
        self._refresh_search()

    def action_cycle_results(self, delta: int) -> None:
        if isinstance(self.screen, ModalScreen) or self.input_state != "active":
            return
        results = self.orchestrator.results.get()
        if not results:
            self.selected_index = 0
        else:
            self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_results(results)

    def action_add_selected(self) -> None:
        if isinstance(self.screen, ModalScreen) or self.input_state != "active":
            return
        results = self.orchestrator.results.get()
        if not results or self.selected_index >= len(results):
            return
        medicine = results[self.selected_index]
        if self.orchestrator.cart.add(medicine) is not None:
            self._select_line(medicine.medicine_id)

    def action_backspace_query(self) -> None:
        if isinstance(self.screen, ModalScreen) or self.input_state != "active":
            return
        if not self.search_query:
            return
        self.search_query = self.search_query[:-1]
        self.selected_index = 0
        self.orchestrator.search_input(self.search_query)
        self._refresh_search_bar()

    def action_finalize_sale(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        log_debug(f"finalize_requested lines={len(self.orchestrator.cart)}")
        self.orchestrator.finalize()

    def action_abort_sale(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        log_debug(f"abort_requested lines={len(self.orchestrator.cart)}")
        self.orchestrator.abort()

    # -------------------- helpers --------------------

    def _open_customer_lookup(self) -> None:
        if self.orchestrator.state.get() != SaleState.NO_CUSTOMER:
            self.notify("Finish or cancel the current sale first.", title="Sale in progress", severity="warning")
            return

        def on_dismiss(tax_id: str | None) -> None:
            if tax_id:
                self.orchestrator.resolve_customer(tax_id)

        self.push_screen(TaxIdModal(), on_dismiss)

    def _enter_search_mode(self) -> None:
        if self.orchestrator.customer.get() is None:
            self.notify("Look up a customer before searching.", title="No customer", severity="warning")
            return
        self.input_state = "active"
        self.search_query = self.orchestrator.search_text.get()
        self.selected_index = 0
        self._refresh_search()

    def _lines(self) -> tuple[CartLine, ...]:
        return self.orchestrator.cart.lines.get()

    def _selected_line(self) -> CartLine | None:
        lines = self._lines()
        if self.line_selected_index is None or not (0 <= self.line_selected_index < len(lines)):
            return None
        return lines[self.line_selected_index]

    def _select_line(self, medicine_id: str) -> None:
        for idx, line in enumerate(self._lines()):
            if line.medicine_id == medicine_id:
                self.line_selected_index = idx
                break
        self._refresh_cart()

    def _move_line_selection(self, delta: int) -> None:
        lines = self._lines()
        if not lines:
            return
        if self.line_selected_index is None:
            self.line_selected_index = 0 if delta > 0 else len(lines) - 1
        else:
            self.line_selected_index = (self.line_selected_index + delta) % len(lines)
        self._refresh_cart()

    def _adjust_selected_quantity(self, delta: int) -> None:
        line = self._selected_line()
        if line is None:
            return
        self.orchestrator.cart.set_quantity(line.medicine_id, line.quantity + delta)

    def _open_quantity_for_selected_line(self) -> None:
        line = self._selected_line()
        if line is None:
            return

        def on_dismiss(quantity: int | None) -> None:
            if quantity is not None:
                self.orchestrator.cart.set_quantity(line.medicine_id, quantity)

        self.push_screen(QuantityModal(line), on_dismiss)

    def _remove_selected_line(self) -> None:
        line = self._selected_line()
        if line is None:
            return
        self.orchestrator.cart.remove(line.medicine_id)

    # -------------------- rendering --------------------

    def _refresh_all(self) -> None:
        self._refresh_customer()
        self._refresh_cart()
        self._refresh_total()
        self._refresh_search()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            start = max(0, selected - rows // 2)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_customer(self) -> None:
        try:
            bar = self.query_one("#customer-bar", Static)
        except NoMatches:
            return
        text = format_customer(self.orchestrator.customer.get())
        if self.orchestrator.submitting.get():
            text.append("  submitting...", style="italic")
        bar.update(text)

    def _refresh_total(self) -> None:
        try:
            total_widget = self.query_one("#cart-total", Static)
        except NoMatches:
            return
        total_widget.update(f"Total: {format_money(self.orchestrator.cart.total_amount.get())}")

    def _refresh_cart(self) -> None:
        try:
            cart_widget = self.query_one("#cart-list", Static)
        except NoMatches:
            return
        lines = self._lines()
        if not lines:
            self.line_selected_index = None
            cart_widget.update("(cart is empty)")
            return

        if self.line_selected_index is not None and self.line_selected_index >= len(lines):
            self.line_selected_index = len(lines) - 1

        start, end = self._window_bounds(len(lines), self._visible_rows(cart_widget), self.line_selected_index)

        text = Text()
        if start > 0:
            text.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                text.append("\n")
            pointer = "➤ " if idx == self.line_selected_index else "  "
            text.append(pointer)
            text.append_text(format_cart_line(lines[idx]))
        if end < len(lines):
            text.append("\n⋮", style="dim")

        cart_widget.update(text)

    def _refresh_search(self) -> None:
        self._refresh_search_bar()
        self._refresh_results(self.orchestrator.results.get())

    def _refresh_search_bar(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            if self.orchestrator.customer.get() is None:
                bar.update("C: customer lookup. Ctrl+Q quit.")
            else:
                bar.update("/ search. J/K select, +/- qty, X set qty, D remove.\nCtrl+S finalize. Ctrl+X cancel sale.")
            return

        text = Text()
        text.append("Search", style="bold #0b1f0f on #5fbf72")
        text.append(f": {self.search_query}")
        if self.orchestrator.searching.get():
            text.append("  searching...", style="dim")
        bar.update(text)

    def _refresh_results(self, results: tuple[Medicine, ...]) -> None:
        try:
            results_widget = self.query_one("#results", Static)
        except NoMatches:
            return
        if self.orchestrator.customer.get() is None:
            results_widget.update("")
            return

        if not results:
            results_widget.update("No results")
            return

        if self.selected_index >= len(results):
            self.selected_index = 0

        active = self.input_state == "active"
        start, end = self._window_bounds(len(results), self._visible_rows(results_widget), self.selected_index)

        text = Text()
        if start > 0:
            text.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                text.append("\n")
            pointer = "➤ " if active and idx == self.selected_index else "  "
            text.append(pointer)
            text.append_text(format_medicine_label(results[idx]))
        if end < len(results):
            text.append("\n⋮", style="dim")

        results_widget.update(text)
