"""Cart line quantity entry modal screen."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pharmacy_pos.models import CartLine

_MAX_DIGITS = 4


class QuantityModal(ModalScreen[int | None]):
    """Prompt for a new quantity; zero removes the line."""

    CSS = """
    QuantityModal {
        align: center middle;
        background: $background 60%;
    }

    #quantity-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #quantity-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #quantity-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #quantity-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }
    """

    def __init__(self, line: CartLine) -> None:
        super().__init__()
        self.line = line
        self.value = str(line.quantity)
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="quantity-dialog"):
            yield Static(f"Quantity: {self.line.medicine.name}", id="quantity-title")
            yield Static(f"{self.line.medicine.stock} in stock. 0 removes the item.")
            yield Static(id="quantity-value")
            yield Static(id="quantity-error")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "q", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            if not self.value:
                self.error = "Quantity is required."
                self._refresh_content()
            else:
                self.dismiss(int(self.value))
            event.stop()
            return

        if event.key == "backspace":
            self.value = self.value[:-1]
            self.error = ""
            self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character and event.character.isdigit():
            if len(self.value) < _MAX_DIGITS:
                self.value += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _refresh_content(self) -> None:
        self.query_one("#quantity-value", Static).update(self.value)
        self.query_one("#quantity-error", Static).update(self.error)
