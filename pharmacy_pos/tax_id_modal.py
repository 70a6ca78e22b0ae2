"""Customer CPF entry modal screen."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from pharmacy_pos.validation import TAX_ID_DIGITS, TAX_ID_FIELD, format_tax_id, tax_id_digits, validate_tax_id


class TaxIdModal(ModalScreen[str | None]):
    """Prompt for the customer's CPF; dismisses with the masked value."""

    CSS = """
    TaxIdModal {
        align: center middle;
        background: $background 60%;
    }

    #tax-id-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #tax-id-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #tax-id-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #tax-id-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #tax-id-help {
        color: #dddddd;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self.value = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="tax-id-dialog"):
            yield Static("Customer CPF", id="tax-id-title")
            yield Static(id="tax-id-value")
            yield Static(id="tax-id-error")
            yield Static("Digits only. Enter confirm. Backspace delete. Esc cancel.", id="tax-id-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            digits = tax_id_digits(self.value)
            if digits:
                self.value = format_tax_id(digits[:-1])
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character and event.character.isdigit():
            digits = tax_id_digits(self.value)
            if len(digits) < TAX_ID_DIGITS:
                self.value = format_tax_id(digits + event.character)
            self.error = ""
            self._refresh_content()
            event.stop()

    def _confirm(self) -> None:
        result = validate_tax_id(self.value)
        if not result.valid:
            self.error = result.field_errors[TAX_ID_FIELD]
            self._refresh_content()
            return
        self.dismiss(self.value)

    def _refresh_content(self) -> None:
        self.query_one("#tax-id-value", Static).update(self.value or "000.000.000-00")
        self.query_one("#tax-id-error", Static).update(self.error or "")
