"""Entry point for the pharmacy POS Textual app."""

from __future__ import annotations

from pharmacy_pos.sales_app import SalesApp


def main() -> None:
    """Run the Textual application."""
    SalesApp().run()


if __name__ == "__main__":
    main()
