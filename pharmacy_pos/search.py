"""Client-side medicine search and debounced query dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Protocol

from pharmacy_pos.catalog import fold_text, sort_by_name
from pharmacy_pos.config import SEARCH_DEBOUNCE_SECONDS, SEARCH_MIN_QUERY_LENGTH
from pharmacy_pos.models import Medicine


def is_text_query(query: str | None) -> bool:
    """Whether ``query`` is long enough to filter by text."""
    return len((query or "").strip()) >= SEARCH_MIN_QUERY_LENGTH


def matches(record: Medicine, folded_query: str) -> bool:
    return folded_query in fold_text(record.name) or folded_query in fold_text(record.category_name)


def search(query: str | None, pool: Iterable[Medicine]) -> list[Medicine]:
    """Filter ``pool`` by name or category name and sort by name.

    Queries shorter than the minimum length return the whole pool.
    """
    if not is_text_query(query):
        return sort_by_name(pool)
    folded = fold_text((query or "").strip())
    return sort_by_name(record for record in pool if matches(record, folded))


class TimerHandle(Protocol):
    def stop(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


@dataclass(frozen=True)
class SearchTicket:
    """Identifies one dispatched query; later tickets supersede earlier ones."""

    sequence: int
    query: str


class SearchDebouncer:
    """Coalesce keystrokes into query dispatches.

    A dispatch happens only after ``delay`` seconds without new input, and
    never twice in a row for the same query. Results must be checked with
    ``is_current`` before being applied, so a slow response for an older
    query cannot overwrite a newer one.
    """

    def __init__(
        self,
        schedule: Scheduler,
        on_dispatch: Callable[[SearchTicket], None],
        delay: float = SEARCH_DEBOUNCE_SECONDS,
    ) -> None:
        self._schedule = schedule
        self._on_dispatch = on_dispatch
        self.delay = delay
        self._timer: TimerHandle | None = None
        self._last_query: str | None = None
        self._sequence = 0

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def input_changed(self, text: str) -> None:
        self._cancel_timer()
        query = (text or "").strip()
        self._timer = self._schedule(self.delay, lambda: self._fire(query))

    def is_current(self, ticket: SearchTicket) -> bool:
        return ticket.sequence == self._sequence

    def reset(self) -> None:
        """Drop pending input and invalidate every issued ticket."""
        self._cancel_timer()
        self._last_query = None
        self._sequence += 1

    def _fire(self, query: str) -> None:
        self._timer = None
        if query == self._last_query:
            return
        self._last_query = query
        self._sequence += 1
        self._on_dispatch(SearchTicket(self._sequence, query))

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
