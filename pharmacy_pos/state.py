"""Observable value holder shared by the sale flow and the UI."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class Observable(Generic[T]):
    """A value with change notification.

    Subscribers are called with the new value after every ``set`` that
    actually changes it, in subscription order.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._subscribers: list[Callable[[T], None]] = []

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def update(self, fn: Callable[[T], T]) -> None:
        self.set(fn(self._value))

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a change callback and return a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
