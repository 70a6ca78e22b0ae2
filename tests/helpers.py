from datetime import date
from decimal import Decimal

from pharmacy_pos.models import Category, Customer, Medicine

TODAY = date(2025, 6, 15)


def make_medicine(medicine_id="A", name="Aspirin", price="10", stock=5, active=True, expiry=None, category=None):
    return Medicine(
        medicine_id=medicine_id,
        name=name,
        price=Decimal(price),
        stock=stock,
        active=active,
        expiry=expiry,
        category=Category("c1", category) if category else None,
    )


def make_customer(customer_id="cust-1", name="Maria Silva", tax_id="123.456.789-09"):
    return Customer(customer_id=customer_id, name=name, tax_id=tax_id)


class Notifications:
    """Collects notify(severity, title, message) calls."""

    def __init__(self):
        self.calls = []

    def __call__(self, severity, title, message):
        self.calls.append((severity, title, message))

    def titles(self):
        return [title for _, title, _ in self.calls]


class _FakeTimer:
    def __init__(self, scheduler, due, callback):
        self.scheduler = scheduler
        self.due = due
        self.callback = callback
        self.stopped = False

    def stop(self):
        self.stopped = True


class FakeScheduler:
    """Manual clock standing in for App.set_timer."""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def __call__(self, delay, callback):
        timer = _FakeTimer(self, self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds):
        self.now += seconds
        due = [t for t in self.timers if not t.stopped and t.due <= self.now + 1e-9]
        for timer in due:
            self.timers.remove(timer)
            timer.callback()


class DeferredDispatch:
    """Queues remote calls so tests control when each one completes."""

    def __init__(self):
        self.pending = []

    def __call__(self, call, on_success, on_error):
        self.pending.append((call, on_success, on_error))

    def complete(self, index=0):
        call, on_success, on_error = self.pending.pop(index)
        on_success(call())

    def fail(self, exc, index=0):
        _, _, on_error = self.pending.pop(index)
        on_error(exc)
