from pharmacy_pos.state import Observable


def test_subscribers_see_changes_only():
    value = Observable(1)
    seen = []
    value.subscribe(seen.append)
    value.set(1)
    value.set(2)
    value.update(lambda v: v * 10)
    assert seen == [2, 20]
    assert value.get() == 20


def test_unsubscribe_stops_notifications():
    value = Observable("a")
    seen = []
    unsubscribe = value.subscribe(seen.append)
    value.set("b")
    unsubscribe()
    unsubscribe()
    value.set("c")
    assert seen == ["b"]
