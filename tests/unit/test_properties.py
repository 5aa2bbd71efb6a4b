import threading

import pytest

from extension_suite.core.notifications import (
    CollectionChangedAction,
    NotifyPropertyChanged,
    ObservableList,
    PropertyChangedEvent,
)
from extension_suite.observables.properties import (
    DEFAULT_ACCESSOR_CACHE,
    PropertyAccessorCache,
    observe_collection,
    observe_properties,
    observe_property,
)


class Ticker(NotifyPropertyChanged):
    def __init__(self, symbol, price):
        super().__init__()
        self.symbol = symbol
        self._price = price

    @property
    def price(self):
        return self._price

    @price.setter
    def price(self, value):
        self._price = value
        self.raise_property_changed("price")


@pytest.fixture
def ticker():
    return Ticker("BTC/USD", 100.0)


@pytest.fixture
def cache():
    """Isolated accessor cache so tests do not depend on process-wide state."""
    return PropertyAccessorCache()


def test_observe_property_emits_on_matching_notification(ticker, cache):
    received = []
    observe_property(ticker, "price", cache=cache).subscribe(received.append)

    ticker.price = 101.0
    ticker.price = 102.5

    assert received == [101.0, 102.5]


def test_observe_property_without_initial_value_waits_for_change(ticker, cache):
    received = []
    observe_property(ticker, "price", observe_initial_value=False, cache=cache).subscribe(received.append)

    assert received == []


def test_observe_property_with_initial_value_emits_on_subscribe(ticker, cache):
    received = []
    observe_property(ticker, "price", observe_initial_value=True, cache=cache).subscribe(received.append)

    assert received == [100.0]

    ticker.price = 99.0
    assert received == [100.0, 99.0]


def test_observe_property_ignores_other_properties(ticker, cache):
    received = []
    observe_property(ticker, "price", cache=cache).subscribe(received.append)

    ticker.set_and_notify("symbol", "ETH/USD")

    assert received == []


def test_dispose_removes_handler(ticker, cache):
    received = []
    subscription = observe_property(ticker, "price", cache=cache).subscribe(received.append)
    subscription.dispose()
    subscription.dispose()  # second release is a no-op

    ticker.price = 1.0

    assert received == []
    assert len(ticker._property_changed) == 0


def test_explicit_accessor_is_used_and_not_cached(ticker, cache):
    received = []
    observe_property(ticker, "price", accessor=lambda t: t.price * 2, cache=cache).subscribe(received.append)

    ticker.price = 10.0

    assert received == [20.0]
    assert (Ticker, "price") not in cache


def test_explicit_accessor_wins_over_cached_default(ticker, cache):
    plain = []
    doubled = []
    observe_property(ticker, "price", cache=cache).subscribe(plain.append)
    observe_property(ticker, "price", accessor=lambda t: t.price * 2, cache=cache).subscribe(doubled.append)

    ticker.price = 10.0

    assert plain == [10.0]
    assert doubled == [20.0]


def test_failing_initial_read_leaves_no_handler_attached(ticker, cache):
    calls = {"count": 0}

    def flaky(source):
        calls["count"] += 1
        if calls["count"] == 1:
            raise LookupError("not ready")
        return source.price

    errors = []
    observe_property(
        ticker, "price", accessor=flaky, observe_initial_value=True, cache=cache
    ).subscribe(on_error=errors.append)

    assert len(errors) == 1
    assert isinstance(errors[0], LookupError)
    assert len(ticker._property_changed) == 0


def test_accessor_resolved_once_per_type_and_property(cache):
    first = Ticker("A", 1.0)
    second = Ticker("B", 2.0)

    observe_property(first, "price", cache=cache)
    accessor = cache.get_accessor(Ticker, "price")
    observe_property(second, "price", cache=cache)

    assert len(cache) == 1
    assert cache.get_accessor(Ticker, "price") is accessor


def test_default_cache_is_used_when_none_given(ticker):
    observe_property(ticker, "price")

    assert (Ticker, "price") in DEFAULT_ACCESSOR_CACHE


def test_unknown_property_raises(ticker, cache):
    with pytest.raises(ValueError):
        observe_property(ticker, "volume", cache=cache)


def test_source_without_notifications_raises(cache):
    class Plain:
        price = 1.0

    with pytest.raises(TypeError):
        observe_property(Plain(), "price", cache=cache)


def test_accessor_exception_propagates_to_notifier(ticker, cache):
    def broken(_):
        raise LookupError("no price")

    observe_property(ticker, "price", accessor=broken, cache=cache).subscribe(lambda _: None)

    with pytest.raises(LookupError):
        ticker.price = 5.0


def test_concurrent_resolution_returns_a_single_accessor(cache):
    workers = 8
    barrier = threading.Barrier(workers)
    results = []

    def resolve():
        barrier.wait()
        results.append(cache.get_accessor(Ticker, "price", lambda: (lambda t: t.price)))

    threads = [threading.Thread(target=resolve) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == workers
    assert all(result is results[0] for result in results)
    assert len(cache) == 1


def test_observe_properties_streams_every_event(ticker):
    events = []
    observe_properties(ticker).subscribe(events.append)

    ticker.price = 3.0
    ticker.set_and_notify("symbol", "SOL/USD")

    assert events == [PropertyChangedEvent("price"), PropertyChangedEvent("symbol")]


def test_set_and_notify_skips_unchanged_values(ticker):
    events = []
    observe_properties(ticker).subscribe(events.append)

    ticker.set_and_notify("symbol", "BTC/USD")

    assert events == []


def test_observe_collection_reports_changes():
    items = ObservableList([1])
    events = []
    subscription = observe_collection(items).subscribe(events.append)

    items.append(2)
    items.remove(1)
    items.clear()
    subscription.dispose()
    items.append(3)

    assert [e.action for e in events] == [
        CollectionChangedAction.ADD,
        CollectionChangedAction.REMOVE,
        CollectionChangedAction.RESET,
    ]
    assert events[0].new_items == (2,)
    assert events[1].old_items == (1,)
    assert events[2].old_items == (2,)
    assert list(items) == [3]
