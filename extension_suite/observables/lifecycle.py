import logging
import time
from datetime import timedelta
from typing import Any, Callable, Optional, TypeVar

import reactivex
from reactivex import Observable, abc
from reactivex import operators as ops
from reactivex.disposable import CompositeDisposable, Disposable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def never_complete() -> Callable[[Observable[T]], Observable[T]]:
    """Pass everything through but swallow completion (errors still terminate)."""
    return lambda source: reactivex.concat(source, reactivex.never())


def on_subscribe(subscription_action: Callable[[], Any]) -> Callable[[Observable[T]], Observable[T]]:
    """Run ``subscription_action`` each time an observer subscribes, before the source is subscribed."""

    def _on_subscribe(source: Observable[T]) -> Observable[T]:
        def subscribe(observer: abc.ObserverBase[T], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            subscription_action()
            return source.subscribe(observer, scheduler=scheduler)

        return reactivex.create(subscribe)

    return _on_subscribe


def on_unsubscribed(unsubscribed_action: Callable[[], Any]) -> Callable[[Observable[T]], Observable[T]]:
    """Run ``unsubscribed_action`` once when the subscription is disposed."""

    def _on_unsubscribed(source: Observable[T]) -> Observable[T]:
        def subscribe(observer: abc.ObserverBase[T], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            return CompositeDisposable(source.subscribe(observer, scheduler=scheduler), Disposable(unsubscribed_action))

        return reactivex.create(subscribe)

    return _on_unsubscribed


def add_disposables(*disposables: abc.DisposableBase) -> Callable[[Observable[T]], Observable[T]]:
    """Tie the lifetime of ``disposables`` to the subscription."""

    def _add_disposables(source: Observable[T]) -> Observable[T]:
        def subscribe(observer: abc.ObserverBase[T], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            return CompositeDisposable(source.subscribe(observer, scheduler=scheduler), *disposables)

        return reactivex.create(subscribe)

    return _add_disposables


def do_error(on_error_action: Callable[[Exception], Any]) -> Callable[[Observable[T]], Observable[T]]:
    return ops.do_action(on_error=on_error_action)


def every_nth_message(nth_message_count: int, callback: Callable[[int], Any]) -> Callable[[Observable[T]], Observable[T]]:
    """Call ``callback(count)`` every ``nth_message_count`` items, counted per subscription."""
    if nth_message_count <= 0:
        raise ValueError("nth_message_count must be positive")

    def _every_nth_message(source: Observable[T]) -> Observable[T]:
        def subscribe(observer: abc.ObserverBase[T], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            counter = 0

            def count(_: T) -> None:
                nonlocal counter
                counter += 1
                if counter % nth_message_count == 0:
                    callback(counter)

            return source.pipe(ops.do_action(count)).subscribe(observer, scheduler=scheduler)

        return reactivex.create(subscribe)

    return _every_nth_message


def time_for_first_message(
    first_message_callback: Callable[[timedelta], Any],
    predicate: Optional[Callable[[T], bool]] = None,
) -> Callable[[Observable[T]], Observable[T]]:
    """
    Report how long after subscribing the first (matching) item arrived.

    The clock starts at subscription; ``first_message_callback`` gets the
    elapsed time once, for the first item satisfying ``predicate`` (any item
    when no predicate is given).
    """

    def _time_for_first_message(source: Observable[T]) -> Observable[T]:
        def subscribe(observer: abc.ObserverBase[T], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            started: Optional[float] = time.perf_counter()

            def check(item: T) -> None:
                nonlocal started
                if started is not None and (predicate is None or predicate(item)):
                    elapsed = timedelta(seconds=time.perf_counter() - started)
                    started = None
                    logger.debug(f"First message after {elapsed.total_seconds():.6f}s")
                    first_message_callback(elapsed)

            return source.pipe(ops.do_action(check)).subscribe(observer, scheduler=scheduler)

        return reactivex.create(subscribe)

    return _time_for_first_message


def to_unit() -> Callable[[Observable[Any]], Observable[None]]:
    """Map every item to ``None``; only the fact that something happened is kept."""
    return ops.map(lambda _: None)
