from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable, Optional, TypeVar, Union

import reactivex
from reactivex import Observable, abc
from reactivex.disposable import CompositeDisposable, SerialDisposable

from extension_suite import config

logger = logging.getLogger(__name__)

T = TypeVar("T")

Delay = Union[float, timedelta]
Backoff = Callable[[Delay], Delay]


def back_off_retry(
    backoff: Backoff,
    scheduler: abc.SchedulerBase,
    initial_delay: Delay = 0.0,
) -> Callable[[Observable[T]], Observable[T]]:
    """
    Resubscribe to a failing source, waiting longer after each failure.

    After a failure the source is resubscribed once the current delay has
    elapsed (``initial_delay`` the first time), and the delay for the next
    failure becomes ``backoff(current)``. Any value from the source resets
    the delay to ``initial_delay``.

    Errors are never passed downstream; completion is, and ends the retries.
    Only one pending timer and one source subscription exist at a time: a new
    failure replaces both. Disposing the returned subscription cancels the
    pending timer and the active source subscription.

    Args:
        backoff: Maps the previous delay to the next one.
        scheduler: Scheduler the resubscriptions are timed on.
        initial_delay: Delay used for the first failure and after a reset.
    """

    def _back_off_retry(source: Observable[T]) -> Observable[T]:
        def subscribe(observer: abc.ObserverBase[T], scheduler_: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            subscription = SerialDisposable()
            timer = SerialDisposable()
            delay = initial_delay
            attempt = 0

            def on_next(value: T) -> None:
                nonlocal delay, attempt
                delay = initial_delay
                attempt = 0
                observer.on_next(value)

            def on_error(error: Exception) -> None:
                nonlocal delay, attempt
                current = delay
                delay = backoff(current)
                attempt += 1
                logger.warning(f"Source failed with error: {error!r}. Attempt {attempt}, resubscribing in {current}")
                timer.disposable = scheduler.schedule_relative(current, resubscribe)

            def resubscribe(_: abc.SchedulerBase, __: Optional[object] = None) -> None:
                logger.debug(f"Resubscribing to source (attempt {attempt})")
                subscription.disposable = source.subscribe(on_next, on_error, observer.on_completed, scheduler=scheduler_)

            subscription.disposable = source.subscribe(on_next, on_error, observer.on_completed, scheduler=scheduler_)
            return CompositeDisposable(subscription, timer)

        return reactivex.create(subscribe)

    return _back_off_retry


def exponential_backoff(
    factor: float = config.RETRY_BACKOFF_FACTOR,
    minimum: float = config.RETRY_MIN_DELAY_SECONDS,
    maximum: float = config.RETRY_MAX_DELAY_SECONDS,
) -> Callable[[float], float]:
    """
    Build a backoff function: zero becomes ``minimum``, anything else is
    multiplied by ``factor``, capped at ``maximum``.
    """
    if factor < 1:
        raise ValueError("factor must be >= 1")
    if minimum < 0 or maximum < minimum:
        raise ValueError("expected 0 <= minimum <= maximum")

    def _next(previous: float) -> float:
        if previous <= 0:
            return minimum
        return min(previous * factor, maximum)

    return _next


def backoff_from_settings(settings: "config.RetrySettings") -> Callable[[float], float]:
    return exponential_backoff(settings.factor, settings.min_delay, settings.max_delay)
