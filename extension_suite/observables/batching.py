from __future__ import annotations

import logging
import queue
from datetime import timedelta
from enum import Enum, auto
from typing import Callable, List, Optional, TypeVar, Union

import reactivex
from reactivex import Observable, abc
from reactivex.disposable import CompositeDisposable, Disposable
from reactivex.scheduler import TimeoutScheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")

Predicate = Callable[[T], bool]


class BatchType(Enum):
    INITIAL = auto()  # First batch after a start marker
    UPDATE = auto()  # A single item that arrived outside any start/end pair


class Batch(List[T]):
    """An ordered list of items tagged with the kind of batch it is."""

    def __init__(self, batch_type: BatchType, *items: T) -> None:
        super().__init__(items)
        self._type = batch_type

    @property
    def type(self) -> BatchType:
        return self._type

    def __repr__(self) -> str:
        return f"Batch({self._type.name}, {list.__repr__(self)})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Batch) and other.type is not self._type:
            return False
        return list.__eq__(self, other)

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result


def batch(is_start: Predicate, is_end: Predicate) -> Callable[[Observable[T]], Observable[Batch[T]]]:
    """
    Group items between start and end markers into Batches.

    * A start marker opens an empty INITIAL batch (an already open batch is
      discarded).
    * An end marker emits the open batch and closes it.
    * Any other item is appended to the open batch, or emitted straight away
      as a one-item UPDATE batch when nothing is open.

    Markers are never part of a batch. An open batch is dropped when the
    source completes or fails. Exceptions raised by the predicates propagate
    to whoever pushed the item.
    """

    def _batch(source: Observable[T]) -> Observable[Batch[T]]:
        def subscribe(observer: abc.ObserverBase[Batch[T]], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            buffer: Optional[Batch[T]] = None

            def on_next(item: T) -> None:
                nonlocal buffer
                if is_start(item):
                    if buffer is not None:
                        logger.debug(f"Start marker received with {len(buffer)} items still open, discarding them")
                    buffer = Batch(BatchType.INITIAL)
                    return

                if is_end(item):
                    if buffer is not None:
                        completed, buffer = buffer, None
                        observer.on_next(completed)
                    return

                if buffer is None:
                    observer.on_next(Batch(BatchType.UPDATE, item))
                else:
                    buffer.append(item)

            return source.subscribe(on_next, observer.on_error, observer.on_completed, scheduler=scheduler)

        return reactivex.create(subscribe)

    return _batch


def batch_only_within(is_start: Predicate, is_end: Predicate) -> Callable[[Observable[T]], Observable[List[T]]]:
    """
    Like ``batch`` but emits plain lists and drops items outside any markers.
    """

    def _batch_only_within(source: Observable[T]) -> Observable[List[T]]:
        def subscribe(observer: abc.ObserverBase[List[T]], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            buffer: Optional[List[T]] = None

            def on_next(item: T) -> None:
                nonlocal buffer
                if is_start(item):
                    buffer = []
                    return

                if is_end(item):
                    if buffer is not None:
                        completed, buffer = buffer, None
                        observer.on_next(completed)
                    return

                if buffer is not None:
                    buffer.append(item)

            return source.subscribe(on_next, observer.on_error, observer.on_completed, scheduler=scheduler)

        return reactivex.create(subscribe)

    return _batch_only_within


def ignore_between(is_start: Predicate, is_end: Predicate) -> Callable[[Observable[T]], Observable[T]]:
    """Drop a start marker, the end marker and everything between them."""

    def _ignore_between(source: Observable[T]) -> Observable[T]:
        def subscribe(observer: abc.ObserverBase[T], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            taking = True

            def on_next(item: T) -> None:
                nonlocal taking
                if taking and is_start(item):
                    taking = False
                if taking:
                    observer.on_next(item)
                elif is_end(item):
                    taking = True

            return source.subscribe(on_next, observer.on_error, observer.on_completed, scheduler=scheduler)

        return reactivex.create(subscribe)

    return _ignore_between


def skip_until_item(predicate: Predicate) -> Callable[[Observable[T]], Observable[T]]:
    """Drop items up to and including the first one matching ``predicate``."""

    def _skip_until_item(source: Observable[T]) -> Observable[T]:
        def subscribe(observer: abc.ObserverBase[T], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            taking = False

            def on_next(item: T) -> None:
                nonlocal taking
                if taking:
                    observer.on_next(item)
                elif predicate(item):
                    taking = True

            return source.subscribe(on_next, observer.on_error, observer.on_completed, scheduler=scheduler)

        return reactivex.create(subscribe)

    return _skip_until_item


def _drain(pending: "queue.SimpleQueue[T]") -> List[T]:
    items: List[T] = []
    while True:
        try:
            items.append(pending.get_nowait())
        except queue.Empty:
            return items


def non_blocking_buffer(
    period: Union[float, timedelta],
    scheduler: Optional[abc.SchedulerBase] = None,
) -> Callable[[Observable[T]], Observable[List[T]]]:
    """
    Emit everything received during each ``period`` as one list, on a timer.

    The source never blocks: items are put on a thread-safe queue and every
    tick drains the queue into a fresh list, which is emitted even when empty.
    Each item therefore ends up in exactly one window, and an emitted list is
    never touched again. Ticks run on ``scheduler`` (TimeoutScheduler by
    default), which may be a different thread from the one delivering items.
    """

    def _non_blocking_buffer(source: Observable[T]) -> Observable[List[T]]:
        def subscribe(observer: abc.ObserverBase[List[T]], scheduler_: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
            pending: "queue.SimpleQueue[T]" = queue.SimpleQueue()
            timer_scheduler = scheduler or TimeoutScheduler.singleton()

            timer = reactivex.interval(period, scheduler=timer_scheduler).subscribe(
                lambda _: observer.on_next(_drain(pending)),
                scheduler=timer_scheduler,
            )
            subscription = source.subscribe(pending.put, observer.on_error, observer.on_completed, scheduler=scheduler_)

            def clear() -> None:
                dropped = len(_drain(pending))
                if dropped:
                    logger.debug(f"non_blocking_buffer disposed with {dropped} buffered items, discarding them")

            return CompositeDisposable(timer, subscription, Disposable(clear))

        return reactivex.create(subscribe)

    return _non_blocking_buffer
