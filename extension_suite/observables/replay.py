from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, TypeVar

import reactivex
from reactivex import Observable, abc
from reactivex.disposable import Disposable, SingleAssignmentDisposable
from reactivex.notification import Notification, OnCompleted, OnError, OnNext
from reactivex.observable.connectableobservable import ConnectableObservable
from reactivex.subject import ReplaySubject, Subject

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReplayOneSubject(Observable[T], abc.SubjectBase[T]):
    """
    Replays the latest value to late subscribers, but never a failure.

    A plain ``ReplaySubject(1)`` caches the error as well, so once the source
    fails every later subscriber (including a retry) fails immediately. Here
    the one-slot buffer is thrown away after the error is delivered and a new,
    empty one takes its place.
    """

    def __init__(self) -> None:
        super().__init__()
        self._stream: ReplaySubject[T] = ReplaySubject(1)

    def _subscribe_core(
        self,
        observer: abc.ObserverBase[T],
        scheduler: Optional[abc.SchedulerBase] = None,
    ) -> abc.DisposableBase:
        with self.lock:
            stream = self._stream
        return stream.subscribe(observer, scheduler=scheduler)

    def on_next(self, value: T) -> None:
        self._stream.on_next(value)

    def on_error(self, error: Exception) -> None:
        with self.lock:
            stream = self._stream
            self._stream = ReplaySubject(1)
        logger.debug(f"ReplayOneSubject resetting buffer after error: {error!r}")
        stream.on_error(error)
        stream.dispose()

    def on_completed(self) -> None:
        self._stream.on_completed()


class ReplayUntilSubscribedSubject(Observable[T], abc.SubjectBase[T]):
    """
    Buffers everything until the first subscriber arrives, then goes live.

    The first subscriber gets the buffered history, replayed synchronously
    while it subscribes, followed by live values. After that the buffer is
    sealed and dropped; every subscriber, the first included, is fed from the
    live subject only. A terminal notification that arrived before the first
    subscriber is replayed after the history.
    """

    def __init__(self) -> None:
        super().__init__()
        self._subject: Subject[T] = Subject()
        self._history: Optional[List[Notification[T]]] = []

    @property
    def is_subscribed(self) -> bool:
        return self._history is None

    def _subscribe_core(
        self,
        observer: abc.ObserverBase[T],
        scheduler: Optional[abc.SchedulerBase] = None,
    ) -> abc.DisposableBase:
        with self.lock:
            history, self._history = self._history, None
            if history is not None:
                logger.debug(f"First subscriber attached, replaying {len(history)} buffered notifications")
                for notification in history:
                    notification.accept(observer)
                if history and history[-1].kind != "N":
                    return Disposable()

            # Registered before the lock is released so no live value slips past.
            return self._subject.subscribe(observer, scheduler=scheduler)

    def _buffer(self, notification: Notification[T]) -> bool:
        with self.lock:
            if self._history is None:
                return False
            self._history.append(notification)
            return True

    def on_next(self, value: T) -> None:
        if not self._buffer(OnNext(value)):
            self._subject.on_next(value)

    # Terminal notifications also go live so subscribers after the first see them.
    def on_error(self, error: Exception) -> None:
        self._buffer(OnError(error))
        self._subject.on_error(error)

    def on_completed(self) -> None:
        self._buffer(OnCompleted())
        self._subject.on_completed()


def replay_one() -> Callable[[Observable[T]], ConnectableObservable[T]]:
    """Multicast through a ReplayOneSubject. Call ``connect()`` to start the source."""

    def _replay_one(source: Observable[T]) -> ConnectableObservable[T]:
        return ConnectableObservable(source, ReplayOneSubject())

    return _replay_one


def replay_until_subscribed() -> Callable[[Observable[T]], ConnectableObservable[T]]:
    """Multicast through a ReplayUntilSubscribedSubject. Call ``connect()`` to start the source."""

    def _replay_until_subscribed(source: Observable[T]) -> ConnectableObservable[T]:
        return ConnectableObservable(source, ReplayUntilSubscribedSubject())

    return _replay_until_subscribed


def connect_now(stream: ConnectableObservable[T], subscription: SingleAssignmentDisposable) -> Observable[T]:
    """Connect ``stream`` right away, storing the connection in ``subscription``."""
    subscription.disposable = stream.connect()
    return stream


def lazily_connect(stream: ConnectableObservable[T], future_subscription: SingleAssignmentDisposable) -> Observable[T]:
    """
    Connect ``stream`` when the first observer subscribes, and only then.

    The connection is stored in ``future_subscription``. If that holder has
    already been disposed by the time the first observer arrives, the stream
    is never connected.
    """
    connected = False
    lock = threading.Lock()

    def subscribe(observer: abc.ObserverBase[T], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
        nonlocal connected
        subscription = stream.subscribe(observer, scheduler=scheduler)

        with lock:
            should_connect = not connected
            connected = True

        if should_connect and not future_subscription.is_disposed:
            logger.debug("First subscriber attached, connecting stream")
            future_subscription.disposable = stream.connect(scheduler)

        return subscription

    return reactivex.create(subscribe)
