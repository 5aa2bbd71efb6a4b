from __future__ import annotations

import logging
import operator
import threading
from typing import Any, Callable, Dict, Optional, Tuple, Type

import reactivex
from reactivex import Observable, abc
from reactivex.disposable import Disposable

from extension_suite.core.notifications import (
    CollectionChangedEvent,
    NotifyCollectionChanged,
    NotifyPropertyChanged,
    PropertyChangedEvent,
)

logger = logging.getLogger(__name__)

Accessor = Callable[[Any], Any]


class PropertyAccessorCache:
    """
    Accessors keyed by (owner type, property name).

    Entries are only ever added. Two threads resolving the same key at once
    may both build an accessor; the first one stored wins and is what every
    caller gets back afterwards.
    """

    def __init__(self) -> None:
        self._accessors: Dict[Tuple[Type, str], Accessor] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._accessors)

    def __contains__(self, key: Tuple[Type, str]) -> bool:
        return key in self._accessors

    def get_accessor(
        self,
        owner_type: Type,
        property_name: str,
        factory: Optional[Callable[[], Accessor]] = None,
    ) -> Accessor:
        key = (owner_type, property_name)
        accessor = self._accessors.get(key)
        if accessor is not None:
            return accessor

        # Built outside the lock; a racing thread may build the same entry.
        built = factory() if factory is not None else operator.attrgetter(property_name)
        with self._lock:
            accessor = self._accessors.setdefault(key, built)
        logger.debug(f"Cached accessor for {owner_type.__qualname__}.{property_name}")
        return accessor


# Created once per process and never torn down. Pass ``cache=`` to use an isolated one.
DEFAULT_ACCESSOR_CACHE = PropertyAccessorCache()


def observe_properties(source: NotifyPropertyChanged) -> Observable[PropertyChangedEvent]:
    """Stream every property-changed event raised by ``source``."""

    def subscribe(observer: abc.ObserverBase[PropertyChangedEvent], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
        def handler(_sender: Any, event: PropertyChangedEvent) -> None:
            observer.on_next(event)

        source.add_property_changed(handler)
        return Disposable(lambda: source.remove_property_changed(handler))

    return reactivex.create(subscribe)


def observe_collection(source: NotifyCollectionChanged) -> Observable[CollectionChangedEvent]:
    """Stream every collection-changed event raised by ``source``."""

    def subscribe(observer: abc.ObserverBase[CollectionChangedEvent], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
        def handler(_sender: Any, event: CollectionChangedEvent) -> None:
            observer.on_next(event)

        source.add_collection_changed(handler)
        return Disposable(lambda: source.remove_collection_changed(handler))

    return reactivex.create(subscribe)


def observe_property(
    source: NotifyPropertyChanged,
    property_name: str,
    accessor: Optional[Accessor] = None,
    observe_initial_value: bool = False,
    cache: Optional[PropertyAccessorCache] = None,
) -> Observable[Any]:
    """
    Stream the current value of one property each time it is reported as changed.

    Args:
        source: Object raising property-changed notifications.
        property_name: Name carried by the notifications of interest.
        accessor: Reads the value from ``source``. Used as given and never
            cached. When omitted, ``operator.attrgetter(property_name)`` is
            resolved through the cache once per (type, name) pair.
        observe_initial_value: Also emit the current value as soon as an
            observer subscribes.
        cache: Accessor cache to use instead of DEFAULT_ACCESSOR_CACHE.

    Raises:
        TypeError: If ``source`` does not raise property-changed notifications.
        ValueError: If no accessor is given and ``source`` has no such attribute.
    """
    if not isinstance(source, NotifyPropertyChanged):
        raise TypeError(f"{type(source).__name__} does not raise property change notifications")
    if accessor is None and not hasattr(source, property_name):
        raise ValueError(f"Unable to resolve property '{property_name}' on {type(source).__name__}")

    if accessor is not None:
        selector = accessor
    else:
        cache = cache if cache is not None else DEFAULT_ACCESSOR_CACHE
        selector = cache.get_accessor(type(source), property_name)

    def subscribe(observer: abc.ObserverBase[Any], scheduler: Optional[abc.SchedulerBase] = None) -> abc.DisposableBase:
        def handler(_sender: Any, event: PropertyChangedEvent) -> None:
            if event.property_name == property_name:
                observer.on_next(selector(source))

        # Initial value is read before the handler is attached.
        initial = selector(source) if observe_initial_value else None
        source.add_property_changed(handler)
        if observe_initial_value:
            observer.on_next(initial)
        return Disposable(lambda: source.remove_property_changed(handler))

    return reactivex.create(subscribe)
