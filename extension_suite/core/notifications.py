from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, List, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyChangedEvent:
    """Payload carried to property-changed handlers."""

    property_name: str


class CollectionChangedAction(Enum):
    ADD = auto()
    REMOVE = auto()
    REPLACE = auto()
    MOVE = auto()
    RESET = auto()


@dataclass(frozen=True)
class CollectionChangedEvent:
    action: CollectionChangedAction
    new_items: Tuple[Any, ...] = field(default_factory=tuple)
    old_items: Tuple[Any, ...] = field(default_factory=tuple)


PropertyChangedHandler = Callable[[Any, PropertyChangedEvent], None]
CollectionChangedHandler = Callable[[Any, CollectionChangedEvent], None]


class _HandlerList:
    """Thread-safe list of callbacks, invoked synchronously on emit."""

    def __init__(self) -> None:
        self._handlers: List[Callable] = []
        self._lock = threading.Lock()

    def add(self, handler: Callable) -> None:
        if not callable(handler):
            raise TypeError("handler must be callable")
        with self._lock:
            self._handlers.append(handler)

    def remove(self, handler: Callable) -> None:
        with self._lock:
            self._handlers.remove(handler)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)

    def emit(self, *args) -> None:
        # Snapshot so handlers may unregister themselves while being called
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            handler(*args)


class NotifyPropertyChanged:
    """
    Mixin for objects that announce property changes by name.

    Handlers are called as ``handler(sender, PropertyChangedEvent)`` on the
    thread that raised the change. Exceptions raised by a handler propagate to
    the caller of raise_property_changed.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._property_changed = _HandlerList()

    def add_property_changed(self, handler: PropertyChangedHandler) -> None:
        self._property_changed.add(handler)

    def remove_property_changed(self, handler: PropertyChangedHandler) -> None:
        """
        Unregister a handler.

        Raises:
            ValueError: If the handler was never registered.
        """
        self._property_changed.remove(handler)

    def raise_property_changed(self, property_name: str) -> None:
        logger.debug(f"{type(self).__name__}.{property_name} changed ({len(self._property_changed)} handlers)")
        self._property_changed.emit(self, PropertyChangedEvent(property_name))

    def set_and_notify(self, property_name: str, value: Any) -> None:
        """Assign ``value`` to the attribute and raise a change if it differs."""
        if getattr(self, property_name, object()) == value:
            return
        setattr(self, property_name, value)
        self.raise_property_changed(property_name)


class NotifyCollectionChanged:
    """Mixin for collections that announce adds, removes and resets."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._collection_changed = _HandlerList()

    def add_collection_changed(self, handler: CollectionChangedHandler) -> None:
        self._collection_changed.add(handler)

    def remove_collection_changed(self, handler: CollectionChangedHandler) -> None:
        self._collection_changed.remove(handler)

    def raise_collection_changed(self, event: CollectionChangedEvent) -> None:
        self._collection_changed.emit(self, event)


class ObservableList(NotifyCollectionChanged, list):
    """A list that raises collection-changed events for its mutating helpers."""

    def append(self, item: Any) -> None:
        super().append(item)
        self.raise_collection_changed(CollectionChangedEvent(CollectionChangedAction.ADD, new_items=(item,)))

    def extend(self, items) -> None:
        items = tuple(items)
        super().extend(items)
        if items:
            self.raise_collection_changed(CollectionChangedEvent(CollectionChangedAction.ADD, new_items=items))

    def remove(self, item: Any) -> None:
        super().remove(item)
        self.raise_collection_changed(CollectionChangedEvent(CollectionChangedAction.REMOVE, old_items=(item,)))

    def clear(self) -> None:
        old_items = tuple(self)
        super().clear()
        self.raise_collection_changed(CollectionChangedEvent(CollectionChangedAction.RESET, old_items=old_items))
