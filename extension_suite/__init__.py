from .observables.batching import Batch, BatchType, batch, batch_only_within, ignore_between, non_blocking_buffer, skip_until_item
from .observables.lifecycle import (
    add_disposables,
    do_error,
    every_nth_message,
    never_complete,
    on_subscribe,
    on_unsubscribed,
    time_for_first_message,
    to_unit,
)
from .observables.properties import (
    DEFAULT_ACCESSOR_CACHE,
    PropertyAccessorCache,
    observe_collection,
    observe_properties,
    observe_property,
)
from .observables.replay import (
    ReplayOneSubject,
    ReplayUntilSubscribedSubject,
    connect_now,
    lazily_connect,
    replay_one,
    replay_until_subscribed,
)
from .observables.retry import back_off_retry, backoff_from_settings, exponential_backoff
from .core.notifications import (
    CollectionChangedAction,
    CollectionChangedEvent,
    NotifyCollectionChanged,
    NotifyPropertyChanged,
    ObservableList,
    PropertyChangedEvent,
)
from .core.scheduling import schedule
from .core.disposables import dispose_and_clear, using
from .config import ExtensionSettings, LoggingSettings, RetrySettings, load_settings
from .logging_setup import setup_logging, setup_logging_from_settings

__all__ = [
    "Batch",
    "BatchType",
    "batch",
    "batch_only_within",
    "ignore_between",
    "non_blocking_buffer",
    "skip_until_item",
    "add_disposables",
    "do_error",
    "every_nth_message",
    "never_complete",
    "on_subscribe",
    "on_unsubscribed",
    "time_for_first_message",
    "to_unit",
    "DEFAULT_ACCESSOR_CACHE",
    "PropertyAccessorCache",
    "observe_collection",
    "observe_properties",
    "observe_property",
    "ReplayOneSubject",
    "ReplayUntilSubscribedSubject",
    "connect_now",
    "lazily_connect",
    "replay_one",
    "replay_until_subscribed",
    "back_off_retry",
    "backoff_from_settings",
    "exponential_backoff",
    "CollectionChangedAction",
    "CollectionChangedEvent",
    "NotifyCollectionChanged",
    "NotifyPropertyChanged",
    "ObservableList",
    "PropertyChangedEvent",
    "schedule",
    "dispose_and_clear",
    "using",
    "ExtensionSettings",
    "LoggingSettings",
    "RetrySettings",
    "load_settings",
    "setup_logging",
    "setup_logging_from_settings",
]
