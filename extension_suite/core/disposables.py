from typing import Callable, Iterable, MutableSequence, MutableSet, Optional, TypeVar, Union

from reactivex import abc

D = TypeVar("D", bound=abc.DisposableBase)
R = TypeVar("R")


def using(disposable: D, func: Callable[[D], R]) -> R:
    """Call ``func(disposable)`` and dispose ``disposable`` afterwards, even on error."""
    try:
        return func(disposable)
    finally:
        disposable.dispose()


def dispose_and_clear(collection: Optional[Union[MutableSequence[D], MutableSet[D]]]) -> None:
    """Dispose every item, then empty the collection. ``None`` is ignored."""
    if collection is None:
        return

    items: Iterable[D] = list(collection)
    for item in items:
        item.dispose()
    collection.clear()
