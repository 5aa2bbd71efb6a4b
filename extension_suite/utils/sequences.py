import random
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, List, Optional, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def batch(iterable: Optional[Iterable[T]], size: int) -> Iterator[List[T]]:
    """
    Lazily split ``iterable`` into lists of ``size`` items.

    The last list is shorter when the length is not a multiple of ``size``.
    ``None`` is treated as an empty iterable and yields nothing.

    Raises:
        ValueError: If size is not positive.
    """
    if size <= 0:
        raise ValueError("size must be positive")
    return _batches(() if iterable is None else iterable, size)


def _batches(iterable: Iterable[T], size: int) -> Iterator[List[T]]:
    bucket: List[T] = []
    for item in iterable:
        bucket.append(item)
        if len(bucket) == size:
            yield bucket
            bucket = []

    if bucket:
        yield bucket


def randomise(iterable: Iterable[T], rng: Optional[random.Random] = None) -> List[T]:
    items = list(iterable)
    (rng or random).shuffle(items)
    return items


def tap(iterable: Iterable[T], action: Callable[[T], Any]) -> Iterator[T]:
    """Yield each item after calling ``action`` on it."""
    for item in iterable:
        action(item)
        yield item


def tap_with_index(iterable: Iterable[T], action: Callable[[T, int], Any]) -> Iterator[T]:
    for index, item in enumerate(iterable):
        action(item, index)
        yield item


def to_deduplicated_dict(iterable: Iterable[V], key_function: Callable[[V], K], replace_item: bool = False) -> Dict[K, V]:
    """Build a dict keyed by ``key_function``; the first item per key wins unless ``replace_item``."""
    result: Dict[K, V] = {}
    for item in iterable:
        key = key_function(item)
        if replace_item or key not in result:
            result[key] = item
    return result


def to_dict_with_index(
    iterable: Iterable[T],
    key_function: Callable[[T, int], K],
    value_function: Callable[[T, int], V],
) -> Dict[K, V]:
    """
    Raises:
        ValueError: If two items produce the same key.
    """
    result: Dict[K, V] = {}
    for index, item in enumerate(iterable):
        key = key_function(item, index)
        if key in result:
            raise ValueError(f"Duplicate key {key!r} at index {index}")
        result[key] = value_function(item, index)
    return result


def distinct_by(iterable: Iterable[T], key_function: Callable[[T], Hashable]) -> Iterator[T]:
    seen = set()
    for item in iterable:
        key = key_function(item)
        if key not in seen:
            seen.add(key)
            yield item


def distinct_with_report(
    iterable: Iterable[T],
    key_function: Callable[[T], Hashable],
    found_duplicate_action: Callable[[T, int], Any],
) -> List[T]:
    """
    Keep the first item per key, in first-seen order, calling
    ``found_duplicate_action(first_item, count)`` for every key seen more than once.
    """
    groups: Dict[Hashable, List[T]] = {}
    for item in iterable:
        groups.setdefault(key_function(item), []).append(item)

    result = []
    for items in groups.values():
        if len(items) != 1:
            found_duplicate_action(items[0], len(items))
        result.append(items[0])
    return result


def for_each(iterable: Iterable[T], action: Callable[[T], Any]) -> None:
    for item in iterable:
        action(item)


def for_each_with_index(iterable: Iterable[T], action: Callable[[T, int], Any]) -> None:
    for index, item in enumerate(iterable):
        action(item, index)


def concatenate(iterable: Iterable[T], *items_to_add: T) -> Iterator[T]:
    yield from iterable
    yield from items_to_add


def prepend(iterable: Optional[Iterable[T]], *items_to_prepend: T) -> Iterator[T]:
    """Yield ``items_to_prepend`` then ``iterable``; a ``None`` iterable yields only the prepended items."""
    yield from items_to_prepend
    if iterable is not None:
        yield from iterable
