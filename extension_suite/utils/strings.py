import io
from functools import reduce
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")

Builder = io.StringIO


def when(builder: Builder, predicate: Callable[[], bool], action: Callable[[Builder], Builder]) -> Builder:
    """Apply ``action`` to ``builder`` only when ``predicate()`` is true."""
    return action(builder) if predicate() else builder


def process_sequence(builder: Builder, items: Iterable[T], function: Callable[[Builder, T], Builder]) -> Builder:
    """Fold ``items`` into ``builder`` with ``function(builder, item)``."""
    return reduce(function, items, builder)


def append_line(builder: Builder, text: str = "") -> Builder:
    builder.write(text)
    builder.write("\n")
    return builder
