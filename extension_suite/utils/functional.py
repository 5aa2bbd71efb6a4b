from typing import Any, Callable, TypeVar

S = TypeVar("S")
R = TypeVar("R")


def pipe_to(source: S, func: Callable[[S], R]) -> R:
    return func(source)


def tap_value(source: S, action: Callable[[S], Any]) -> S:
    """Call ``action(source)`` for its side effect and return ``source`` unchanged."""
    action(source)
    return source
