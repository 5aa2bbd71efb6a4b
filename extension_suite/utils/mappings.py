from typing import Callable, MutableMapping, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")


def get_value_or_default(mapping: MutableMapping[K, V], key: K, default_value: Optional[V] = None) -> Optional[V]:
    return mapping[key] if key in mapping else default_value


def add_or_update(
    mapping: MutableMapping[K, V],
    key: K,
    add_function: Callable[[], V],
    update_function: Callable[[V], V],
) -> V:
    """Store ``update_function(existing)`` if ``key`` is present, else ``add_function()``. Returns the stored value."""
    if key in mapping:
        mapping[key] = update_function(mapping[key])
    else:
        mapping[key] = add_function()
    return mapping[key]
