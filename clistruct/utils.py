"""
clistruct utilities (internal helpers, carefully exposed)

- Unset: "not provided" marker, distinct from None; falsey, sealed, one per process.
- coalesce(value, default): materialize Unset, keep every other value (None, 0, "").
- rename("name"): decorator pinning __name__/__qualname__ on generated callables.
- mirror("attr"): read-only property over self._attr; containers come back frozen.

    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(0, "fallback")
    0
"""
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    Usable inside isinstance unions (``str | Unset``), hence __or__/__ror__.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


def coalesce(object, default=None, /):
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator: give the decorated callable a stable name in reprs and tracebacks.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(callable):
        try:
            callable.__name__ = callable.__qualname__ = name
        except (AttributeError, TypeError):
            raise TypeError("rename() must be applied to a function") from None
        return callable

    return decorator


def _freeze(object):
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(_freeze, object))
    elif isinstance(object, Mapping):
        return {key: _freeze(value) for key, value in object.items()}
    elif isinstance(object, Set):
        return frozenset(map(_freeze, object))
    return object


def mirror(name, /):
    """
    Read-only property exposing ``self._<name>``.

    Sequences are returned as tuples, sets as frozensets and mappings as fresh
    dicts, so callers never hold a reference into the instance state.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
