"""
Stratum utilities (internal helpers shared by the option and engine layers)

Overview
- UnsetType / Unset
  • Singleton sentinel for “argument not given” where None would be ambiguous
    (a description of None vs. no description at all).

- coalesce(object, default=None)
  • Materialize Unset into a default while keeping None/0/""/False untouched.

- @rename("name")
  • Give generated callables stable __name__/__qualname__ for readable reprs.

- mirror("attr")
  • Read-only property publishing a private backing field (self._attr) with
    containers copied out, so callers cannot mutate declarations in place.

Names not listed in __all__ are internal.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce("", "fallback")
    ''
"""
import functools
from collections.abc import Mapping, Sequence, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel.

    - Falsey, yet distinct from None, 0 and "".
    - repr(Unset) -> "Unset".
    - Only one instance exists and copies return it; subclassing is refused.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object`, or `default` when `object` is Unset.

    None, 0, "" and False pass through untouched.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator giving a generated function the __name__/__qualname__ `name`.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("@rename() must decorate a function")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _detach(object):
    """
    Copy containers read from a backing field, recursively.

    Non-string sequences become lists, mappings dicts and sets sets; any other
    object is returned as is.
    """
    match object:
        case str():
            return object
        case Mapping():
            return {key: _detach(item) for key, item in object.items()}
        case Sequence():
            return [_detach(item) for item in object]
        case Set():
            return {_detach(item) for item in object}
    return object


def mirror(name, /):
    """
    Define a read-only property returning a detached copy of self._{name}.

    Example
    - with self._key set in __init__, declare key = mirror("key").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()
"""
Sentinel for “not provided”. Pair with coalesce() to materialize defaults.
"""


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
