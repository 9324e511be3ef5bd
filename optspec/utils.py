"""
optspec utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by descriptors, registries and results so that
  every public object has the same read-only semantics.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None
    or the empty string (an empty string is a legitimate option value).
- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving legitimate falsey values.
- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated accessors.
- StorageGuard
  • Mixin whose backing fields (names starting with '-') are writable only while the
    object is being built, then locked for the lifetime of the instance.
- view("field")
  • Read-only property over a guarded backing field; containers are exposed as
    tuple / MappingProxyType / frozenset.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce("", "fallback")
    ''
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from contextlib import contextmanager
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and "".
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns the given object unless it is Unset, in which case `default` is
    returned. Falsey values like None, 0 or "" are preserved as-is.
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


class StorageGuard:
    """
    Mixin protecting backing storage after construction.

    rules
    - any attribute whose name starts with '-' is internal backing and:
      • cannot be read through normal attribute access (AttributeError),
      • cannot be written once the build phase has ended.
    - every other attribute assignment is rejected too, which makes instances
      immutable from the outside.

    build phase
        with super().__new__(cls) as self:
            setattr(self, "-field", value)
        # after the 'with' block the instance is sealed.
    """
    __slots__ = ("__building",)

    @contextmanager
    def __new__(cls):
        self = super().__new__(cls)
        object.__setattr__(self, "_StorageGuard__building", True)
        try:
            yield self
        finally:
            object.__setattr__(self, "_StorageGuard__building", False)

    def __getattribute__(self, name, /):
        if isinstance(name, str) and name.startswith("-"):
            raise AttributeError("internal storage is not accessible")
        return object.__getattribute__(self, name)

    def __setattr__(self, name, value, /):
        if not object.__getattribute__(self, "_StorageGuard__building"):
            raise AttributeError("%s objects are read-only" % type(self).__name__)
        return object.__setattr__(self, name, value)

    def __delattr__(self, name, /):
        raise AttributeError("%s objects are read-only" % type(self).__name__)


def view(name, /):
    """
    Build a read-only property over the guarded backing field '-{name}'.

    - Sequence (non-str, non-tuple) → tuple; tuples (named or not) are returned as-is
    - Mapping           → MappingProxyType
    - Set               → frozenset
    - other types       → returned as-is
    """
    if not isinstance(name, str):
        raise TypeError("view() argument must be a string")

    @rename(name)
    def getter(self):
        value = object.__getattribute__(self, "-" + name)
        if isinstance(value, Sequence) and not isinstance(value, (str, tuple)):
            return tuple(value)
        if isinstance(value, Mapping):
            return MappingProxyType(value)
        if isinstance(value, Set):
            return frozenset(value)
        return value

    return property(getter)


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "StorageGuard",
    "view",
)
