r"""
optspec option descriptors.

Overview
- Descriptor: the compiled, immutable form of one option declaration. It carries
  no parsing logic; the compiler builds it and the matching engine reads it.
- Property enums, one per axis of the declaration grammar:
  • Modifier:    NONE | BEFORE | AFTER | SUBCOMMAND | NOT_WITH   ('[&]', '[<x]', '[>x]', '[!x]')
  • Cardinality: AT_MOST_ONE | ANY_COUNT                          ('?' or nothing, '*')
  • Assignment:  FORBIDDEN | REQUIRED_INLINE | OPTIONAL_INLINE | FORBIDDEN_INLINE
                                                                  (nothing, '=', '=?', '=!')
  • Collection:  SCALAR | LIST                                    ('[...]' makes a list)
  • ValueType:   STRING | INTEGER | FLOAT                         ('s', 'i', 'f')

Identity
- equality, hashing and ordering only look at the canonical name; two descriptors
  with the same name denote the same option even if their handles differ.
- compatible() compares the value-shaping properties and decides whether a
  redeclaration may be merged as an alias.

Immutability
- attributes are exposed through read-only views over guarded storage; use
  copy.replace(descriptor, handles=...) to derive a modified copy.

Quick example:
    >>> from optspec.compiler import compile
    >>> descriptor = compile("-w|--wife=!s")
    >>> descriptor.name, descriptor.assignment
    ('wife', <Assignment.FORBIDDEN_INLINE: 4>)
"""
import functools
from enum import Enum

from .utils import *


class Modifier(Enum):
    NONE = 1
    BEFORE = 2
    AFTER = 3
    SUBCOMMAND = 4
    NOT_WITH = 5


class Cardinality(Enum):
    AT_MOST_ONE = 1
    ANY_COUNT = 2


class Assignment(Enum):
    """
    how a value is attached to a handle.

    - FORBIDDEN: presence-only, no value at all.
    - REQUIRED_INLINE: value must follow '=' in the same token.
    - OPTIONAL_INLINE: value follows '=' or is the next token.
    - FORBIDDEN_INLINE: value is always the next token; '=' is rejected.
    """
    FORBIDDEN = 1
    REQUIRED_INLINE = 2
    OPTIONAL_INLINE = 3
    FORBIDDEN_INLINE = 4


class Collection(Enum):
    SCALAR = 1
    LIST = 2


class ValueType(Enum):
    STRING = "s"
    INTEGER = "i"
    FLOAT = "f"


@functools.total_ordering
class Descriptor(StorageGuard):
    """
    compiled, immutable representation of one declared option.

    Properties
    - name: canonical identifier, unique within a registry.
    - handles: frozenset of aliases resolving to this option.
    - modifier / target: modifier kind and its argument (empty unless relational).
    - cardinality, assignment, collection, value_type: see the module enums.
    """

    __introspectable__ = (
        "name",
        "handles",
        "modifier",
        "target",
        "cardinality",
        "assignment",
        "collection",
        "value_type",
    )

    name = view("name")
    handles = view("handles")
    modifier = view("modifier")
    target = view("target")
    cardinality = view("cardinality")
    assignment = view("assignment")
    collection = view("collection")
    value_type = view("value_type")

    def __new__(
            cls,
            name,
            /,
            handles=(),
            modifier=Modifier.NONE,
            target="",
            cardinality=Cardinality.AT_MOST_ONE,
            assignment=Assignment.FORBIDDEN,
            collection=Collection.SCALAR,
            value_type=ValueType.STRING,
    ):
        if not isinstance(name, str):
            raise TypeError("descriptor 'name' must be a string")
        elif not name:
            raise ValueError("descriptor 'name' cannot be empty")
        if isinstance(handles, str):
            raise TypeError("descriptor 'handles' must be an iterable of strings, not a string")
        handles = frozenset(handles)
        if not all(isinstance(handle, str) and handle for handle in handles):
            raise ValueError("descriptor 'handles' must be non-empty strings")

        for field, value, enum in (
            ("modifier", modifier, Modifier),
            ("cardinality", cardinality, Cardinality),
            ("assignment", assignment, Assignment),
            ("collection", collection, Collection),
            ("value_type", value_type, ValueType),
        ):
            if not isinstance(value, enum):
                raise TypeError(f"descriptor {field!r} must be a {enum.__name__} member")

        with super().__new__(cls) as self:
            setattr(self, "-name", name)
            setattr(self, "-handles", handles)
            setattr(self, "-modifier", modifier)
            setattr(self, "-target", target)
            setattr(self, "-cardinality", cardinality)
            setattr(self, "-assignment", assignment)
            setattr(self, "-collection", collection)
            setattr(self, "-value_type", value_type)
        return self

    @property
    def subcommand(self):
        return self.modifier is Modifier.SUBCOMMAND

    @property
    def flag(self):
        """True for presence-only options (no value is ever consumed)."""
        return self.assignment is Assignment.FORBIDDEN

    def compatible(self, other, /):
        """
        tell whether `other` may be used interchangeably with this descriptor.

        only the value-shaping properties are compared; names, handles and
        modifiers are irrelevant.
        """
        if not isinstance(other, Descriptor):
            raise TypeError("compatible() argument must be a descriptor")
        return (
            self.cardinality is other.cardinality and
            self.assignment is other.assignment and
            self.collection is other.collection and
            self.value_type is other.value_type
        )

    def __eq__(self, other):
        if not isinstance(other, Descriptor):
            return NotImplemented
        return self.name == other.name

    def __lt__(self, other):
        if not isinstance(other, Descriptor):
            return NotImplemented
        return self.name < other.name

    def __hash__(self):
        return hash(self.name)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {field: getattr(self, field) for field in type(self).__introspectable__}
        fields.update(overrides)
        return type(self)(fields.pop("name"), **fields)

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "descriptor(%s)" % ", ".join(
            "%s=%r" % (name, value if name != "handles" else sorted(value)) for name, value in self.__rich_repr__()
        )


__all__ = (
    "Modifier",
    "Cardinality",
    "Assignment",
    "Collection",
    "ValueType",
    "Descriptor",
)
