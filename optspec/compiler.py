r"""
optspec specification compiler: option-declaration string → Descriptor.

Grammar
    option_spec  := modifier? handle_list cardinality? assign_spec?
    modifier     := '[' ( '&' | ('<'|'>'|'!') handle ) ']'
    handle_list  := handle ('|' handle)*
    handle       := prefix? word_char (word_char | '-')*
    prefix       := '-' | '--' | '+' | '++' | '.' | ':' | '/'
    cardinality  := '?' | '*'
    assign_spec  := '=' eq_modifier? value_spec?
                  | '[' value_type? ']'
    eq_modifier  := '?' | '!'
    value_spec   := value_type | '[' value_type? ']'
    value_type   := 's' | 'i' | 'f'

Semantics
- '=' requires an inline value, '=?' makes it optional, '=!' forbids it (the value
  is then the following token). brackets around the value type make a list.
- '[x]' right after the handles (no '=') declares a presence-only list option.
- '?' (default) allows one occurrence, '*' any number.
- '[&]' declares a subcommand when the registry runs in subcommand mode and is
  ignored otherwise; '[<x]', '[>x]' and '[!x]' are reserved and always rejected.

Canonical name
- the explicit name when given, otherwise the last handle without its prefix.

Examples
    >>> compile("-wife=!s").assignment
    <Assignment.FORBIDDEN_INLINE: 4>
    >>> compile("-n|--nums*=[i]").collection
    <Collection.LIST: 2>
"""
import logging
import re
from enum import Enum, auto

from .descriptors import *
from .faults import *

logger = logging.getLogger(__name__)

PREFIXES = frozenset("-+.:/")

_TYPES = {"s": ValueType.STRING, "i": ValueType.INTEGER, "f": ValueType.FLOAT}
_HANDLE = re.compile(r"(?:--|\+\+|[-+.:/])?\w[\w-]*", re.ASCII)


class _State(Enum):
    MODIFIER = auto()
    MODIFIER_KIND = auto()
    MODIFIER_TARGET = auto()
    MODIFIER_END = auto()
    HANDLE = auto()
    MINUS_PREFIX = auto()
    PLUS_PREFIX = auto()
    PREFIX_END = auto()
    NAME = auto()
    CARDINALITY = auto()
    EQUALS = auto()
    VALUE = auto()
    LIST = auto()
    LIST_END = auto()
    DONE = auto()


def _isword(char):
    return char is not None and char.isascii() and (char.isalnum() or char == "_")


def strip_prefix(handle, /):
    """
    remove the prefix (up to two leading prefix characters) of a handle.

    >>> strip_prefix("--wife"), strip_prefix("+x"), strip_prefix("plain")
    ('wife', 'x', 'plain')
    """
    index = 0
    while index < 2 and index < len(handle) and handle[index] in PREFIXES:
        index += 1
    return handle[index:]


def compile(spec, name="", /, *, subcommands=False):
    """
    compile one option declaration into a Descriptor.

    parameters
    - spec: str
      the declaration, e.g. '-w|--wife=!s', '--count*[i]', '[&]deploy'.
    - name: str
      explicit canonical name; when empty the name is derived from the last handle.
    - subcommands: bool
      whether '[&]' is honored (the registry passes True in subcommand mode).

    returns
    - Descriptor (not registered anywhere; see Registry.option for that).

    raises
    - SpecificationError subclasses for every grammar violation.
    """
    if not isinstance(spec, str):
        raise TypeError("compile() spec must be a string")
    if not isinstance(name, str):
        raise TypeError("compile() name must be a string")

    state = _State.MODIFIER
    handles = []
    buffer = []

    modifier = Modifier.NONE
    target = ""
    cardinality = Cardinality.AT_MOST_ONE
    assignment = Assignment.FORBIDDEN
    collection = Collection.SCALAR
    value_type = ValueType.STRING

    def malformed(expected):
        got = "end of input" if char is None else repr(char)
        return MalformedSpecError(
            "expected %s but found %s at offset %d of option spec %r" % (expected, got, index - 1, spec),
            spec=spec,
            index=index - 1,
            hint="see the option grammar, e.g. '-o|--output=s', '--count*[i]', '[&]deploy'",
        )

    def incomplete(where):
        return IncompleteSpecError(
            "option spec %r ended %s" % (spec, where),
            spec=spec,
            index=index - 1,
            hint="complete the declaration or remove the dangling characters",
        )

    def push():
        handle = "".join(buffer)
        if handle in handles:
            raise HandleRepeatedError(
                "handle repeated: %r (declared twice by %r)" % (handle, spec),
                spec=spec,
                handle=handle,
                hint="list every handle once",
            )
        handles.append(handle)
        buffer.clear()

    index = 0
    reprocess = False
    while True:
        if reprocess:
            reprocess = False
        else:
            char = spec[index] if index < len(spec) else None
            index += 1

        match state:
            case _State.MODIFIER:
                if char is None:
                    raise MissingHandlesError(
                        "option spec %r declares no handles" % spec,
                        spec=spec,
                        hint="declare at least one handle, e.g. '-v|--verbose'",
                    )
                if char == "[":
                    state = _State.MODIFIER_KIND
                else:
                    state = _State.HANDLE
                    reprocess = True

            case _State.MODIFIER_KIND:
                if char is None:
                    raise incomplete("inside a modifier")
                if char == "&":
                    # subcommands only exist in subcommand mode; silently a plain option otherwise
                    if subcommands:
                        modifier = Modifier.SUBCOMMAND
                    state = _State.MODIFIER_END
                elif char in "<>!":
                    modifier = {"<": Modifier.BEFORE, ">": Modifier.AFTER, "!": Modifier.NOT_WITH}[char]
                    state = _State.MODIFIER_TARGET
                else:
                    raise malformed("'&', '<', '>' or '!'")

            case _State.MODIFIER_TARGET:
                if char is None:
                    raise incomplete("inside a modifier")
                if char != "]":
                    buffer.append(char)
                    continue
                if not _HANDLE.fullmatch(target := "".join(buffer)):
                    raise malformed("a handle as modifier argument")
                raise UnimplementedModifierError(
                    "unimplemented modifier %r in option spec %r" % (spec[:index], spec),
                    spec=spec,
                    modifier=modifier,
                    target=target,
                    hint="relational modifiers ('<', '>', '!') are reserved; only '[&]' is supported",
                )

            case _State.MODIFIER_END:
                if char is None:
                    raise incomplete("inside a modifier")
                if char != "]":
                    raise malformed("']'")
                state = _State.HANDLE

            case _State.HANDLE:
                if char is None:
                    if not handles:
                        raise MissingHandlesError(
                            "option spec %r declares no handles" % spec,
                            spec=spec,
                            hint="declare at least one handle after the modifier, e.g. '[&]deploy'",
                        )
                    raise incomplete("before a handle after '|'")
                if char == "-":
                    state = _State.MINUS_PREFIX
                elif char == "+":
                    state = _State.PLUS_PREFIX
                elif char in "/.:":
                    state = _State.PREFIX_END
                elif _isword(char):
                    state = _State.NAME
                else:
                    raise malformed("a prefix or word character")
                buffer.append(char)

            case _State.MINUS_PREFIX | _State.PLUS_PREFIX:
                if char is None:
                    raise incomplete("before the handle was complete")
                doubled = "-" if state is _State.MINUS_PREFIX else "+"
                if char == doubled:
                    state = _State.PREFIX_END
                elif _isword(char):
                    state = _State.NAME
                else:
                    raise malformed("%r or a word character" % doubled)
                buffer.append(char)

            case _State.PREFIX_END:
                if char is None:
                    raise incomplete("before the handle was complete")
                if not _isword(char):
                    raise malformed("a word character")
                buffer.append(char)
                state = _State.NAME

            case _State.NAME:
                if char is None:
                    push()
                    break
                if _isword(char) or char == "-":
                    buffer.append(char)
                    continue
                push()
                if char == "|":
                    state = _State.HANDLE
                elif char in "?*":
                    cardinality = Cardinality.AT_MOST_ONE if char == "?" else Cardinality.ANY_COUNT
                    state = _State.CARDINALITY
                elif char == "=":
                    assignment = Assignment.REQUIRED_INLINE
                    state = _State.EQUALS
                elif char == "[":
                    collection = Collection.LIST
                    state = _State.LIST
                else:
                    raise malformed("a word character, '|', '?', '*', '=' or '['")

            case _State.CARDINALITY:
                if char is None:
                    break
                if char == "=":
                    assignment = Assignment.REQUIRED_INLINE
                    state = _State.EQUALS
                elif char == "[":
                    collection = Collection.LIST
                    state = _State.LIST
                else:
                    raise malformed("'=' or '[' after the cardinality")

            case _State.EQUALS:
                if char is None:
                    break
                if char == "?":
                    assignment = Assignment.OPTIONAL_INLINE
                    state = _State.VALUE
                elif char == "!":
                    assignment = Assignment.FORBIDDEN_INLINE
                    state = _State.VALUE
                elif char == "[":
                    collection = Collection.LIST
                    state = _State.LIST
                elif char in _TYPES:
                    value_type = _TYPES[char]
                    state = _State.DONE
                else:
                    raise malformed("'?', '!', '[' or a value type ('s', 'i', 'f')")

            case _State.VALUE:
                if char is None:
                    break
                if char == "[":
                    collection = Collection.LIST
                    state = _State.LIST
                elif char in _TYPES:
                    value_type = _TYPES[char]
                    state = _State.DONE
                else:
                    raise malformed("'[' or a value type ('s', 'i', 'f')")

            case _State.LIST:
                if char is None:
                    raise incomplete("inside a value list")
                if char == "]":
                    state = _State.DONE
                elif char in _TYPES:
                    value_type = _TYPES[char]
                    state = _State.LIST_END
                else:
                    raise malformed("a value type ('s', 'i', 'f') or ']'")

            case _State.LIST_END:
                if char is None:
                    raise incomplete("before the value list was closed")
                if char != "]":
                    raise malformed("']' to close the value list")
                state = _State.DONE

            case _State.DONE:
                if char is None:
                    break
                raise TrailingInputError(
                    "unexpected %r after the end of option spec %r" % (spec[index - 1:], spec[:index - 1]),
                    spec=spec,
                    index=index - 1,
                    hint="remove everything after the value type",
                )

    if not name:
        if not (name := strip_prefix(handles[-1])):
            raise EmptyNameError(
                "handle %r is empty once its prefix is removed" % handles[-1],
                spec=spec,
                hint="give the option an explicit name",
            )

    descriptor = Descriptor(
        name,
        handles,
        modifier=modifier,
        target=target,
        cardinality=cardinality,
        assignment=assignment,
        collection=collection,
        value_type=value_type,
    )
    logger.debug("compiled option spec %r into %r", spec, descriptor)
    return descriptor


# compile is reached as optspec.compiler.compile, not through the package namespace.
__all__ = (
    "PREFIXES",
    "strip_prefix",
)
