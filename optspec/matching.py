"""
optspec matching engine: argument sequence + frozen registry → Result.

Algorithm (one pass, left to right; a value-taking option may consume the next token)
1. split the token on its first '=' into a handle part and an inline value.
2. first token in a bundled mode: try to read it as a bundle of one-letter flags
   ('xvf' in BSD mode, '-xvf' in merged mode). all characters must be flags or none;
   when none is, the token is handled normally.
3. first token with '=' in any special mode is rejected.
4. unknown handle: an error when it starts with a prefix character and unknown options
   are errors, a positional otherwise.
5. known handle: subcommands must come first, at-most-once options may not repeat.
6. the value is resolved by the option's assignment mode, then validated and stored
   (lists are split on ',').

The engine never touches the caller's sequence and never returns partial results:
the first invalid token raises a ParseError.
"""
import logging
from collections.abc import Iterable
from enum import Enum, auto

from .compiler import PREFIXES
from .descriptors import *
from .faults import *
from .registry import *
from .results import Result

logger = logging.getLogger(__name__)

PRESENCE = "1"
DIGITS = frozenset("0123456789")


class _Float(Enum):
    START = auto()
    INTEGER = auto()
    DOT = auto()
    FRACTION = auto()


def isinteger(value, /):
    """tell whether every character of `value` is an ASCII digit (vacuously true for "")."""
    return all(char in DIGITS for char in value)


def isfloat(value, /):
    """
    tell whether `value` matches digit+ ('.' digit+)?.

    >>> isfloat("3"), isfloat("3.14"), isfloat("3."), isfloat(".5")
    (True, True, False, False)
    """
    state = _Float.START
    for char in value:
        if char in DIGITS:
            match state:
                case _Float.START:
                    state = _Float.INTEGER
                case _Float.DOT:
                    state = _Float.FRACTION
        elif char == "." and state is _Float.INTEGER:
            state = _Float.DOT
        else:
            return False
    return state in (_Float.INTEGER, _Float.FRACTION)


def _validate(descriptor, value, token, index):
    if descriptor.value_type is ValueType.INTEGER and not isinteger(value):
        raise InvalidIntegerError(
            "data %r given to %r at token %d is not an integer" % (value, descriptor.name, index),
            name=descriptor.name,
            value=value,
            token=token,
            index=index,
            hint="use decimal digits only (for example: 42)",
        )
    if descriptor.value_type is ValueType.FLOAT and not isfloat(value):
        raise InvalidFloatError(
            "data %r given to %r at token %d is not a float" % (value, descriptor.name, index),
            name=descriptor.name,
            value=value,
            token=token,
            index=index,
            hint="use digits with an optional fraction (for example: 3 or 3.14)",
        )


def _store(descriptor, raw, values, token, index):
    if descriptor.collection is Collection.SCALAR:
        if descriptor.name in values:
            raise RepeatedValueError(
                "handle repeated: %r already has a value (token %d)" % (token, index),
                name=descriptor.name,
                token=token,
                index=index,
                hint="scalar options hold a single value; declare a list ('=[s]') to collect more",
            )
        _validate(descriptor, raw, token, index)
        values[descriptor.name] = [raw]
        return

    items = raw.split(",")
    for item in items:
        _validate(descriptor, item, token, index)
    values.setdefault(descriptor.name, []).extend(items)


def _decode_bundle(token, registry, values):
    """
    store every flag of a bundled first token; return False when it is no bundle.
    """
    settings = registry.settings

    start = 0
    while start < 2 and start < len(token) and token[start] in PREFIXES:
        start += 1

    if start and settings.mode is InputMode.BSD_BUNDLED:
        raise BundlePrefixError(
            "bsd-style options may not use a prefix: %r" % token,
            token=token,
            index=0,
            hint="write the bundle without its prefix (for example: %s)" % token[start:],
        )
    if not start and settings.mode is InputMode.MERGED_BUNDLED:
        return False

    accepted = {}
    for char in token[start:]:
        descriptor = registry.lookup(char)
        if descriptor is None or not descriptor.flag:
            if not accepted:
                return False
            if descriptor is None:
                raise InconsistentBundleError(
                    "all or none of the characters of %r must be special (%r is not)" % (token, char),
                    token=token,
                    index=0,
                    hint="only bundle one-letter flags in the first argument",
                )
            raise BundleAssignmentError(
                "cannot assign to a bundled option: %r in %r" % (char, token),
                name=descriptor.name,
                token=token,
                index=0,
                hint="pass %r on its own with its value" % char,
            )
        if descriptor.cardinality is Cardinality.AT_MOST_ONE and (
            descriptor.name in values or descriptor.name in accepted
        ):
            raise RepeatedOptionError(
                "option %r repeated more than allowed in bundle %r" % (descriptor.name, token),
                name=descriptor.name,
                token=token,
                index=0,
                hint="declare the flag with '*' to allow repetitions",
            )
        accepted.setdefault(descriptor.name, []).append(PRESENCE)

    for name, items in accepted.items():
        values.setdefault(name, []).extend(items)
    return bool(accepted)


def match(tokens, registry, /):
    """
    match an argument sequence against the declared options.

    parameters
    - tokens: Iterable[str]
      the argument vector (a plain string is rejected).
    - registry: FrozenRegistry | Registry
      the declarations; a Registry is frozen first.

    returns
    - Result with the stored values per canonical name and the positionals.

    raises
    - NoSubcommandsError (a SpecificationError) when subcommand mode has no subcommands.
    - ParseError subclasses for the first invalid token.
    """
    if isinstance(registry, Registry):
        registry = registry.freeze()
    elif not isinstance(registry, FrozenRegistry):
        raise TypeError("match() registry must be a Registry or a FrozenRegistry")
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("match() tokens must be an iterable of strings")
    tokens = tuple(tokens)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("match() tokens must be strings")

    settings = registry.settings
    if settings.mode is InputMode.SUBCOMMAND and not registry.subcommands:
        raise NoSubcommandsError(
            "no subcommands declared",
            hint="declare at least one subcommand (for example: '[&]deploy') or leave subcommand mode",
        )

    values = {}
    positionals = []

    index = 0
    while index < len(tokens):
        token = tokens[index]
        handle, equals, inline = token.partition("=")

        if index == 0 and settings.bundled and not equals:
            if _decode_bundle(token, registry, values):
                index += 1
                continue

        if index == 0 and equals and settings.mode is not InputMode.STANDARD:
            raise SpecialAssignmentError(
                "special options may not take arguments: %r" % token,
                token=token,
                index=index,
                hint="the first argument must be a bare %s" % (
                    "subcommand" if settings.mode is InputMode.SUBCOMMAND else "bundle of flags"
                ),
            )

        descriptor = registry.lookup(handle)

        if descriptor is None:
            if token[:1] in PREFIXES and settings.error_on_unknown:
                raise UnknownOptionError(
                    "unknown option with handle %r at token %d" % (handle, index),
                    handle=handle,
                    token=token,
                    index=index,
                    hint="check the spelling or declare the option",
                )
            positionals.append(token)
            index += 1
            continue

        if descriptor.subcommand and index != 0:
            raise SubcommandNotFirstError(
                "subcommand %r found after the first argument (token %d)" % (handle, index),
                name=descriptor.name,
                token=token,
                index=index,
                hint="move %r to the front of the arguments" % handle,
            )

        if descriptor.cardinality is Cardinality.AT_MOST_ONE and descriptor.name in values:
            raise RepeatedOptionError(
                "no-repeat option with handle %r found more than once (token %d)" % (handle, index),
                name=descriptor.name,
                token=token,
                index=index,
                hint="give %r only once" % handle,
            )

        match descriptor.assignment:
            case Assignment.FORBIDDEN:
                if equals:
                    raise ForbiddenValueError(
                        "option with handle %r should not have an argument (token %d)" % (handle, index),
                        name=descriptor.name,
                        token=token,
                        index=index,
                        hint="remove everything from '=' (for example: %s)" % handle,
                    )
                values.setdefault(descriptor.name, []).append(PRESENCE)
                index += 1
                continue

            case Assignment.REQUIRED_INLINE:
                if not equals:
                    raise MissingEqualsError(
                        "option with handle %r is missing equals sign (token %d)" % (handle, index),
                        name=descriptor.name,
                        token=token,
                        index=index,
                        hint="attach the value with '=' (for example: %s=<value>)" % handle,
                    )
                raw = inline

            case Assignment.OPTIONAL_INLINE | Assignment.FORBIDDEN_INLINE:
                if equals:
                    if descriptor.assignment is Assignment.FORBIDDEN_INLINE:
                        raise ForbiddenEqualsError(
                            "option with handle %r should not use an equals sign (token %d)" % (handle, index),
                            name=descriptor.name,
                            token=token,
                            index=index,
                            hint="pass the value after a space (for example: %s <value>)" % handle,
                        )
                    raw = inline
                else:
                    if index + 1 >= len(tokens):
                        raise MissingArgumentError(
                            "option with handle %r missing an argument (token %d)" % (handle, index),
                            name=descriptor.name,
                            token=token,
                            index=index,
                            hint="pass a value after %r" % handle,
                        )
                    index += 1
                    raw = tokens[index]

        _store(descriptor, raw, values, token, index)
        index += 1

    result = Result(values, positionals)
    logger.debug(
        "matched %d tokens into %d options and %d positionals",
        len(tokens), len(result), len(result.positionals),
    )
    return result


def getopt(spec, tokens, /, name="", **settings):
    """
    declare `spec` alone and return its first value in `tokens` ('' when absent).

    unknown options are kept as positionals unless error_on_unknown=True is passed.
    """
    registry = Registry(**({"error_on_unknown": False} | settings))
    descriptor = registry.option(spec, name)
    return match(tokens, registry).value(descriptor.name)


def getoptlist(spec, tokens, /, name="", **settings):
    """
    declare `spec` alone and return every value it collected in `tokens`.
    """
    registry = Registry(**({"error_on_unknown": False} | settings))
    descriptor = registry.option(spec, name)
    return match(tokens, registry).values(descriptor.name)


__all__ = (
    "PRESENCE",
    "isinteger",
    "isfloat",
    "match",
    "getopt",
    "getoptlist",
)
