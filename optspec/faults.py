"""
optspec faults (declaration and matching errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure. Codes are
  grouped by the engine that raises them so logs/searches stay predictable.
- OptionsFault: base type carrying a message plus options (code, title, hint and
  any context such as the offending spec, handle or token index). It knows how to
  render itself through rich.
- SpecificationError / ParseError: the two disjoint fault kinds. Every concrete
  fault derives from exactly one of them and carries its kind as a tag.
- Outcome / attempt(): a tagged result so callers may receive {kind, message}
  as a value instead of unwinding the stack.
- trigger(): central entry point to surface a fault (raise, or print and exit in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Integration
- the compiler raises SpecificationError subclasses, the matching engine raises
  ParseError subclasses; neither engine recovers locally.
- a host CLI calls trigger(fault, shell=True) to render the fault and exit.
"""
import copy
import sys
from collections import defaultdict, namedtuple
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - declaration (21xxx): raised while compiling or registering an option spec.
    - matching (22xxx): raised while consuming an argument sequence.

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- declaration errors (21xxx) ---
    MALFORMED_SPEC              = 21101
    INCOMPLETE_SPEC             = 21102
    TRAILING_INPUT              = 21103
    MISSING_HANDLES             = 21104
    EMPTY_NAME                  = 21105
    UNIMPLEMENTED_MODIFIER      = 21111
    HANDLE_REPEATED             = 21121
    INCOMPATIBLE_REDECLARATION  = 21122
    NO_SUBCOMMANDS              = 21131

    # --- matching errors (22xxx) ---
    UNKNOWN_OPTION              = 22101
    REPEATED_OPTION             = 22102
    REPEATED_VALUE              = 22103
    SUBCOMMAND_NOT_FIRST        = 22104
    FORBIDDEN_VALUE             = 22111
    MISSING_EQUALS              = 22112
    MISSING_ARGUMENT            = 22113
    FORBIDDEN_EQUALS            = 22114
    INVALID_INTEGER             = 22121
    INVALID_FLOAT               = 22122
    SPECIAL_ASSIGNMENT          = 22131
    BUNDLE_PREFIX               = 22132
    BUNDLE_ASSIGNMENT           = 22133
    INCONSISTENT_BUNDLE         = 22134

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class OptionsFault(Exception):
    """
    base class of every fault raised by optspec.

    attributes
    - message: human readable, lowercased description.
    - options: read-only mapping with at least 'code', 'title' and 'hint'; the raise
      site adds context (spec, handle, token, index...).
    - kind: 'specification' or 'parse' (class-level tag).
    """
    kind = Unset
    __faultcode__ = Unset
    __faulttitle__ = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).__faultcode__,
            "title": type(self).__faulttitle__,
            "hint": "",
        } | options)

    @property
    def code(self):
        return self.options["code"]

    @property
    def title(self):
        return self.options["title"]

    @property
    def hint(self):
        return self.options["hint"]

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        prog = text(getattr(main, "__prog__", self.options.get("prog", "optspec")), "prog-name")
        code = self.code.normalize() if isinstance(self.code, FaultCode) else "-"

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code, "code"),
            " | ",
            text(str(self.title).title(), "error-title"),
            " ]"
        )
        message = text(str(self), "error-message")
        parts = [message]
        if self.hint:
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))

        if fancy:
            return Panel(Group(*parts), title=header, title_align="left")

        return Group(header, *parts)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SpecificationError(OptionsFault):
    """raised by the specification compiler and the registry."""
    kind = "specification"
    __faultcode__ = FaultCode.MALFORMED_SPEC
    __faulttitle__ = "bad option spec"


class ParseError(OptionsFault):
    """raised by the matching engine."""
    kind = "parse"
    __faultcode__ = FaultCode.UNKNOWN_OPTION
    __faulttitle__ = "bad argument"


# --- declaration faults ---
class MalformedSpecError(SpecificationError):
    __faultcode__ = FaultCode.MALFORMED_SPEC
    __faulttitle__ = "malformed option spec"

class IncompleteSpecError(SpecificationError):
    __faultcode__ = FaultCode.INCOMPLETE_SPEC
    __faulttitle__ = "incomplete option spec"

class TrailingInputError(SpecificationError):
    __faultcode__ = FaultCode.TRAILING_INPUT
    __faulttitle__ = "input after option spec"

class MissingHandlesError(SpecificationError):
    __faultcode__ = FaultCode.MISSING_HANDLES
    __faulttitle__ = "no handles"

class EmptyNameError(SpecificationError):
    __faultcode__ = FaultCode.EMPTY_NAME
    __faulttitle__ = "empty option name"

class UnimplementedModifierError(SpecificationError):
    __faultcode__ = FaultCode.UNIMPLEMENTED_MODIFIER
    __faulttitle__ = "unimplemented modifier"

class HandleRepeatedError(SpecificationError):
    __faultcode__ = FaultCode.HANDLE_REPEATED
    __faulttitle__ = "handle repeated"

class IncompatibleRedeclarationError(SpecificationError):
    __faultcode__ = FaultCode.INCOMPATIBLE_REDECLARATION
    __faulttitle__ = "incompatible redeclaration"

class NoSubcommandsError(SpecificationError):
    __faultcode__ = FaultCode.NO_SUBCOMMANDS
    __faulttitle__ = "no subcommands declared"


# --- matching faults ---
class UnknownOptionError(ParseError):
    __faultcode__ = FaultCode.UNKNOWN_OPTION
    __faulttitle__ = "unknown option"

class RepeatedOptionError(ParseError):
    __faultcode__ = FaultCode.REPEATED_OPTION
    __faulttitle__ = "repeated option"

class RepeatedValueError(ParseError):
    __faultcode__ = FaultCode.REPEATED_VALUE
    __faulttitle__ = "handle repeated"

class SubcommandNotFirstError(ParseError):
    __faultcode__ = FaultCode.SUBCOMMAND_NOT_FIRST
    __faulttitle__ = "subcommand not first"

class ForbiddenValueError(ParseError):
    __faultcode__ = FaultCode.FORBIDDEN_VALUE
    __faulttitle__ = "option takes no value"

class MissingEqualsError(ParseError):
    __faultcode__ = FaultCode.MISSING_EQUALS
    __faulttitle__ = "missing equals sign"

class MissingArgumentError(ParseError):
    __faultcode__ = FaultCode.MISSING_ARGUMENT
    __faulttitle__ = "missing argument"

class ForbiddenEqualsError(ParseError):
    __faultcode__ = FaultCode.FORBIDDEN_EQUALS
    __faulttitle__ = "equals sign not allowed"

class InvalidIntegerError(ParseError):
    __faultcode__ = FaultCode.INVALID_INTEGER
    __faulttitle__ = "invalid integer"

class InvalidFloatError(ParseError):
    __faultcode__ = FaultCode.INVALID_FLOAT
    __faulttitle__ = "invalid float"

class SpecialAssignmentError(ParseError):
    __faultcode__ = FaultCode.SPECIAL_ASSIGNMENT
    __faulttitle__ = "special options may not take arguments"

class BundlePrefixError(ParseError):
    __faultcode__ = FaultCode.BUNDLE_PREFIX
    __faulttitle__ = "prefixed bsd-style bundle"

class BundleAssignmentError(ParseError):
    __faultcode__ = FaultCode.BUNDLE_ASSIGNMENT
    __faulttitle__ = "bundled option takes a value"

class InconsistentBundleError(ParseError):
    __faultcode__ = FaultCode.INCONSISTENT_BUNDLE
    __faulttitle__ = "inconsistent bundle"


class Outcome(namedtuple("Outcome", ("value", "fault"), defaults=(None, None))):
    """
    tagged result of an engine call: either a value or a fault, never both.

    - ok: True when no fault was recorded.
    - kind / message: the fault tag and text ('' when ok).
    - unwrap(): return the value or raise the recorded fault.
    """
    __slots__ = ()

    @property
    def ok(self):
        return self.fault is None

    @property
    def kind(self):
        return "" if self.fault is None else self.fault.kind

    @property
    def message(self):
        return "" if self.fault is None else str(self.fault)

    def unwrap(self):
        if self.fault is not None:
            raise self.fault
        return self.value


def attempt(function, /, *args, **kwargs):
    """
    call `function` and capture any OptionsFault into an Outcome.

    only optspec faults are captured; other exceptions propagate unchanged.
    """
    try:
        return Outcome(function(*args, **kwargs))
    except OptionsFault as fault:
        return Outcome(fault=fault)


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see OptionsFault).
    - options are merged into the fault via copy.replace() before triggering.
    - with shell=True the fault is rendered on stderr and the process exits with 1;
      otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ keyed by
    FaultCode; None is returned when no entry exists.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "OptionsFault",
    "SpecificationError",
    "ParseError",
    "MalformedSpecError",
    "IncompleteSpecError",
    "TrailingInputError",
    "MissingHandlesError",
    "EmptyNameError",
    "UnimplementedModifierError",
    "HandleRepeatedError",
    "IncompatibleRedeclarationError",
    "NoSubcommandsError",
    "UnknownOptionError",
    "RepeatedOptionError",
    "RepeatedValueError",
    "SubcommandNotFirstError",
    "ForbiddenValueError",
    "MissingEqualsError",
    "MissingArgumentError",
    "ForbiddenEqualsError",
    "InvalidIntegerError",
    "InvalidFloatError",
    "SpecialAssignmentError",
    "BundlePrefixError",
    "BundleAssignmentError",
    "InconsistentBundleError",
    "Outcome",
    "attempt",
    "trigger",
    "getdoc",
)
