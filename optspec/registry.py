"""
optspec registry: the set of declared options and the parser settings.

Two pieces
- Registry (builder): collects declarations one by one. Settings are fixed when the
  registry is constructed, so they can never change once a descriptor exists; build
  a new registry to use different settings.
- FrozenRegistry (view): an immutable snapshot handed to the matching engine. It may
  be shared by any number of concurrent match calls.

Settings
- case_sensitive: when False, declared handles are indexed lowercased and every lookup
  lowercases its handle too (descriptors and names keep the declared spelling).
  Two handles that only differ by case are then the same handle.
- mode: one InputMode member; the modes are mutually exclusive by construction.
  • STANDARD: plain options and positionals.
  • BSD_BUNDLED: the first token may be a bundle of one-letter flags without prefix ('xvf').
  • MERGED_BUNDLED: same, but the bundle starts with a prefix ('-xvf').
  • SUBCOMMAND: the first token must be a declared subcommand ('[&]deploy').
- error_on_unknown: when True, an unknown token starting with a prefix character is a
  ParseError; otherwise it is kept as a positional.

Declaration order matters: the first declaration of a name fixes its value shape,
later compatible declarations only add aliases.
"""
import copy
import logging
from collections import namedtuple
from enum import Enum

from .compiler import compile
from .descriptors import Descriptor, Modifier
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


class InputMode(Enum):
    STANDARD = "standard"
    BSD_BUNDLED = "bsd"
    MERGED_BUNDLED = "merged"
    SUBCOMMAND = "subcommand"


class Settings(namedtuple("Settings", ("case_sensitive", "mode", "error_on_unknown"), defaults=(True, InputMode.STANDARD, True))):
    """
    immutable parser configuration (see the module docstring for each field).
    """
    __slots__ = ()

    def __new__(cls, case_sensitive=True, mode=InputMode.STANDARD, error_on_unknown=True):
        if not isinstance(case_sensitive, bool):
            raise TypeError("settings 'case_sensitive' must be a boolean")
        if isinstance(mode, str):
            try:
                mode = InputMode(mode)
            except ValueError:
                raise ValueError("settings 'mode' must be one of %s" % ", ".join(
                    repr(member.value) for member in InputMode
                )) from None
        if not isinstance(mode, InputMode):
            raise TypeError("settings 'mode' must be an InputMode member")
        if not isinstance(error_on_unknown, bool):
            raise TypeError("settings 'error_on_unknown' must be a boolean")
        return super().__new__(cls, case_sensitive, mode, error_on_unknown)

    @property
    def bundled(self):
        return self.mode in (InputMode.BSD_BUNDLED, InputMode.MERGED_BUNDLED)

    def fold(self, handle, /):
        """return the key `handle` is indexed under."""
        return handle if self.case_sensitive else handle.lower()


class FrozenRegistry(StorageGuard):
    """
    read-only view over a finished set of declarations.

    Properties
    - settings: Settings
    - handles: mapping handle → Descriptor
    - names: mapping canonical name → Descriptor
    - subcommands: number of SUBCOMMAND descriptors
    """

    settings = view("settings")
    handles = view("handles")
    names = view("names")

    def __new__(cls, settings, handles, names, /):
        with super().__new__(cls) as self:
            setattr(self, "-settings", settings)
            setattr(self, "-handles", dict(handles))
            setattr(self, "-names", dict(names))
        return self

    @property
    def subcommands(self):
        return sum(descriptor.subcommand for descriptor in self.names.values())

    def lookup(self, handle, /):
        """return the descriptor bound to `handle`, or None."""
        return self.handles.get(self.settings.fold(handle))

    def handle_has_name(self, handle, name, /):
        """tell whether `handle` resolves to the option called `name`."""
        descriptor = self.lookup(handle)
        return descriptor is not None and descriptor.name == name

    def __contains__(self, name):
        return name in self.names

    def __iter__(self):
        return iter(sorted(self.names.values()))

    def __len__(self):
        return len(self.names)

    def __rich_repr__(self):
        yield "settings", self.settings
        yield "options", sorted(self.names.values())

    def __repr__(self):
        return "frozen-registry(settings=%r, names=%r)" % (self.settings, sorted(self.names))


class Registry:
    """
    mutable builder collecting option declarations.

    >>> registry = Registry(mode="subcommand")
    >>> registry.option("[&]deploy").subcommand
    True
    """

    def __init__(self, settings=Unset, /, **overrides):
        if settings is not Unset and not isinstance(settings, Settings):
            raise TypeError("registry settings must be a Settings instance")
        self._settings = Settings(**(coalesce(settings, Settings())._asdict() | overrides))
        self._handles = {}
        self._names = {}

    @property
    def settings(self):
        return self._settings

    @property
    def empty(self):
        return not self._names

    def option(self, spec, name="", /):
        """
        compile `spec` and register it under its canonical name.

        rules
        - unknown name → the descriptor is added with all its handles.
        - known, compatible name → the new handles become aliases of the stored option.
        - known, incompatible name → IncompatibleRedeclarationError.
        - any handle already bound (to this or another option) → HandleRepeatedError.

        the registry is left untouched when an error is raised.

        returns
        - the registered Descriptor (the merged one when aliasing).
        """
        descriptor = compile(spec, name, subcommands=self._settings.mode is InputMode.SUBCOMMAND)

        existing = self._names.get(descriptor.name)
        if existing is not None and not existing.compatible(descriptor):
            raise IncompatibleRedeclarationError(
                "options with the same name must be compatible: %r (declared by %r)" % (descriptor.name, spec),
                spec=spec,
                name=descriptor.name,
                hint="declare %r with the same cardinality, assignment, collection and value type" % descriptor.name,
            )

        keys = set()
        for handle in sorted(descriptor.handles):
            key = self._settings.fold(handle)
            if key in self._handles or key in keys:
                raise HandleRepeatedError(
                    "handle repeated: %r (declared by %r)" % (handle, spec),
                    spec=spec,
                    handle=handle,
                    name=self._handles[key].name if key in self._handles else descriptor.name,
                    hint="every handle may be declared only once in a registry",
                )
            keys.add(key)

        if existing is not None:
            descriptor = copy.replace(
                existing,
                handles=existing.handles | descriptor.handles,
                modifier=Modifier.SUBCOMMAND if descriptor.subcommand else existing.modifier,
            )
            logger.debug("merged %r into option %r", spec, descriptor.name)
        else:
            logger.debug("registered option %r from %r", descriptor.name, spec)

        self._names[descriptor.name] = descriptor
        for handle in descriptor.handles:
            self._handles[self._settings.fold(handle)] = descriptor
        return descriptor

    def lookup(self, handle, /):
        return self._handles.get(self._settings.fold(handle))

    def handle_has_name(self, handle, name, /):
        descriptor = self.lookup(handle)
        return descriptor is not None and descriptor.name == name

    def clear(self):
        """forget every declaration (settings are kept)."""
        self._handles.clear()
        self._names.clear()

    def freeze(self):
        """return an immutable snapshot suitable for matching."""
        return FrozenRegistry(self._settings, self._handles, self._names)

    def __contains__(self, name):
        return name in self._names

    def __iter__(self):
        return iter(sorted(self._names.values()))

    def __len__(self):
        return len(self._names)

    def __repr__(self):
        return "registry(settings=%r, names=%r)" % (self._settings, sorted(self._names))


__all__ = (
    "InputMode",
    "Settings",
    "FrozenRegistry",
    "Registry",
)
