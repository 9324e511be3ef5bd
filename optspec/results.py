"""
optspec results: what one successful match produced.

A Result maps every canonical name that was seen to the ordered values stored for
it, and keeps the positional (non-option) tokens in encounter order. Presence-only
options store "1" once per occurrence. Results are immutable.

Accessors
- has(name), count(name)
- value(name, default="")  → first stored value, or the default
- values(name)             → every stored value, in order (empty tuple when absent)
- positionals              → non-option tokens, in order
"""
from .utils import *


class Result(StorageGuard):
    """
    immutable result store of one match call.

    >>> result = Result({"age": ["42"]}, ["data"])
    >>> result.value("age"), result.values("missing"), result.positionals
    ('42', (), ('data',))
    """

    positionals = view("positionals")

    def __new__(cls, values=(), positionals=(), /):
        with super().__new__(cls) as self:
            setattr(self, "-values", {name: tuple(items) for name, items in dict(values).items()})
            setattr(self, "-positionals", tuple(positionals))
        return self

    @property
    def _values(self):
        return object.__getattribute__(self, "-values")

    def has(self, name, /):
        """tell whether the option called `name` was seen."""
        return name in self._values

    def count(self, name, /):
        """number of values stored for `name` (0 when absent)."""
        return len(self._values.get(name, ()))

    def value(self, name, default="", /):
        """first value stored for `name`, or `default` when the option was not seen."""
        try:
            return self._values[name][0]
        except (KeyError, IndexError):
            return default

    def values(self, name, /):
        return self._values.get(name, ())

    def names(self):
        return tuple(self._values)

    def __contains__(self, name):
        return name in self._values

    def __getitem__(self, name):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __rich_repr__(self):
        yield "values", dict(self._values)
        yield "positionals", self.positionals

    def __repr__(self):
        return "result(values=%r, positionals=%r)" % (dict(self._values), self.positionals)


__all__ = (
    "Result",
)
