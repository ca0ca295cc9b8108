r"""
Flagstone argument declarations.

Overview
- Arg: one named argument's matching rules, value semantics and metadata.
  Built once through a fluent builder, then only read by App.

- Builder (each call returns the same Arg)
  • add_short(token) / add_long(token): append an alias (duplicates ignored).
  • accepts_value(): the following token is consumed as the value.
  • help(text): help text shown in the options table.
  • set_default(text): default value; forces required=False.
  • environment(name): environment variable whose presence satisfies the arg.
  • set_required(): the arg must be satisfied (unless it has a default).

- Introspection (read-only properties)
  • name, shorts, longs, valued, required, default, envvar, descr

- Queries used by App
  • matches(token): exact alias comparison (no prefixes, no case folding).
  • is_done(completed): completed, or not required.

Notes
- An Arg without any alias is legal; it can only be satisfied by its
  environment variable or its default ("default-completed").
- Completion state is not stored here; App tracks it per parse call.

Example
    >>> verbose = Arg("Verbose").add_short("-v").add_long("--verbose")
    >>> output = Arg("Output").add_short("-o").accepts_value().set_default("out.txt")
    >>> output.matches("-o"), output.matches("-O")
    (True, False)
"""
import functools
import operator
import re

from rich.text import Text

from .utils import *


class ArgumentType(type):
    """
    Metaclass giving declarations stable representations and read-only fields.

    Responsibilities
    - Expose every name listed in __introspectable__ as a mirror() property over
      the matching "_name" backing field.
    - Provide __repr__/__rich_repr__ built from the introspectable fields (or
      __displayable__ when narrowed).
    - Derive __typename__ from the class name for messages ("arg").
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Example
            - arg(name='Verbose', shorts=('-v',), longs=('--verbose',), ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_token(self, kind, token, /):
    """
    Internal: validate a builder string argument (alias, help, env name, ...).

    Raises
    - TypeError: token is not a string.
    - ValueError: token is empty after trimming.
    """
    if not isinstance(token, str):
        raise TypeError(f"{type(self).__typename__} {kind} must be a string")
    elif not token.strip():
        raise ValueError(f"{type(self).__typename__} {kind} cannot be empty")
    return token


class Arg(metaclass=ArgumentType):
    __introspectable__ = (
        "name",
        "shorts",
        "longs",
        "valued",
        "required",
        "default",
        "envvar",
        "descr",
    )

    def __init__(self, name, /):
        self._name = _sanitize_token(self, "name", name)
        self._shorts = ()
        self._longs = ()
        self._valued = False
        self._required = False
        self._default = Unset
        self._envvar = Unset
        self._descr = Unset

    def add_short(self, short, /):
        """
        Append a short alias (e.g. "-v"). An alias already present is kept once.
        """
        if (short := _sanitize_token(self, "short alias", short)) not in self._shorts:
            self._shorts += (short,)
        return self

    def add_long(self, long, /):
        """
        Append a long alias (e.g. "--value"). An alias already present is kept once.
        """
        if (long := _sanitize_token(self, "long alias", long)) not in self._longs:
            self._longs += (long,)
        return self

    def accepts_value(self):
        self._valued = True
        return self

    def help(self, help, /):
        self._descr = _sanitize_token(self, "help", help)
        return self

    def set_default(self, default, /):
        """
        Set the default value. A defaulted Arg is never required.
        """
        if not isinstance(default, str):
            raise TypeError(f"{type(self).__typename__} default must be a string")
        self._default = default
        self._required = False
        return self

    def environment(self, envvar, /):
        self._envvar = _sanitize_token(self, "environment variable", envvar)
        return self

    def set_required(self):
        # Defaults and requiredness are mutually exclusive; the default wins.
        self._required = self._default is Unset
        return self

    @property
    def aliases(self):
        return self._shorts + self._longs

    def matches(self, token, /):
        return token in self._shorts or token in self._longs

    def is_done(self, completed=False, /):
        return completed or not self._required

    def __str__(self):
        """
        Plain help row: shorts, longs, value marker and help text, tab separated.
        """
        row = ""
        if self._shorts:
            row += "  " + ",".join(self._shorts)
        row += "\t"
        if self._longs:
            row += ",".join(self._longs)
        row += "\t"
        if self._valued:
            row += "(value)\t"
        return row + coalesce(self._descr, "")

    def __rich__(self):
        return Text(str(self))


__all__ = (
    "ArgumentType",
    "Arg",
)
