"""
Flagstone faults (parse errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for the five parse failure kinds.
- ParseError: base type carrying a message plus read-only options; knows how to
  render itself with rich and how to surface itself (raise or print and exit).
- trigger(): central entry point to surface a fault with runtime options.

Kinds
- TooFewArgumentsError          fewer tokens than required positional slots
- TooManyArgumentsError         a token matched no flag and no free slot
- MissingArgumentValueError     a value-accepting flag had no usable value
- DuplicateArgumentError        the same flag matched twice in one parse
- RequiredArgumentMissingError  required flags left unsatisfied (all listed)

Integration
- App.parse_internal raises these directly; App.parse hands them to trigger()
  together with the app (tool), ui flags and the rendered help (usage).
- In non-shell mode __trigger__ re-raises; in shell mode the fault is printed
  to stderr through rich and the process exits with status 1.
"""
import logging
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

logger = logging.getLogger(__name__)


class FaultCode(IntEnum):
    """
    canonical parse fault codes (stable identifiers).

    - positionals (2110x): TOO_FEW_ARGUMENTS, TOO_MANY_ARGUMENTS
    - flags (2111x): MISSING_ARGUMENT_VALUE, DUPLICATE_ARGUMENT,
      REQUIRED_ARGUMENT_MISSING
    """
    TOO_FEW_ARGUMENTS         = 21101
    TOO_MANY_ARGUMENTS        = 21102

    MISSING_ARGUMENT_VALUE    = 21111
    DUPLICATE_ARGUMENT        = 21112
    REQUIRED_ARGUMENT_MISSING = 21113

    def normalize(self):
        """
        return a host-normalized string for this code.

        a __codes__ mapping in __main__ may override numeric ids with labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParseError(Exception):
    """
    base class of every parse failure.

    options commonly carried
    - title, code, hint: set where the fault is raised
    - tool, shell, fancy, colorful: set by App.trigger before surfacing
    - details: extra lines (e.g. help rows of offending arguments)
    - usage: rendered help appended after the diagnostic
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            "error-message": "#C8C8D0",
            "error-detail": "#9CA3AF",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        try:
            prog = self.options["tool"].exec_name
        except KeyError:
            prog = "flagstone"
        prog = text(getattr(main, "__prog__", prog), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.options["code"].normalize(), styler("code")),
            " | ",
            text(self.options["title"].title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        details = [text("  " + detail, styler("error-detail")) for detail in self.options.get("details", ())]
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options["hint"], styler("hint")))

        if fancy:
            body = Panel(Group(message, *details, hint), title=header, title_align="left")
        else:
            body = Group(header, message, *details, hint)

        if (usage := self.options.get("usage")) is not None:
            return Group(body, Text(""), usage)
        return body

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        Console(stderr=True).print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class TooFewArgumentsError(ParseError):
    @property
    def expected(self):
        return self.options["expected"]

    @property
    def received(self):
        return self.options["received"]


class TooManyArgumentsError(ParseError):
    @property
    def token(self):
        return self.options["token"]


class MissingArgumentValueError(ParseError):
    @property
    def name(self):
        return self.options["name"]


class DuplicateArgumentError(ParseError):
    @property
    def name(self):
        return self.options["name"]


class RequiredArgumentMissingError(ParseError):
    @property
    def names(self):
        return tuple(self.options["names"])


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see ParseError).
    - options are merged into a copy of the fault before triggering, so the
      original exception object is never mutated.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    logger.debug("triggering %s (shell=%s)", type(fault).__name__, options.get("shell", False))
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "ParseError",
    "TooFewArgumentsError",
    "TooManyArgumentsError",
    "MissingArgumentValueError",
    "DuplicateArgumentError",
    "RequiredArgumentMissingError",
    "trigger",
)
