"""
Flagstone application layer: declare, parse and render help.

What this module provides
- App: owns the ordered Arg declarations and the ordered positional
  (untagged) names, parses argv-like token streams and renders help.
- Completion: per-call record of which Args a parse has satisfied.

Parsing in one glance
    >>> app = (
    ...     App("prog")
    ...     .untagged_required_arg("first_input")
    ...     .untagged_optional_arg("second_input")
    ...     .arg(Arg("TestArg").add_short("-vv"))
    ... )
    >>> app.parse_internal(["prog", "hello", "-vv"])
    {'path': 'prog', 'first_input': 'hello', 'TestArg': 'true'}

Phases of parse_internal
- the first token is the executable path (key "path").
- each following token is a flag (matched by alias), else the next required
  positional, else the next optional positional, else an error.
- post-pass: environment fallback, required validation, default filling.

Completion state lives in a Completion created by each call, so one App can
be parsed repeatedly (or from several threads) without any reset step.

See also
- flagstone.arguments for Arg.
- flagstone.faults for the error kinds and their rendering.
"""
import logging
import os
import sys
from collections import defaultdict

from rich.console import Console, Group
from rich.padding import Padding
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import ArgumentType, Arg
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)

# Stored under "path" when the token stream is empty
PLACEHOLDER_PATH = ".\\"

_HELP_TOKENS = ("-help", "--help")
_VERSION_TOKENS = ("-version", "--version")


class Completion:
    """
    Which Args of one App have been satisfied during a single parse.

    Args are tracked by identity, so two declarations sharing a name are still
    told apart.
    """

    def __init__(self, args=()):
        self._completed = dict.fromkeys(map(id, args), False)

    def is_completed(self, arg):
        return self._completed.get(id(arg), False)

    def set_completed(self, arg):
        self._completed[id(arg)] = True

    def is_done(self, arg):
        return arg.is_done(self.is_completed(arg))

    def clear(self):
        self._completed = dict.fromkeys(self._completed, False)


def _collides(aliases, reserved):
    return any(alias.lower() in reserved for alias in aliases)


class App(metaclass=ArgumentType):
    __introspectable__ = (
        "exec_name",
        "pretty_name",
        "version",
        "author",
        "about",
        "args",
        "untagged_required",
        "untagged_optional",
        "manual_help_flag",
        "manual_version_flag",
        "shell",
        "fancy",
        "colorful",
    )
    __displayable__ = (
        "exec_name",
        "pretty_name",
        "version",
        "args",
        "untagged_required",
        "untagged_optional",
    )

    def __init__(
            self,
            exec_name,
            /,
            pretty_name=Unset,
            version=Unset,
            author=Unset,
            about=Unset,
            *,
            shell=True,
            fancy=False,
            colorful=True,
    ):
        if not isinstance(exec_name, str):
            raise TypeError("app 'exec_name' must be a string")
        elif not exec_name.strip():
            raise ValueError("app 'exec_name' cannot be empty")

        for field, value in (("pretty_name", pretty_name), ("version", version), ("author", author), ("about", about)):
            if not isinstance(value, str | Unset):
                raise TypeError(f"app {field!r} must be a string")
            elif isinstance(value, str) and not value.strip():
                raise ValueError(f"app {field!r} cannot be empty")

        self._exec_name = exec_name
        self._pretty_name = pretty_name
        self._version = version
        self._author = author
        self._about = about

        self._args = []
        self._untagged_required = []
        self._untagged_optional = []

        self._manual_help_flag = False
        self._manual_version_flag = False

        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

    # --- registration ---

    def arg(self, arg, /):
        """
        Register a declaration.

        Aliases equal (ignoring case) to -help/--help or -version/--version
        raise the manual_help_flag/manual_version_flag markers for a
        surrounding driver. Markers are never lowered.
        """
        if not isinstance(arg, Arg):
            raise TypeError("app.arg() argument must be an Arg")

        if _collides(arg.aliases, _HELP_TOKENS):
            self._manual_help_flag = True
        if _collides(arg.aliases, _VERSION_TOKENS):
            self._manual_version_flag = True

        self._args.append(arg)
        return self

    def untagged_required_arg(self, name, /):
        if not isinstance(name, str):
            raise TypeError("untagged argument name must be a string")
        self._untagged_required.append(name)
        return self

    def untagged_optional_arg(self, name, /):
        if not isinstance(name, str):
            raise TypeError("untagged argument name must be a string")
        self._untagged_optional.append(name)
        return self

    # --- lookups ---

    def get_arg(self, name, /):
        return next((arg for arg in self._args if arg.name == name), None)

    def match_arg(self, token, /):
        return next((arg for arg in self._args if arg.matches(token)), None)

    def check_arg(self, token, /):
        return any(arg.matches(token) for arg in self._args)

    # --- parsing ---

    def parse_internal(self, tokens, /, environ=None):
        """
        Parse an argv-like token stream into {name: value}.

        parameters
        - tokens: Iterable[str]; the first item is the executable path.
        - environ: Mapping[str, str] | None; where environment fallbacks are
          looked up (presence only). Defaults to os.environ.

        returns
        - dict[str, str]: declared Arg names, positional names and "path".
          Flags without values resolve to "true".

        raises
        - TooManyArgumentsError, MissingArgumentValueError,
          DuplicateArgumentError, TooFewArgumentsError,
          RequiredArgumentMissingError
        """
        environ = os.environ if environ is None else environ
        completion = Completion(self._args)
        tokens = iter(tokens)
        output = {}

        required = 0
        optional = 0

        output["path"] = next(tokens, PLACEHOLDER_PATH)
        logger.debug("parsing %r for %r", output["path"], self._exec_name)

        # one token of lookahead: a value-accepting flag must not swallow the next flag
        lookahead = next(tokens, Unset)
        while lookahead is not Unset:
            token, lookahead = lookahead, next(tokens, Unset)

            if (arg := self.match_arg(token)) is not None:
                if completion.is_completed(arg):
                    raise DuplicateArgumentError(
                        "argument %r was given more than once (again as %r)" % (arg.name, token),
                        title="duplicate argument",
                        code=FaultCode.DUPLICATE_ARGUMENT,
                        hint="pass %r only once" % token,
                        name=arg.name,
                    )
                completion.set_completed(arg)

                if not arg.valued:
                    output[arg.name] = "true"
                elif lookahead is not Unset and not self.check_arg(lookahead):
                    output[arg.name], lookahead = lookahead, next(tokens, Unset)
                elif arg.default is not None:
                    logger.debug("%r given without value, using default %r", token, arg.default)
                    output[arg.name] = arg.default
                else:
                    raise MissingArgumentValueError(
                        "no value given for argument %r after %r" % (arg.name, token),
                        title="missing argument value",
                        code=FaultCode.MISSING_ARGUMENT_VALUE,
                        hint="add a value after %r (for example: %s <value>)" % (token, token),
                        name=arg.name,
                    )
                logger.debug("bound %r to %r from %r", arg.name, output[arg.name], token)
            elif required < len(self._untagged_required):
                output[self._untagged_required[required]] = token
                required += 1
            elif optional < len(self._untagged_optional):
                output[self._untagged_optional[optional]] = token
                optional += 1
            else:
                raise TooManyArgumentsError(
                    "too many arguments, %r was unexpected" % token,
                    title="too many arguments",
                    code=FaultCode.TOO_MANY_ARGUMENTS,
                    hint="remove %r or check the usage below" % token,
                    token=token,
                )

        if required < len(self._untagged_required):
            missing = self._untagged_required[required:]
            raise TooFewArgumentsError(
                "too few arguments, missing %s" % ", ".join(map(repr, missing)),
                title="too few arguments",
                code=FaultCode.TOO_FEW_ARGUMENTS,
                hint="provide %s" % " ".join(missing),
                expected=len(self._untagged_required),
                received=required,
            )

        for arg in self._args:
            if completion.is_completed(arg) or arg.envvar is None:
                continue
            if arg.envvar in environ:
                output[arg.name] = arg.default if arg.default is not None else "true"
                completion.set_completed(arg)
                logger.debug("bound %r to %r from environment %r", arg.name, output[arg.name], arg.envvar)

        if missing := [arg.name for arg in self._args if arg.required and not completion.is_done(arg)]:
            raise RequiredArgumentMissingError(
                "required arguments were not provided: %s" % ", ".join(map(repr, missing)),
                title="required argument missing",
                code=FaultCode.REQUIRED_ARGUMENT_MISSING,
                hint="provide every required argument listed above",
                names=tuple(missing),
            )

        for arg in self._args:
            if not completion.is_completed(arg) and arg.default is not None:
                output[arg.name] = arg.default
                completion.set_completed(arg)

        return output

    def parse(self, tokens=None, /, environ=None):
        """
        Parse tokens (default: sys.argv) and return the mapping.

        On failure the fault is surfaced through trigger(): in shell mode a
        diagnostic and the full help are printed to stderr and the process
        exits with status 1; otherwise the fault is raised.
        """
        try:
            return self.parse_internal(sys.argv if tokens is None else tokens, environ=environ)
        except ParseError as fault:
            logger.debug("parse failed: %s", fault)
            self.trigger(fault)

    def trigger(self, fault, /):
        details = []
        if isinstance(fault, MissingArgumentValueError | DuplicateArgumentError):
            details.append(str(self.get_arg(fault.name)))
        elif isinstance(fault, RequiredArgumentMissingError):
            details.extend(str(self.get_arg(name)) for name in fault.names)

        trigger(
            fault,
            tool=self,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
            details=tuple(details),
            usage=self.render_help(),
        )

    # --- help ---

    def render_help(self):
        """
        Build the help screen as a rich renderable.

        Palette keys
        - program-name, version, author, about
        - usage-label, usage-section, optional-marker
        - options-label, short-name, long-name, value-marker, argument-description
        - panel-title

        Customization
        - A mapping named __styles__ in __main__ overrides palette entries.
        - colorful=False strips styling; fancy=True wraps everything in a Panel.
        """
        styles = defaultdict(str, {
            "program-name": "bold #FF4D94",
            "version": "#36C5F0",
            "author": "#9CA3AF",
            "about": "italic #A3A3A3",

            "usage-label": "bold #00E6FF",
            "usage-section": "bold #36C5F0",
            "optional-marker": "bold #FFD600",

            "options-label": "bold #FFFFFF",
            "short-name": "bold #00E6FF",
            "long-name": "bold #22C55E",
            "value-marker": "bold #FFD600",
            "argument-description": "#9CA3AF",

            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        def text(fragment, style=""):
            return Text(str(fragment), styler(style))

        renders = []

        title = text(coalesce(self._pretty_name, self._exec_name), "program-name")
        if not self._fancy:
            renders.append(title)

        credits = []
        if self._version is not Unset:
            credits.append(Text.assemble("  Version: ", text(self._version, "version")))
        if self._author is not Unset:
            credits.append(Text.assemble("\tAuthor: ", text(self._author, "author")))
        if credits:
            renders.append(Text.assemble(*credits))

        if self._about is not Unset:
            renders.append(text(self._about, "about"))
            renders.append(Text(""))

        renders.append(Text.assemble(text("USAGE:", "usage-label"), "\titems marked with * are optional"))
        renders.append(Text(""))

        usage = Text.assemble(text(self._exec_name, "usage-section"))
        for name in self._untagged_required:
            usage.append(" " + name)
        for name in self._untagged_optional:
            usage.append_text(Text.assemble(" " + name, text("*", "optional-marker")))
        if self._args:
            usage.append_text(Text.assemble(" [OPTIONS]", text("*", "optional-marker")))
        renders.append(usage)

        if self._args:
            renders.append(Text(""))
            renders.append(text("Options:", "options-label"))

            table = Table.grid(padding=(0, 2))
            table.add_column(no_wrap=True)
            table.add_column(no_wrap=True)
            table.add_column(no_wrap=True)
            table.add_column()
            for arg in self._args:
                table.add_row(
                    text(",".join(arg.shorts), "short-name"),
                    text(",".join(arg.longs), "long-name"),
                    text("(value)" if arg.valued else "", "value-marker"),
                    text(arg.descr or "", "argument-description"),
                )
            renders.append(Padding(table, (0, 0, 0, 2)))

        if self._fancy:
            return Panel(Group(*renders), title=title, title_align="left")
        return Group(*renders)

    def print_help(self, console=None, /):
        (Console() if console is None else console).print(self.render_help())


__all__ = (
    "Completion",
    "App",
    "PLACEHOLDER_PATH",
)
