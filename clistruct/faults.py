"""
clistruct faults (parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing failure.
- ParseError: base type carrying message + options, able to render itself with rich.
- ParseExit: bundle of several faults reported together (missing mandatory fields).
- HelpExit: the clean, status-0 exit taken when help was requested.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Output channel
- Diagnostics go to standard output, like the help text. In plain mode only the
  message line is printed, e.g. "Unknown option '--nope'". Fancy mode wraps the
  message and hint in a panel titled "[ prog — code | Title ]".

Integration
- The parser raises faults where they are detected, captures them into an outcome
  and hands them to trigger(fault, **ctx). In shell mode the fault is printed and the
  process exits with status 1; otherwise the exception is raised to the caller.
"""
import copy
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

console = Console(highlight=False, soft_wrap=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping
    - switches (1111x/1112x)
      • UNKNOWN_OPTION, MISSING_VALUE, MISSING_MANDATORY_FIELD
    - values (1113x)
      • OUT_OF_RANGE, INVALID_INTEGER, INVALID_FLOAT
    """
    # --- switch errors (111xx) ---
    UNKNOWN_OPTION              = 11112
    MISSING_VALUE               = 11117
    MISSING_MANDATORY_FIELD     = 11125

    # --- value errors (111xx) ---
    OUT_OF_RANGE                = 11132
    INVALID_INTEGER             = 11133
    INVALID_FLOAT               = 11134

    def normalize(self):
        """
        Label shown in fancy headers: the host may relabel codes through a
        ``__codes__`` mapping in __main__, the number is used otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styles(main, defaults):
    return defaultdict(str, defaults | getattr(main, "__styles__", {}))


class ParseError(Exception):
    """
    Base class of every parse fault.

    Options (read-only mapping) commonly carried
    - code: FaultCode
    - title: short lowercase title ("unknown option")
    - hint: one actionable sentence
    - input/value/field: the offending token, value or field name
    - prog, shell, fancy, colorful: rendering context merged in by the parser
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = _styles(main, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        message = text(self.message, "error-message")

        if not self.options.get("fancy", False):
            return message

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), "prog-name")
        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.options["code"].normalize(), "code"),
            " | ",
            text(self.options["title"].title(), "error-title"),
            " ]"
        )
        parts = [message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
        if docs := self.options.get("docs"):
            parts.append(text(docs))
        return Panel(Group(*parts), title=header, title_align="left", expand=False)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(ParseError): ...
class MissingValueError(ParseError): ...
class OutOfRangeError(ParseError): ...
class InvalidValueError(ParseError): ...
class InvalidIntegerError(InvalidValueError): ...
class InvalidFloatError(InvalidValueError): ...
class MissingMandatoryFieldError(ParseError): ...


class ParseExit(ExceptionGroup[ParseError]):
    """
    Several faults surfaced at once (every missing mandatory field is reported
    before the process stops).
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        # each fault is rendered with the bundle's context (fancy, colorful, prog)
        return Group(*(copy.replace(exception, **self.options) for exception in self.exceptions))

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)


class HelpExit(SystemExit):
    """
    Raised (or taken) when help was requested: the usage text is the payload and
    the exit status is always 0.
    """

    def __init__(self, text, /, **options):
        super().__init__(0)
        self.text = text
        self.options = MappingProxyType(options)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self.text, markup=False, emoji=False, end="")
        sys.exit(0)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.text, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    Merge the runtime options (prog, shell, fancy, colorful, ...) into a copy of
    the fault and fire it: printed and exited in shell mode, raised otherwise.

    Anything supporting the __trigger__/__replace__ pair is accepted (ParseError,
    ParseExit, HelpExit).
    """
    for method in ("__trigger__", "__replace__"):
        if not callable(getattr(fault, method, None)):
            raise TypeError("trigger() argument must define %s()" % method)
    logger.debug("triggering %s (shell=%s)", type(fault).__name__, options.get("shell"))
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    Look up the host's documentation for a code in ``__main__.__docs__``;
    None when the host has none.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "ParseError",
    "UnknownOptionError",
    "MissingValueError",
    "OutOfRangeError",
    "InvalidValueError",
    "InvalidIntegerError",
    "InvalidFloatError",
    "MissingMandatoryFieldError",
    "ParseExit",
    "HelpExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
