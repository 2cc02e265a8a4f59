"""
Termina faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the library
  can surface. Codes are grouped by domain to keep searches predictable.
- ConsoleException / ConsoleWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- ConfigurationError: an input was declared wrong (e.g. an option name without dashes).
  Raised immediately at construction time, never recovered internally.
- PreconditionError: the process environment cannot feed the parser (e.g. no argv).
- ValidationError: required options/commands missing. The parser itself never raises
  it; missing parameters are reported as data and only Console.validate() turns them
  into a fault so the host gets a clean usage message instead of a traceback.

Integration
- In non-shell mode, exceptions are raised and warnings go through warnings.warn.
- In shell mode, they are rendered via rich on stderr (exceptions then exit with 1).
"""
import inspect
import os.path
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping (by high-level domain)
    - configuration (211xx)
      • INVALID_NAME, INVALID_VALUE_MODE
    - precondition (212xx)
      • MISSING_ARGUMENTS
    - validation (213xx)
      • REQUIRED_PARAMS_NOT_FOUND
    - warnings (222xx)
      • DUPLICATE_INPUT
    """
    # --- configuration errors (211xx) ---
    INVALID_NAME                = 21101
    INVALID_VALUE_MODE          = 21102

    # --- precondition errors (212xx) ---
    MISSING_ARGUMENTS           = 21201

    # --- validation errors (213xx) ---
    REQUIRED_PARAMS_NOT_FOUND   = 21301

    # --- warnings (222xx) ---
    DUPLICATE_INPUT             = 22201

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog():
    try:
        return os.path.basename(sys.argv[0]) or "termina"
    except IndexError:
        return "termina"


def _render(self, palette, title_style, message_style):
    main = __import__("__main__")

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if self.options["colorful"] else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not self.options["colorful"]:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    prog = text(getattr(main, "__prog__", self.options["prog"]), styler("prog-name"))

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if isinstance(code := self.options["code"], FaultCode) else "-----", styler("code")),
        " | ",
        text(self.options["title"].title(), styler(title_style)),
        " ]"
    )
    message = text(self.message, styler(message_style))
    hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options["hint"], styler("hint")))

    if self.options["fancy"]:
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class ConsoleException(Exception):
    """
    Base type for every error raised by termina.

    Subclasses declare their default code/title/hint as class attributes; any of
    them can be overridden per instance through options.
    """
    code = Unset
    title = "console error"
    hint = ""

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType({
            "code": self.code,
            "title": self.title,
            "hint": self.hint,
            "prog": _prog(),
            "shell": False,
            "fancy": False,
            "colorful": True,
        } | options)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, "error-title", "error-message")

    def __trigger__(self) -> None:
        if not self.options["shell"]:
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConfigurationError(ConsoleException, ValueError):
    title = "configuration error"


class PreconditionError(ConsoleException, RuntimeError):
    title = "precondition error"


class ValidationError(ConsoleException):
    title = "validation error"


class InvalidNameError(ConfigurationError):
    code = FaultCode.INVALID_NAME
    title = "invalid name"
    hint = "use a short option, a long option or both, with dashes (-o, --option or -o|--option)"


class InvalidValueModeError(ConfigurationError, TypeError):
    code = FaultCode.INVALID_VALUE_MODE
    title = "invalid value mode"
    hint = "pass one of the ValueMode constants, optionally or-ed with ValueMode.IS_ARRAY"


class MissingArgumentsError(PreconditionError):
    code = FaultCode.MISSING_ARGUMENTS
    title = "missing arguments"
    hint = "run from a process with an argument vector or pass a ProcessEnvironment explicitly"


class RequiredParamsNotFoundError(ValidationError):
    code = FaultCode.REQUIRED_PARAMS_NOT_FOUND
    title = "required parameters not found"
    hint = "check the usage above and pass every required parameter"

    def __init__(self, message=Unset, /, **options):
        super().__init__(message, **options)
        self.params = tuple(self.options.get("params", ()))


class ConsoleWarning(ABC, Warning):
    code = Unset
    title = "console warning"
    hint = ""

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType({
            "code": self.code,
            "title": self.title,
            "hint": self.hint,
            "prog": _prog(),
            "shell": False,
            "fancy": False,
            "colorful": True,
        } | options)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning-title", "warning-message")

    def __trigger__(self) -> None:
        if not self.options["shell"]:
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicateInputWarning(ConsoleWarning):
    code = FaultCode.DUPLICATE_INPUT
    title = "duplicate input"
    hint = "the previously registered input was replaced"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings are emitted through the warnings machinery.

    typical options
    - shell, fancy, colorful, prog, title, code, hint, and any other context the
      reporter may want to show (e.g. params).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    returns None when not found.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ConsoleException",
    "ConfigurationError",
    "PreconditionError",
    "ValidationError",
    "InvalidNameError",
    "InvalidValueModeError",
    "MissingArgumentsError",
    "RequiredParamsNotFoundError",
    "ConsoleWarning",
    "DuplicateInputWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
