"""
Argot faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the
  matching engine can report. Codes are grouped by domain (matching,
  declaration, binding, warnings) to keep logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/deferred/fancy/colorful).

Options carried by faults
- code, title, hint: rendering metadata (always set by the raiser).
- consumed: compatibility degree, i.e. how many tokens were matched before the
  fault; commands rewrite it to the absolute count for the whole token list.
- index: 1-based position of the offending token, when one exists.
- token, argument, handler: context for reporters.

Integration
- Arguments raise faults while extracting; commands enrich them with the
  absolute consumed count; groups swallow them as "did not match".
- In non-shell mode, exceptions are raised; in shell mode, they are rendered via rich.
"""
import copy
import functools
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
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - matching (111xx)
      • ARG_NOT_FOUND, INVALID_VALUE, FLAG_VALUE_REQUIRED, UNKNOWN_ARGS, UNKNOWN_COMMAND
    - declaration (113xx)
      • INVALID_DECLARATION, NO_ARGUMENTS
    - binding (114xx)
      • BINDING
    - warnings (12xxx)
      • DUPLICATED_FLAG

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- matching errors (111xx) ---
    ARG_NOT_FOUND               = 11101
    INVALID_VALUE               = 11102
    FLAG_VALUE_REQUIRED         = 11103
    UNKNOWN_ARGS                = 11104
    UNKNOWN_COMMAND             = 11105

    # --- declaration errors (113xx) ---
    INVALID_DECLARATION         = 11301
    NO_ARGUMENTS                = 11302

    # --- binding errors (114xx) ---
    BINDING                     = 11401

    # --- warnings (12xxx) ---
    DUPLICATED_FLAG             = 12101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


@functools.cache  # Memoize to avoid recomputing common ordinals in messages
def ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _render(fault, palette, title):
    """
    Build the rich renderable shared by exceptions and warnings.

    Layout
    - header: "[ prog — code | Title ]"
    - message: one sentence, suffixed with the ordinal position when known
    - hint: "→ one clear next step"
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    prog = getattr(main, "__prog__", options.get("prog") or os.path.basename(sys.argv[0]) or "argot")
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else code or "?", "code"),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), title),
        " ]"
    )

    message = fault.message if fault.message is not Unset else ""
    if (index := options.get("index")) is not None:
        message = "%s at %s position" % (message, ordinal(index))
    message = text(message, title.replace("title", "message"))
    hint = Text.assemble(text(" → ", "hint-arrow"), text(options.get("hint"), "hint"))

    if fancy:
        try:
            width = int((console.width - 4) * options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(message, hint), title=header, title_align="left", width=width)

    return Group(header, message, hint)


class CommandException(Exception):
    """
    Base class for every error raised by the engine.

    Carries a lowercased, one-sentence message and an immutable mapping of
    options (see module docstring). Instances are cheap to clone through
    copy.replace(fault, **overrides), which is how commands attach the
    absolute consumed count and how trigger() attaches runtime options.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def consumed(self):
        """
        Compatibility degree reported with this fault (0 when unknown).
        """
        return self.options.get("consumed", 0)

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
        }, "error-title")

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ArgNotFoundError(CommandException): ...
class InvalidValueError(CommandException): ...
class FlagValueRequiredError(InvalidValueError): ...
class UnknownArgsError(CommandException): ...
class UnknownCommandError(CommandException): ...
class InvalidDeclarationError(CommandException): ...
class NoArgumentsError(CommandException): ...
class BindingError(CommandException): ...


class CommandWarning(ABC, Warning):
    """
    Base class for non-fatal notices (the match still succeeds).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

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
        }, "warning-title")

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicatedFlagWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into a copy of the fault via copy.replace() before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings are emitted through the warnings module.

    typical options
    - shell, fancy, colorful, deferred, prog, and any other context the reporter
      may want to show (e.g., index/token/consumed).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "CommandException",
    "ArgNotFoundError",
    "InvalidValueError",
    "FlagValueRequiredError",
    "UnknownArgsError",
    "UnknownCommandError",
    "InvalidDeclarationError",
    "NoArgumentsError",
    "BindingError",
    "CommandWarning",
    "DuplicatedFlagWarning",
    "FaultCode",
    "trigger",
)
