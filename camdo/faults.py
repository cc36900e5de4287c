"""
Camdo faults (dispatch errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the dispatcher
  can surface. Codes are grouped by domain to keep copy consistent and make
  logs/searches predictable.
- DispatchException: base type carrying message + options that knows how to
  render itself with Rich and how to turn itself into a result payload.
- trigger(): central entry point to surface a configuration fault (raise or render).
- getdoc(): optional description lookup for a code from the host application.

Two audiences
- User faults (missing or invalid arguments) are recovered locally: the dispatcher
  converts them with __result__() and sends them through the same sink as any
  successful result. There is no separate error channel for the transport.
- Configuration faults (an argument referencing a type nobody defined) are bugs
  in the host's setup. They go through trigger(): raised outside shell mode,
  rendered to stderr in shell mode. They never reach the sink.

Integration
- The host application can expose __codes__, __styles__, __docs__ and __prog__
  in __main__ to relabel codes, restyle output, attach docs, and name itself.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .logs import logger
from .utils import Unset

console = Console(stderr=True)

DEFAULT_COLOR = 0xFF4DA6


class FaultCode(IntEnum):
    """
    canonical fault codes used across the dispatcher (stable identifiers).

    grouping
    - arguments (1112x)
      • MISSING_ARGUMENT, INVALID_ARGUMENT
    - configuration (1113x)
      • UNKNOWN_TYPE

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired.
    """
    # --- argument errors (11xxx) ---
    MISSING_ARGUMENT            = 11121
    INVALID_ARGUMENT            = 11122

    # --- configuration errors (11xxx) ---
    UNKNOWN_TYPE                = 11131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(sys.modules["__main__"], "__codes__", {}).get(self, self.value))


class DispatchException(Exception):
    """
    base fault raised while resolving a dispatch cycle.

    options (all optional, merged through __replace__)
    - title, code, hint, docs: copy shown to the user (docs as a rendered
      footer and as the payload's `docs` entry).
    - argument, command, value: what the fault is about.
    - shell, fancy, colorful: rendering flags forwarded by the dispatcher.
    - color: payload colour used by __result__().
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def title(self):
        return self.options.get("title", "dispatch error")

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def docs(self):
        return self.options.get("docs")

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        main = sys.modules["__main__"]
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
            "docs": "dim #C8C8D0",  # muted host documentation footer
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        code = self.code.normalize() if isinstance(self.code, FaultCode) else "-"

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", "camdo"), "prog-name"),
            " — ",
            text(code, "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        parts = [message]
        if self.hint:
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))
        if self.docs:
            parts.append(text(self.docs, "docs"))

        if fancy:
            return Panel(Group(*parts), title=header, title_align="left")

        return Group(header, *parts)

    def __result__(self):
        """
        return the payload sent through the sink for this fault.

        the payload follows the common result shape (title/description/color) so a
        transport renders it like any other result; `code` is added for hosts that
        want to tell faults apart, and `docs` when the host documents the code.
        """
        payload = {
            "title": self.title,
            "description": str(self),
            "color": self.options.get("color", DEFAULT_COLOR),
            "code": self.code.normalize() if isinstance(self.code, FaultCode) else None,
        }
        if self.docs:
            payload["docs"] = self.docs
        return payload

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        logger.error("%s", self, extra={"code": self.code})
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ArgumentError(DispatchException):
    """user-input fault: recovered locally and sent to the sink."""


class MissingArgumentError(ArgumentError): ...
class InvalidArgumentError(ArgumentError): ...


class ConfigurationError(DispatchException):
    """setup fault: surfaced through trigger(), never sent to the sink."""


class UnknownTypeError(ConfigurationError): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see DispatchException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise the fault is raised.
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
    are FaultCode instances and values are short documentation strings. when
    not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(sys.modules["__main__"], "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "DispatchException",
    "ArgumentError",
    "MissingArgumentError",
    "InvalidArgumentError",
    "ConfigurationError",
    "UnknownTypeError",
    "FaultCode",
    "trigger",
    "getdoc",
)
