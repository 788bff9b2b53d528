"""
Hinge faults (fatal parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fatal error the
  engine can raise. Codes are grouped by domain to keep copy consistent and
  make logs/searches predictable.
- HingeException: base type that carries message + options and knows how to
  render itself in a friendly, actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Error model
- A consumer that does not recognize its input returns Empty; that is never a fault.
- A consumer that committed to a match but cannot complete it raises one of the
  exceptions below. Composites never catch them: they propagate unchanged up to
  the façade, which raises them (library use) or prints them and exits (shell use).

Integration
- Consumers raise faults with code/title/hint options attached.
- The façade merges its runtime options (tool, shell, fancy, colorful) through
  copy.replace(...) and calls __trigger__().
"""
import copy
import sys
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
    - consumption (1110x)
      • EXPECTING_VALUE, NOT_ENOUGH_ELEMENTS
    - validation (1120x)
      • EXPECTING_ITEM
    - top level (1130x)
      • NOTHING_CONSUMED, UNPARSED_TOKENS
    - output access (1140x)
      • NOT_A_VALUE, NOT_A_LIST, NOT_A_MAP, INDEX_OUT_OF_BOUNDS, UNKNOWN_ITEM
    - delegated errors (1150x)
      • DELEGATED_ERROR

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired (e.g., to shorter labels).
    """
    # --- consumption errors (111xx) ---
    EXPECTING_VALUE             = 11101
    NOT_ENOUGH_ELEMENTS         = 11102

    # --- validation errors (112xx) ---
    EXPECTING_ITEM              = 11201

    # --- top level errors (113xx) ---
    NOTHING_CONSUMED            = 11301
    UNPARSED_TOKENS             = 11302

    # --- output access errors (114xx) ---
    NOT_A_VALUE                 = 11401
    NOT_A_LIST                  = 11402
    NOT_A_MAP                   = 11403
    INDEX_OUT_OF_BOUNDS         = 11404
    UNKNOWN_ITEM                = 11405

    # --- delegated errors (115xx) ---
    DELEGATED_ERROR             = 11501

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class HingeException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

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
            code = self.options["code"].normalize()
        except KeyError:
            code = "?"

        tool = self.options.get("tool")
        prog = text(getattr(main, "__prog__", getattr(tool, "name", None) or "hinge"), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code, styler("code")),
            " | ",
            text(self.options.get("title", "parse error").title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            width = console.width - 4
            try:
                width = int(width * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(*renders), title=header, title_align="left", width=width)

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ExpectingValueError(HingeException): ...
class NotEnoughElementsError(HingeException): ...
class ExpectingItemError(HingeException): ...
class NothingConsumedError(HingeException): ...
class UnparsedTokensError(HingeException): ...
class NotAValueError(HingeException): ...
class NotAListError(HingeException): ...
class NotAMapError(HingeException): ...
class IndexOutOfBoundsError(HingeException): ...
class UnknownItemError(HingeException): ...


class DelegatedError(HingeException):
    """
    wrapper for an external error surfaced through the engine.

    the wrapped exception is kept under options["exception"] and its text is
    used as the message; hinge never interprets it.
    """

    def __init__(self, exception=Unset, /, **options):
        if isinstance(exception, BaseException):
            options.setdefault("exception", exception)
            options.setdefault("code", FaultCode.DELEGATED_ERROR)
            options.setdefault("title", "delegated error")
            exception = str(exception)
        super().__init__(exception, **options)


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see HingeException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised.

    typical options
    - tool, shell, fancy, colorful, title, code, hint, docs, and any other
      context the reporter may want to show (e.g., token/name/index).
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

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "HingeException",
    "ExpectingValueError",
    "NotEnoughElementsError",
    "ExpectingItemError",
    "NothingConsumedError",
    "UnparsedTokensError",
    "NotAValueError",
    "NotAListError",
    "NotAMapError",
    "IndexOutOfBoundsError",
    "UnknownItemError",
    "DelegatedError",
    "FaultCode",
    "trigger",
    "getdoc",
)
