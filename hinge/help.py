"""
Hinge help tree.

The help tree is a passive structure parallel to the consumer tree. It is built
fresh for each help request by handing a root HelpTree to the root consumer's
contribute_help(); every node adds what it knows (spellings, a display name, a
description) and asks its children to fill new child nodes. Parsing never reads
it.

Rendering
- generate(): plain text. A node's header is its spellings joined by ", " (or
  its alternative name when it has none), followed by two spaces and the
  description. Children are indented by two spaces per level. A node flagged
  with tabulate aligns the descriptions of its children in one column.
- render()/__rich__(): the same layout as a rich Text, styled with a palette
  that the host can override through __styles__ in __main__.
"""
from collections import defaultdict

from rich.text import Text

from .utils import *


class HelpTree:
    """
    Mutable help node: {names, altname, descr, tabulate, children}.
    """

    __slots__ = ("_names", "_altname", "_descr", "_tabulate", "_children")

    names = mirror("names")
    altname = mirror("altname")
    descr = mirror("descr")
    tabulate = mirror("tabulate")
    children = mirror("children")

    def __init__(self):
        self._names = ()
        self._altname = None
        self._descr = None
        self._tabulate = False
        self._children = ()

    def add_name(self, name, /):
        if not isinstance(name, str):
            raise TypeError("add_name() argument must be a string")
        self._names += (name,)

    def set_alternative_name(self, name, /):
        if not isinstance(name, str):
            raise TypeError("set_alternative_name() argument must be a string")
        self._altname = name

    def set_description(self, descr, /):
        if not isinstance(descr, str):
            raise TypeError("set_description() argument must be a string")
        self._descr = descr

    def set_tabulate(self, tabulate=True, /):
        self._tabulate = bool(tabulate)

    def new_child(self):
        """
        Append and return a fresh child node.
        """
        child = HelpTree()
        self._children += (child,)
        return child

    @property
    def label(self):
        return ", ".join(self._names) or self._altname or ""

    def _lines(self, width=0, depth=0):
        # Yields (depth, label, padding, descr, named) for every node that has something to show.
        label = self.label
        if label or self._descr:
            padding = max(width - len(label), 0) if label and self._descr else 0
            yield depth, label, padding, self._descr, bool(self._names)

        width = max((len(child.label) for child in self._children), default=0) if self._tabulate else 0
        for child in self._children:
            yield from child._lines(width, depth + 1)

    def generate(self):
        lines = []
        for depth, label, padding, descr, _ in self._lines():
            line = "  " * depth + label
            if label and descr:
                line += " " * padding + "  " + descr
            elif descr:
                line += descr
            lines.append(line)
        return "\n".join(lines)

    def render(self, *, colorful=True):
        """
        Render as rich Text.

        Palette keys
        - option-name, metavar, argument-description

        When colorful is False, styling is suppressed.
        """
        styles = defaultdict(str, {
            "option-name": "bold #00E6FF",  # CYAN for spellings
            "metavar": "bold #FFD600",  # AMBER for display names
            "argument-description": "#9CA3AF",  # Muted gray
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        lines = []
        for depth, label, padding, descr, named in self._lines():
            line = Text("  " * depth)
            line.append(label, styler("option-name" if named else "metavar"))
            if label and descr:
                line.append(" " * padding + "  ")
            if descr:
                line.append(descr, styler("argument-description"))
            lines.append(line)
        return Text("\n").join(lines)

    def __rich__(self):
        return self.render()

    def __str__(self):
        return self.generate()

    def __repr__(self):
        return "help-tree(names=%r, altname=%r, descr=%r, tabulate=%r, children=%d)" % (
            self._names, self._altname, self._descr, self._tabulate, len(self._children)
        )


__all__ = (
    "HelpTree",
)
