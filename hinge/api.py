"""
Hinge façade and builder: drive a consumer tree over real input.

What this module provides
- Hinge: wraps a root consumer and runs it over a token sequence.
  • apply_tokens(tokens): parse, then insist that something matched and that
    every token was used; leftovers and no-match are hard errors.
  • apply_args(): same over sys.argv[1:].
  • help()/help_tree()/print_help(): build a fresh HelpTree and render it.
  • __invoke__(prompt): shell-friendly entry point; faults are raised, or
    printed with rich and turned into exit status 1 when shell=True.

- HingeBuilder: fluent declaration of flags, positionals and subcommands that
  assembles the usual tree:
      Or(subcommand..., MandatoryItems(Classification(flags, positionals), required))

- invoke(object, prompt): convenience runner for façades, builders and bare consumers.

Quick start
    from hinge import HingeBuilder

    tool = (
        HingeBuilder()
        .item("name", ("n", "name"), descr="who to greet").require()
        .bool("verbose", "verbose")
        .build()
    )
    tool.apply_tokens(["-n", "Alice", "--verbose"])
    # Map({'name': Value('Alice'), 'verbose': Present})

Flag spellings
- a one-character name is a short flag ("n" → "-n"), a longer one a long flag
  ("name" → "--name"), a (short, long) pair both. Use (None, "a") for a
  one-letter long flag ("--a"). Spellings match tokens exactly; "-abc" is
  never three short flags.
"""
import copy
import os.path
import re
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .consumers import *
from .faults import *
from .help import HelpTree
from .outputs import Empty, Output
from .tokens import TokenStream
from .utils import *


class Hinge:
    """
    Top-level driver around a root consumer.

    Runtime options
    - name: program name used in fault headers and help panels
      (defaults to the running script's file name).
    - shell: print faults (and help) to stderr and exit with status 1 instead of raising.
    - fancy: wrap renders in rich panels.
    - colorful: apply the palette (overridable through __styles__ in __main__).
    """

    consumer = mirror("consumer")
    name = mirror("name")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def __init__(self, consumer, /, name=Unset, *, shell=False, fancy=False, colorful=True):
        for method in ("consume", "contribute_help"):
            if not callable(getattr(consumer, method, None)):
                raise TypeError("Hinge() argument must implement consume() and contribute_help()")
        if not isinstance(name, str | Unset):
            raise TypeError("Hinge() 'name' must be a string")
        elif isinstance(name, str) and not (name := name.strip()):
            raise ValueError("Hinge() 'name' cannot be empty")

        self._consumer = consumer
        self._name = coalesce(name, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "hinge")
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

    def apply_tokens(self, tokens, /):
        """
        Parse a token sequence into the root output.

        Raises
        - any HingeException raised by the tree, unchanged.
        - NothingConsumedError when the root answered Empty.
        - UnparsedTokensError naming the first token left over.
        """
        stream = TokenStream(tokens)
        output = self._consumer.consume(stream)
        if not isinstance(output, Output):
            raise TypeError(f"consume() must return an output, got {type(output).__name__!r}")

        if output is Empty:
            raise NothingConsumedError(
                "expecting consumer to consume the tokens",
                title="nothing consumed",
                code=FaultCode.NOTHING_CONSUMED,
                hint="run '%s --help' to see the accepted forms" % self._name,
                docs=getdoc(FaultCode.NOTHING_CONSUMED),
            )

        token = next(stream, Unset)
        if token is not Unset:
            index = stream.position
            raise UnparsedTokensError(
                "not every token could be processed, next is: %s" % token,
                title="unparsed input",
                code=FaultCode.UNPARSED_TOKENS,
                hint="remove %r from %s position or check its spelling" % (token, ordinal(index)),
                token=token,
                index=index,
                leftover=(token, *stream.drain()),
                docs=getdoc(FaultCode.UNPARSED_TOKENS),
            )
        return output

    def apply_args(self):
        """
        Parse the process arguments (program name stripped).
        """
        return self.apply_tokens(sys.argv[1:])

    def help_tree(self):
        """
        Build a fresh HelpTree from the consumer tree.
        """
        tree = HelpTree()
        self._consumer.contribute_help(tree)
        return tree

    def help(self):
        return self.help_tree().generate()

    def print_help(self, *, stderr=False):
        console = Console(stderr=stderr)
        render = self.help_tree().render(colorful=self._colorful)
        if self._fancy:
            title = Text(self._name, "bold #FF4D94" if self._colorful else "")
            render = Panel(render, title=title, title_align="left")
        console.print(render)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this façade's runtime options.

        In shell mode the help is printed to stderr first, then the fault, and
        the process exits with status 1; otherwise the fault is raised.
        """
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = copy.replace(fault, **options, tool=self, shell=self._shell, fancy=self._fancy, colorful=self._colorful)
        if self._shell:
            self.print_help(stderr=True)
        trigger(fault)

    def __invoke__(self, prompt=Unset):
        """
        Execute this parser over a prompt.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used verbatim.

        Returns
        - the root Output. Faults go through trigger().
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        try:
            return self.apply_tokens(tokens)
        except HingeException as fault:
            self.trigger(fault)

    def __rich_repr__(self):
        yield "name", self._name
        yield "consumer", self._consumer

    def __repr__(self):
        return "hinge(name=%r, consumer=%r)" % (self._name, self._consumer)


def _spellings(name, /):
    """
    Internal: literal spellings for a builder flag name.

    - "n"              → ("-n",)
    - "name"           → ("--name",)
    - ("n", "name")    → ("-n", "--name")
    - (None, "a")      → ("--a",)
    """
    def short(name):
        if not re.fullmatch(r"[^\W_]", name):
            raise ValueError("short flag names must be a single letter or digit")
        return "-" + name

    def long(name):
        if not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError("long flag names must be valid shell-style names (unicodes are allowed)")
        return "--" + name

    match name:
        case str() if len(name) == 1:
            return short(name),
        case str():
            return long(name),
        case (None, str() as second):
            return long(second),
        case (str() as first, str() as second):
            return short(first), long(second)
        case _:
            raise TypeError("flag names must be a string, a (short, long) pair or a (None, long) pair")


class HingeBuilder:
    """
    Fluent grammar declaration.

    Fields
    - bool(id, name): presence flag → Present / Empty.
    - item(id, name): flag followed by one value → Value / Empty.
    - list(id, name, count): flag followed by `count` values (all remaining when
      no count) → List / Empty.
    - catch_tail(id): everything after "--" → List / Empty.
    - arg(id): positional value → Value / Empty.
    - include(id, consumer): any consumer as a flag-like (priority) or
      positional-like entry.
    - subcommand(id, name, grammar): keyword dispatch to an independent grammar,
      whose result is nested under `id`.

    require() marks the last declared field as mandatory. Only item(), list()
    and arg() can be required; anything else is a TypeError. Subcommands are
    not fields: require() after subcommand() still refers to the field before.
    """

    def __init__(self):
        self._priority = []
        self._fallback = []
        self._required = []
        self._subcommands = []
        self._requirable = Unset

    def _include(self, id, consumer, priority, descr=Unset, requirable=False):
        if not isinstance(id, str):
            raise TypeError("field ids must be strings")
        elif not id:
            raise ValueError("field ids cannot be empty")
        if any(id == entry for entry, _ in self._priority + self._fallback):
            raise ValueError("field id %r is already declared" % id)
        if descr is not Unset:
            consumer = HelpDecoration(consumer, descr)
        (self._priority if priority else self._fallback).append((id, consumer))
        self._requirable = id if requirable else Unset
        return self

    def bool(self, id, name, /, *, descr=Unset):
        return self._include(id, Named(_spellings(name), AlwaysTrue()), True, descr)

    def item(self, id, name, /, *, descr=Unset):
        return self._include(id, Named(_spellings(name), OneToken()), True, descr, requirable=True)

    def list(self, id, name, count=Unset, /, *, descr=Unset):
        return self._include(id, Named(_spellings(name), TokenList(count)), True, descr, requirable=True)

    def catch_tail(self, id, /, *, descr=Unset):
        return self._include(id, Named(("--",), TokenList()), True, descr)

    def arg(self, id, /, *, descr=Unset):
        return self._include(id, OptionalToken(), False, descr, requirable=True)

    def include(self, id, consumer, /, *, priority=True):
        return self._include(id, consumer, priority)

    def subcommand(self, id, name, grammar, /, *, descr=Unset):
        """
        Add a keyword-selected sub-grammar.

        grammar may be a HingeBuilder, a Hinge or a bare consumer; a successful
        match yields Map({id: <sub-grammar output>}).
        """
        if not isinstance(id, str) or not isinstance(name, str):
            raise TypeError("subcommand() id and name must be strings")
        elif not id or not name:
            raise ValueError("subcommand() id and name cannot be empty")

        match grammar:
            case HingeBuilder():
                root = grammar.build().consumer
            case Hinge():
                root = grammar.consumer
            case _:
                root = grammar
        self._subcommands.append(HelpDecoration(KeyWrap(id, Named((name,), root)), descr, tabulate=True))
        return self

    def require(self):
        if self._requirable is Unset:
            raise TypeError("require() must immediately follow item(), list() or arg()")
        if self._requirable not in self._required:
            self._required.append(self._requirable)
        return self

    def build(self, **options):
        """
        Assemble the consumer tree and wrap it in a Hinge (options are forwarded to it).
        """
        core = MandatoryItems(Classification(self._priority, self._fallback), self._required)
        if self._subcommands:
            return Hinge(Or(*self._subcommands, core), **options)
        return Hinge(core, **options)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for façades, builders and bare consumers.

    Parameters
    - object: an instance providing __invoke__(prompt), a HingeBuilder, or a consumer.
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens.

    Returns
    - the root Output.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if isinstance(object, HingeBuilder):
        return invoke(object.build(), prompt)

    if callable(getattr(object, "consume", None)):
        return invoke(Hinge(object), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    # Public API surface for consumers of hinge.api.
    # These names are re-exported from the package __init__.
    "Hinge",
    "HingeBuilder",
    "invoke",
)
