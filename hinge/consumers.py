r"""
Hinge consumers: the token-consuming nodes a grammar is composed of.

Protocol
- consume(stream) -> Output
  • return Empty when the input is not recognized, leaving the stream exactly as
    it was (any token read for lookahead is pushed back);
  • return a non-Empty output only after consuming exactly what it represents;
  • raise a HingeException only once committed to a match that cannot be completed.
- contribute_help(help) -> None
  • describe the node on the given HelpTree; never touches parsing state.

Leaves
- AlwaysTrue: consumes nothing, answers Present (boolean flag payload).
- OneToken: exactly one token, or ExpectingValueError.
- OptionalToken: one token when available, otherwise Empty.
- TokenList(count): exactly `count` tokens (NotEnoughElementsError when short),
  or every remaining token when no count is given.

Gate
- Named(names, consumer): matches the leading token against literal spellings,
  restores it on mismatch, delegates on match.

Composites
- Classification(priority, fallback): order-independent fixed-point rounds over
  named entries, emitting a Map with one key per entry.
- Collection(*entries): rounds over named and unnamed entries, emitting
  Map, List or MapList.
- MandatoryItems(consumer, names): fails when a required name is absent or Empty.
- KeyWrap(key, consumer): labels a non-Empty result under a single key.
- Or(*alternatives): first non-Empty alternative wins (subcommand dispatch).
- HelpDecoration(consumer, descr=..., altname=..., tabulate=...): help metadata only.

Every node is immutable once built: its configuration is frozen and exposed
through read-only properties, so one tree can serve many parses, including
concurrent ones, and sub-trees can be shared between parents.

Quick example:
    >>> from hinge.consumers import *
    >>> from hinge.tokens import TokenStream
    >>> root = Classification(
    ...     priority=[("verbose", Named(["-v", "--verbose"], AlwaysTrue()))],
    ...     fallback=[("file", OptionalToken())],
    ... )
    >>> root.consume(TokenStream(["notes.txt", "-v"]))
    Map({'file': Value('notes.txt'), 'verbose': Present})
"""
import functools
import itertools
import operator
import re
from collections.abc import Iterable
from typing import NamedTuple

from .faults import *
from .outputs import *
from .utils import *


class ConsumerType(type):
    """
    Metaclass that turns consumer classes into introspectable node kinds.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in messages and representations.
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_name" attribute set at construction.
    - Provide stable __repr__/__rich_repr__ implementations so grammars print
      as readable trees (rich.pretty included).
    """
    __introspectable__ = ()

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

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                """
                Return a concise, stable representation with the node configuration.

                Example
                - named(names=('-v', '--verbose'), consumer=always-true())
                """
                return f"{type(self).__typename__}({
                    ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
                })"
            self.__repr__ = __repr__

        if "__rich_repr__" not in namespace:
            @rename("__rich_repr__")
            def __rich_repr__(self):
                """
                Yield (name, object) pairs for pretty printers.
                """
                for name in type(self).__introspectable__:
                    yield name, getattr(self, name)
            self.__rich_repr__ = __rich_repr__

        return self


class Consumer(metaclass=ConsumerType):
    """
    Base of every node. Subclasses implement consume(); contribute_help() is a no-op by default.
    """

    def consume(self, stream, /):
        raise NotImplementedError

    def contribute_help(self, help, /):
        pass


def _sanitize_consumer(cls, consumer, /):
    """
    Internal: check that a child implements the two-method consumer contract.
    """
    for method in ("consume", "contribute_help"):
        if not callable(getattr(consumer, method, None)):
            raise TypeError(f"{cls.__typename__} children must implement consume() and contribute_help()")
    return consumer


def _sanitize_name(cls, name, /, what="name"):
    """
    Internal: names and keys are non-empty strings, kept verbatim (no trimming).
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} {what} must be a string")
    elif not name:
        raise ValueError(f"{cls.__typename__} {what} cannot be empty")
    return name


def _sanitize_entries(cls, entries, /):
    """
    Internal: normalize an iterable of (name, consumer) pairs into a tuple of pairs.
    """
    if isinstance(entries, str) or not isinstance(entries, Iterable):
        raise TypeError(f"{cls.__typename__} entries must be an iterable of (name, consumer) pairs")
    sanitized = []
    for entry in entries:
        try:
            name, consumer = entry
        except (TypeError, ValueError):
            raise TypeError(f"{cls.__typename__} entries must be (name, consumer) pairs") from None
        sanitized.append((_sanitize_name(cls, name), _sanitize_consumer(cls, consumer)))
    return tuple(sanitized)


def _consume(consumer, stream, /):
    """
    Internal: run a child and make sure it honored the protocol's return type.
    """
    output = consumer.consume(stream)
    if not isinstance(output, Output):
        raise TypeError(f"consume() must return an output, got {type(output).__name__!r}")
    return output


class AlwaysTrue(Consumer):
    """
    Presence payload: consumes nothing and answers Present.
    """

    def consume(self, stream, /):
        return Present


class OneToken(Consumer):
    """
    Exactly one token, as a Value.
    """

    def consume(self, stream, /):
        token = next(stream, Unset)
        if token is Unset:
            raise ExpectingValueError(
                "expecting a value",
                title="missing value",
                code=FaultCode.EXPECTING_VALUE,
                hint="the input ended where a value was required at %s position" % ordinal(stream.position + 1),
                index=stream.position + 1,
                docs=getdoc(FaultCode.EXPECTING_VALUE),
            )
        return Value(token)


class OptionalToken(Consumer):
    def consume(self, stream, /):
        token = next(stream, Unset)
        if token is Unset:
            return Empty
        return Value(token)


class TokenList(Consumer):
    """
    Bounded or unbounded list of tokens.

    - count=n (n >= 1): exactly n tokens; fewer is NotEnoughElementsError.
    - no count: every remaining token (possibly none). Being greedy, it must be
      the last consumer that gets a chance in its grammar position.
    """

    __introspectable__ = ("count",)

    def __init__(self, count=Unset, /):
        if not isinstance(count, int | Unset | None) or isinstance(count, bool):
            raise TypeError(f"{type(self).__typename__} 'count' must be an integer")
        if isinstance(count, int) and count < 1:
            raise ValueError(f"{type(self).__typename__} 'count' must be a positive integer")
        self._count = coalesce(count)

    def consume(self, stream, /):
        if self._count is None:
            return List(map(Value, stream.drain()))

        # islice pulls exactly `count` tokens, leaving the rest untouched.
        tokens = list(itertools.islice(stream, self._count))
        if len(tokens) < self._count:
            raise NotEnoughElementsError(
                "not enough elements",
                title="not enough elements",
                code=FaultCode.NOT_ENOUGH_ELEMENTS,
                hint="expected %d value(s) but only %d remained" % (self._count, len(tokens)),
                expected=self._count,
                received=tuple(tokens),
                docs=getdoc(FaultCode.NOT_ENOUGH_ELEMENTS),
            )
        return List(map(Value, tokens))


class Named(Consumer):
    """
    Literal gate in front of a consumer.

    Reads one token. When it is one of the accepted spellings the wrapped
    consumer takes over and its result (or error) is returned verbatim; the
    wrapped consumer never learns which spelling matched. Otherwise the token
    is pushed back and Empty is returned.
    """

    __introspectable__ = ("names", "consumer")

    def __init__(self, names, consumer, /):
        if isinstance(names, str) or not isinstance(names, Iterable):
            raise TypeError(f"{type(self).__typename__} names must be an iterable of strings")
        sanitized = []
        for name in names:
            if _sanitize_name(type(self), name) in sanitized:
                raise ValueError(f"{type(self).__typename__} names cannot contain duplicates")
            sanitized.append(name)
        if not sanitized:
            raise TypeError(f"{type(self).__typename__} must specify at least one name")
        self._names = freeze(sanitized)
        self._consumer = _sanitize_consumer(type(self), consumer)

    def consume(self, stream, /):
        token = next(stream, Unset)
        if token is Unset:
            return Empty
        if token not in self._names:
            stream.pushback(token)
            return Empty
        return _consume(self._consumer, stream)

    def contribute_help(self, help, /):
        for name in self._names:
            help.add_name(name)
        self._consumer.contribute_help(help)


class Classification(Consumer):
    """
    Order-independent matching of named entries.

    Entries come in two ordered lists: priority (flags) and fallback
    (positionals). Each invocation runs rounds until one yields nothing: a round
    attempts, in order, every entry that has no result yet (priority entries
    first) and records the non-Empty ones. Entries left without a result are
    recorded as Empty, and the whole is emitted as a Map keyed by entry name.

    Rounds end because every success either advances the stream or removes its
    entry from later rounds. Priority gives flags first refusal over positional
    consumers that would otherwise swallow their tokens.
    """

    __introspectable__ = ("priority", "fallback")

    def __init__(self, priority=(), fallback=()):
        self._priority = _sanitize_entries(type(self), priority)
        self._fallback = _sanitize_entries(type(self), fallback)

        names = [name for name, _ in self.entries]
        if len(set(names)) != len(names):
            raise ValueError(f"{type(self).__typename__} entry names cannot contain duplicates")

    @property
    def entries(self):
        """
        Priority entries followed by fallback entries.
        """
        return self._priority + self._fallback

    def consume(self, stream, /):
        builder = CollectionBuilder()
        while True:
            results = []
            for name, consumer in self.entries:
                if builder.has_item(name):
                    continue
                if (output := _consume(consumer, stream)) is not Empty:
                    results.append((name, output))
            if not results:
                break
            for name, output in results:
                builder.add_item(name, output)

        for name, _ in self.entries:
            if not builder.has_item(name):
                builder.add_item(name, Empty)
        return builder.collect()

    def contribute_help(self, help, /):
        for name, consumer in self.entries:
            child = help.new_child()
            child.set_alternative_name("<%s>" % name)
            consumer.contribute_help(child)


class Entry(NamedTuple):
    """
    One Collection entry: a consumer, an optional result name and a required mark.
    """
    consumer: Consumer
    name: str | None = None
    required: bool = False


class Collection(Consumer):
    """
    Repeated matching of named and unnamed entries.

    Every round attempts every entry, recorded or not: named results are kept
    last-write-wins, unnamed results are appended in order. The loop stops on a
    round with no result, or after recording a round that did not advance the
    stream (so entries that consume nothing cannot spin forever). Named entries
    left without a result fail if required, otherwise they are recorded as Empty.
    """

    __introspectable__ = ("entries",)

    def __init__(self, *entries):
        sanitized = []
        for entry in entries:
            if not isinstance(entry, Entry):
                entry = Entry(entry)
            name = entry.name if entry.name is None else _sanitize_name(type(self), entry.name)
            if entry.required and name is None:
                raise ValueError(f"{type(self).__typename__} unnamed entries cannot be required")
            sanitized.append(Entry(_sanitize_consumer(type(self), entry.consumer), name, bool(entry.required)))
        self._entries = freeze(sanitized)

    def consume(self, stream, /):
        builder = CollectionBuilder()
        while True:
            start = stream.position
            results = []
            for entry in self._entries:
                if (output := _consume(entry.consumer, stream)) is not Empty:
                    results.append((entry, output))
            for entry, output in results:
                if entry.name is None:
                    builder.add_value(output)
                else:
                    builder.add_item(entry.name, output)
            if not results or stream.position == start:
                break

        for entry in self._entries:
            if entry.name is None or builder.has_item(entry.name):
                continue
            if entry.required:
                raise ExpectingItemError(
                    "Expecting item with name: %s" % entry.name,
                    title="missing item",
                    code=FaultCode.EXPECTING_ITEM,
                    hint="provide %r" % entry.name,
                    name=entry.name,
                    docs=getdoc(FaultCode.EXPECTING_ITEM),
                )
            builder.add_item(entry.name, Empty)
        return builder.collect()

    def contribute_help(self, help, /):
        for entry in self._entries:
            entry.consumer.contribute_help(help.new_child())


class MandatoryItems(Consumer):
    """
    Required-field validation over a child's map-shaped output.

    A required name that is absent, or present but Empty, is an
    ExpectingItemError; any other output (an empty List included) satisfies it.
    A child that does not match at all yields Empty when nothing is required.
    """

    __introspectable__ = ("consumer", "names")

    def __init__(self, consumer, names=(), /):
        if isinstance(names, str) or not isinstance(names, Iterable):
            raise TypeError(f"{type(self).__typename__} names must be an iterable of strings")
        sanitized = []
        for name in names:
            # Keep the first declaration order, ignore repeats.
            if _sanitize_name(type(self), name) not in sanitized:
                sanitized.append(name)
        self._consumer = _sanitize_consumer(type(self), consumer)
        self._names = freeze(sanitized)

    def consume(self, stream, /):
        output = _consume(self._consumer, stream)
        if output is Empty and not self._names:
            return Empty

        builder = CollectionBuilder() if output is Empty else CollectionBuilder.reopen(output)
        for name in self._names:
            if builder.items.get(name, Empty) is Empty:
                raise ExpectingItemError(
                    "Expecting item with name: %s" % name,
                    title="missing item",
                    code=FaultCode.EXPECTING_ITEM,
                    hint="provide %r" % name,
                    name=name,
                    docs=getdoc(FaultCode.EXPECTING_ITEM),
                )
        return builder.collect()

    def contribute_help(self, help, /):
        self._consumer.contribute_help(help)


class KeyWrap(Consumer):
    """
    Label a non-Empty result: Map({key: output}). Empty and errors pass through.
    """

    __introspectable__ = ("key", "consumer")

    def __init__(self, key, consumer, /):
        self._key = _sanitize_name(type(self), key, "key")
        self._consumer = _sanitize_consumer(type(self), consumer)

    def consume(self, stream, /):
        output = _consume(self._consumer, stream)
        if output is Empty:
            return Empty
        return Map({self._key: output})

    def contribute_help(self, help, /):
        self._consumer.contribute_help(help)


class Or(Consumer):
    """
    Ordered alternation: the first alternative that does not answer Empty decides.
    """

    __introspectable__ = ("alternatives",)

    def __init__(self, *alternatives):
        self._alternatives = freeze(_sanitize_consumer(type(self), alternative) for alternative in alternatives)

    def consume(self, stream, /):
        for alternative in self._alternatives:
            if (output := _consume(alternative, stream)) is not Empty:
                return output
        return Empty

    def contribute_help(self, help, /):
        for alternative in self._alternatives:
            alternative.contribute_help(help.new_child())


class HelpDecoration(Consumer):
    """
    Attach help metadata to a consumer without changing how it parses.
    """

    __introspectable__ = ("consumer", "descr", "altname", "tabulate")

    def __init__(self, consumer, /, descr=Unset, altname=Unset, tabulate=False):
        self._consumer = _sanitize_consumer(type(self), consumer)

        # Validate and normalize the 'descr' metadata
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{type(self).__typename__} 'descr' cannot be empty")
        self._descr = coalesce(descr)

        if not isinstance(altname, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'altname' must be a string")
        self._altname = coalesce(altname) or None
        self._tabulate = bool(tabulate)

    def consume(self, stream, /):
        return _consume(self._consumer, stream)

    def contribute_help(self, help, /):
        if self._descr is not None:
            help.set_description(self._descr)
        if self._altname is not None:
            help.set_alternative_name(self._altname)
        if self._tabulate:
            help.set_tabulate()
        self._consumer.contribute_help(help)


__all__ = (
    # Public API surface for consumers of hinge.consumers.
    # These names are re-exported from the package __init__.

    # Base
    "Consumer",

    # Leaves
    "AlwaysTrue",
    "OneToken",
    "OptionalToken",
    "TokenList",

    # Gate
    "Named",

    # Composites
    "Classification",
    "Entry",
    "Collection",
    "MandatoryItems",
    "KeyWrap",
    "Or",
    "HelpDecoration",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ConsumerType
