"""
Hinge output model.

Every consume() call answers with one Output, a closed set of variants:

- Empty            no match (and nothing consumed); the only no-match signal.
- Present          presence of a boolean flag.
- Value(token)     a single raw token.
- List(outputs)    ordered outputs.
- Map(items)       name -> output, names unique.
- MapList(items, outputs)
                   both of the above, produced when a composite gathered named
                   and positional results at once.

Outputs are immutable and compare by structure. Empty and Present are
process-wide singletons, so identity checks (output is Empty) are the norm.

CollectionBuilder is the transient accumulator composites use during one
consume() call. It folds what it gathered into the minimal shape: Map when no
positional results were added, List when no named ones were, MapList otherwise.

Accessors (get_value, get_list, get_list_item, get_map, get_item) raise typed
faults from hinge.faults when the requested shape does not match the variant.

    >>> builder = CollectionBuilder()
    >>> builder.add_item("name", Value("Alice"))
    >>> builder.add_item("verbose", Present)
    >>> builder.collect()
    Map({'name': Value('Alice'), 'verbose': Present})
"""
import functools
import re
from types import MappingProxyType

from rich.text import Text

from .faults import *


class Output:
    """
    Common base of every output variant.

    Subclasses override the accessors that make sense for their shape; the
    defaults raise the matching fault.
    """

    __slots__ = ()
    __typename__ = "output"

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        cls.__typename__ = re.sub(r"(?<!^)(?=[A-Z])", r"-", cls.__name__.removesuffix("Type")).lower()

    def is_empty(self):
        return self is Empty

    def is_true(self):
        return self is Present

    def get_value(self):
        """
        Return the raw token of a Value output.
        """
        raise NotAValueError(
            "output is not a value",
            title="not a value",
            code=FaultCode.NOT_A_VALUE,
            hint="only single-token results carry a raw token (got %s)" % self.__typename__,
            output=self,
            docs=getdoc(FaultCode.NOT_A_VALUE),
        )

    def get_list(self):
        """
        Return the ordered outputs of a List or MapList as a tuple.
        """
        raise NotAListError(
            "output is not a list",
            title="not a list",
            code=FaultCode.NOT_A_LIST,
            hint="only list and map-list results carry ordered outputs (got %s)" % self.__typename__,
            output=self,
            docs=getdoc(FaultCode.NOT_A_LIST),
        )

    def get_list_item(self, index, /):
        if not isinstance(index, int):
            raise TypeError("get_list_item() argument must be an integer")
        outputs = self.get_list()
        if not 0 <= index < len(outputs):
            raise IndexOutOfBoundsError(
                "index out of bounds",
                title="index out of bounds",
                code=FaultCode.INDEX_OUT_OF_BOUNDS,
                hint="the list holds %d output(s)" % len(outputs),
                output=self,
                index=index,
                docs=getdoc(FaultCode.INDEX_OUT_OF_BOUNDS),
            )
        return outputs[index]

    def get_map(self):
        """
        Return the read-only name -> output mapping of a Map or MapList.
        """
        raise NotAMapError(
            "output is not a map",
            title="not a map",
            code=FaultCode.NOT_A_MAP,
            hint="only map and map-list results carry named outputs (got %s)" % self.__typename__,
            output=self,
            docs=getdoc(FaultCode.NOT_A_MAP),
        )

    def get_item(self, name, /):
        items = self.get_map()
        try:
            return items[name]
        except KeyError:
            raise UnknownItemError(
                "item does not exists",
                title="unknown item",
                code=FaultCode.UNKNOWN_ITEM,
                hint="known items: %s" % (", ".join(map(repr, items)) or "none"),
                output=self,
                name=name,
                docs=getdoc(FaultCode.UNKNOWN_ITEM),
            ) from None

    def unwrap(self):
        """
        Convert into plain Python objects (None, True, str, list, dict, tuple).
        """
        raise NotImplementedError

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join(map(repr, self.__rich_repr__())))


class EmptyType(Output):
    """
    Singleton type of Empty: no match, nothing consumed.

    Falsy, stable repr, and final (subclassing is rejected).
    """

    __slots__ = ()

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __rich__(self):
        return Text("Empty", style="dim")

    def __repr__(self):
        return "Empty"

    def __reduce__(self):
        return "Empty"

    def unwrap(self):
        return None

    def __init_subclass__(cls, **options):
        raise TypeError("type 'EmptyType' is not an acceptable base type")


class PresentType(Output):
    """
    Singleton type of Present: a flag was given.
    """

    __slots__ = ()

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __rich__(self):
        return Text("Present", style="bold green")

    def __repr__(self):
        return "Present"

    def __reduce__(self):
        return "Present"

    def unwrap(self):
        return True

    def __init_subclass__(cls, **options):
        raise TypeError("type 'PresentType' is not an acceptable base type")


Empty = EmptyType()
Present = PresentType()


def _outputs(objects, /):
    objects = tuple(objects)
    for object in objects:
        if not isinstance(object, Output):
            raise TypeError("outputs can only hold other outputs, got %r" % type(object).__name__)
    return objects


def _items(objects, /):
    items = dict(objects)
    for name, object in items.items():
        if not isinstance(name, str):
            raise TypeError("output names must be strings")
        if not isinstance(object, Output):
            raise TypeError("outputs can only hold other outputs, got %r" % type(object).__name__)
    return MappingProxyType(items)


class Value(Output):
    __slots__ = ("_token",)

    def __init__(self, token, /):
        if not isinstance(token, str):
            raise TypeError("Value() argument must be a string")
        self._token = token

    @property
    def token(self):
        return self._token

    def get_value(self):
        return self._token

    def unwrap(self):
        return self._token

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self._token == other._token

    def __hash__(self):
        return hash((Value, self._token))

    def __rich_repr__(self):
        yield self._token


class List(Output):
    __slots__ = ("_outputs",)

    def __init__(self, outputs=(), /):
        self._outputs = _outputs(outputs)

    def get_list(self):
        return self._outputs

    def unwrap(self):
        return [output.unwrap() for output in self._outputs]

    def __len__(self):
        return len(self._outputs)

    def __iter__(self):
        return iter(self._outputs)

    def __eq__(self, other):
        if not isinstance(other, List):
            return NotImplemented
        return self._outputs == other._outputs

    __hash__ = None

    def __rich_repr__(self):
        yield list(self._outputs)


class Map(Output):
    __slots__ = ("_items",)

    def __init__(self, items=(), /):
        self._items = _items(items)

    def get_map(self):
        return self._items

    def unwrap(self):
        return {name: output.unwrap() for name, output in self._items.items()}

    def __contains__(self, name):
        return name in self._items

    def __eq__(self, other):
        if not isinstance(other, Map):
            return NotImplemented
        return dict(self._items) == dict(other._items)

    __hash__ = None

    def __rich_repr__(self):
        yield dict(self._items)


class MapList(Output):
    __slots__ = ("_items", "_outputs")

    def __init__(self, items=(), outputs=(), /):
        self._items = _items(items)
        self._outputs = _outputs(outputs)

    def get_map(self):
        return self._items

    def get_list(self):
        return self._outputs

    def unwrap(self):
        return (
            {name: output.unwrap() for name, output in self._items.items()},
            [output.unwrap() for output in self._outputs],
        )

    def __contains__(self, name):
        return name in self._items

    def __eq__(self, other):
        if not isinstance(other, MapList):
            return NotImplemented
        return dict(self._items) == dict(other._items) and self._outputs == other._outputs

    __hash__ = None

    def __rich_repr__(self):
        yield dict(self._items)
        yield list(self._outputs)


class CollectionBuilder:
    """
    Transient accumulator for one composite consume() call.

    - add_value(output): append a positional result.
    - add_item(name, output): record a named result (last write wins).
    - collect(): fold into Map, List or MapList (an untouched builder gives an empty Map).
    - reopen(output): rebuild a builder from a Map/MapList to validate or extend it.
    """

    __slots__ = ("_items", "_outputs")

    def __init__(self):
        self._items = {}
        self._outputs = []

    @classmethod
    def reopen(cls, output, /):
        builder = cls()
        match output:
            case Map():
                builder._items.update(output.get_map())
            case MapList():
                builder._items.update(output.get_map())
                builder._outputs.extend(output.get_list())
            case Output():
                # Delegates to the accessor so the fault is the same one get_map() raises.
                output.get_map()
            case _:
                raise TypeError("reopen() argument must be an output")
        return builder

    def add_value(self, output, /):
        if not isinstance(output, Output):
            raise TypeError("add_value() argument must be an output")
        self._outputs.append(output)

    def add_item(self, name, output, /):
        if not isinstance(name, str):
            raise TypeError("add_item() first argument must be a string")
        if not isinstance(output, Output):
            raise TypeError("add_item() second argument must be an output")
        self._items[name] = output

    def has_item(self, name, /):
        return name in self._items

    @property
    def items(self):
        return MappingProxyType(self._items)

    @property
    def outputs(self):
        return tuple(self._outputs)

    def collect(self):
        if not self._outputs:
            return Map(self._items)
        if not self._items:
            return List(self._outputs)
        return MapList(self._items, self._outputs)

    def __repr__(self):
        return "collection-builder(items=%r, outputs=%r)" % (self._items, self._outputs)


__all__ = (
    "Output",
    "EmptyType",
    "PresentType",
    "Empty",
    "Present",
    "Value",
    "List",
    "Map",
    "MapList",
    "CollectionBuilder",
)
