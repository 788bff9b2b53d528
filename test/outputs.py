"""
Tests for the output model.

This module verifies:
- Empty and Present singletons (identity, truthiness, copy/pickle, finality).
- Structural equality of Value, List, Map and MapList.
- Typed accessors and the faults they raise on a shape mismatch.
- CollectionBuilder folding (Map / List / MapList) and reopening.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from rich.console import Console

from hinge.faults import *
from hinge.outputs import *


class SingletonTest(TestCase):
    def testSingleton(self) -> None:
        self.assertIs(EmptyType(), Empty)
        self.assertIs(PresentType(), Present)

    def testTruthiness(self) -> None:
        self.assertFalse(Empty)
        self.assertTrue(Present)

    def testPredicates(self) -> None:
        self.assertTrue(Empty.is_empty())
        self.assertFalse(Present.is_empty())
        self.assertTrue(Present.is_true())
        self.assertFalse(Value("x").is_true())

    def testRepr(self) -> None:
        self.assertEqual(repr(Empty), "Empty")
        self.assertEqual(repr(Present), "Present")

    def testCopyAndPicklePreserveIdentity(self) -> None:
        for singleton in (Empty, Present):
            self.assertIs(copy.copy(singleton), singleton)
            self.assertIs(copy.deepcopy(singleton), singleton)
            self.assertIs(pickle.loads(pickle.dumps(singleton)), singleton)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("EmptyType", (EmptyType,), {})
        with self.assertRaises(TypeError):
            type("PresentType", (PresentType,), {})

    def testRichConsolePrint(self) -> None:
        console = Console(color_system=None, force_terminal=False)
        with console.capture() as capture:
            console.print(Empty)
        self.assertEqual(capture.get().strip(), "Empty")


class VariantTest(TestCase):
    def testValueEquality(self) -> None:
        self.assertEqual(Value("a"), Value("a"))
        self.assertNotEqual(Value("a"), Value("b"))
        self.assertEqual(len({Value("a"), Value("a")}), 1)

    def testValueRejectsNonString(self) -> None:
        with self.assertRaises(TypeError):
            Value(1)

    def testListEquality(self) -> None:
        self.assertEqual(List([Value("a"), Present]), List((Value("a"), Present)))
        self.assertNotEqual(List([Value("a")]), List([]))
        self.assertEqual(len(List([Value("a"), Value("b")])), 2)

    def testContainersAreUnhashable(self) -> None:
        for output in (List([Value("a")]), List([Map({})]), Map({}), MapList({}, [])):
            with self.subTest(output=output):
                with self.assertRaises(TypeError):
                    hash(output)

    def testListRejectsNonOutputs(self) -> None:
        with self.assertRaises(TypeError):
            List(["a"])

    def testMapEquality(self) -> None:
        self.assertEqual(Map({"a": Present, "b": Empty}), Map({"b": Empty, "a": Present}))
        self.assertNotEqual(Map({"a": Present}), MapList({"a": Present}, []))

    def testMapIsReadOnly(self) -> None:
        items = {"a": Present}
        output = Map(items)
        items["b"] = Empty
        self.assertNotIn("b", output)
        with self.assertRaises(TypeError):
            output.get_map()["c"] = Empty  # type: ignore[index]

    def testRepr(self) -> None:
        self.assertEqual(repr(Value("x")), "Value('x')")
        self.assertEqual(repr(List([Value("x")])), "List([Value('x')])")
        self.assertEqual(repr(Map({"k": Present})), "Map({'k': Present})")
        self.assertEqual(repr(MapList({"k": Empty}, [Value("v")])), "MapList({'k': Empty}, [Value('v')])")

    def testUnwrap(self) -> None:
        self.assertIsNone(Empty.unwrap())
        self.assertIs(Present.unwrap(), True)
        self.assertEqual(
            Map({"name": Value("Alice"), "files": List([Value("a"), Value("b")]), "quiet": Empty}).unwrap(),
            {"name": "Alice", "files": ["a", "b"], "quiet": None},
        )
        self.assertEqual(MapList({"v": Present}, [Value("x")]).unwrap(), ({"v": True}, ["x"]))


class AccessorTest(TestCase):
    def testGetValue(self) -> None:
        self.assertEqual(Value("x").get_value(), "x")
        with self.assertRaises(NotAValueError) as context:
            Present.get_value()
        self.assertEqual(context.exception.options["code"], FaultCode.NOT_A_VALUE)

    def testGetList(self) -> None:
        self.assertEqual(List([Value("x")]).get_list(), (Value("x"),))
        self.assertEqual(MapList({}, [Present]).get_list(), (Present,))
        with self.assertRaises(NotAListError):
            Map({}).get_list()

    def testGetListItem(self) -> None:
        output = List([Value("a"), Value("b")])
        self.assertEqual(output.get_list_item(1), Value("b"))
        with self.assertRaises(IndexOutOfBoundsError):
            output.get_list_item(2)
        with self.assertRaises(IndexOutOfBoundsError):
            output.get_list_item(-1)
        with self.assertRaises(NotAListError):
            Value("a").get_list_item(0)

    def testGetMap(self) -> None:
        self.assertEqual(dict(Map({"a": Present}).get_map()), {"a": Present})
        with self.assertRaises(NotAMapError):
            List([]).get_map()
        with self.assertRaises(NotAMapError):
            Empty.get_map()

    def testGetItem(self) -> None:
        output = Map({"a": Present})
        self.assertIs(output.get_item("a"), Present)
        with self.assertRaises(UnknownItemError) as context:
            output.get_item("b")
        self.assertEqual(context.exception.options["name"], "b")
        with self.assertRaises(NotAMapError):
            Value("a").get_item("a")


class CollectionBuilderTest(TestCase):
    def testUntouchedBuilderIsEmptyMap(self) -> None:
        self.assertEqual(CollectionBuilder().collect(), Map({}))

    def testItemsOnlyGiveMap(self) -> None:
        builder = CollectionBuilder()
        builder.add_item("a", Present)
        self.assertEqual(builder.collect(), Map({"a": Present}))

    def testValuesOnlyGiveList(self) -> None:
        builder = CollectionBuilder()
        builder.add_value(Value("a"))
        builder.add_value(Value("b"))
        self.assertEqual(builder.collect(), List([Value("a"), Value("b")]))

    def testBothGiveMapList(self) -> None:
        builder = CollectionBuilder()
        builder.add_value(Value("a"))
        builder.add_item("flag", Present)
        self.assertEqual(builder.collect(), MapList({"flag": Present}, [Value("a")]))

    def testLastWriteWins(self) -> None:
        builder = CollectionBuilder()
        builder.add_item("a", Value("1"))
        builder.add_item("a", Value("2"))
        self.assertEqual(builder.collect(), Map({"a": Value("2")}))

    def testReopen(self) -> None:
        builder = CollectionBuilder.reopen(MapList({"a": Present}, [Value("x")]))
        self.assertTrue(builder.has_item("a"))
        self.assertEqual(builder.outputs, (Value("x"),))
        with self.assertRaises(NotAMapError):
            CollectionBuilder.reopen(List([]))
        with self.assertRaises(TypeError):
            CollectionBuilder.reopen({"a": Present})


if __name__ == '__main__':
    unittest.main()
