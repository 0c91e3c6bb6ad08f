"""
Value container tests.

Scope
- Construction from each scalar type and the tag it receives.
- Accessors: round trip for the matching tag, TypeMismatchError otherwise.
- Ownership: copy independence, move leaves the source empty, assign replaces.
- Token parsing policy (including the bool "false family" rule).
- Rendering of scalars and tag names.

Conventions
- Test method names follow CamelCase per project convention.
"""
import copy
import unittest
from unittest import TestCase

from stratum import DataType, TypeMismatchError, Value


class TestValueConstruction(TestCase):

    def testEmptyByDefault(self):
        value = Value()
        self.assertIs(value.type, DataType.UNKNOWN)
        self.assertTrue(value.empty)
        self.assertTrue(Value.unknown().empty)

    def testIntRoundTrip(self):
        value = Value(42)
        self.assertIs(value.type, DataType.INT)
        self.assertEqual(value.as_int(), 42)

    def testNumberRoundTrip(self):
        value = Value(3.14)
        self.assertIs(value.type, DataType.NUMBER)
        self.assertEqual(value.as_number(), 3.14)

    def testBoolIsNotTaggedAsInt(self):
        value = Value(True)
        self.assertIs(value.type, DataType.BOOL)
        self.assertIs(value.as_bool(), True)
        self.assertIs(Value(False).as_bool(), False)

    def testTextRoundTrip(self):
        value = Value("hello")
        self.assertIs(value.type, DataType.TEXT)
        self.assertEqual(value.as_text(), "hello")

    def testZeroValuesAreNotEmpty(self):
        for payload in (0, 0.0, False, ""):
            with self.subTest(payload=payload):
                self.assertFalse(Value(payload).empty)

    def testUnsupportedPayloadRejected(self):
        with self.assertRaises(TypeError):
            Value([1, 2])
        with self.assertRaises(TypeError):
            Value(None)


class TestValueAccessors(TestCase):

    def testMismatchedAccessorRaises(self):
        value = Value(1)
        with self.assertRaises(TypeMismatchError):
            value.as_text()
        with self.assertRaises(TypeMismatchError):
            value.as_number()
        with self.assertRaises(TypeMismatchError):
            Value().as_int()

    def testMismatchIsTypeError(self):
        with self.assertRaises(TypeError):
            Value("x").as_bool()

    def testNoImplicitConversions(self):
        with self.assertRaises(TypeMismatchError):
            int(Value(1))
        with self.assertRaises(TypeMismatchError):
            float(Value(1.0))
        with self.assertRaises(TypeMismatchError):
            bool(Value(True))


class TestValueOwnership(TestCase):

    def testCopyPreservesTypeAndPayload(self):
        source = Value("abc")
        duplicate = source.copy()
        self.assertIsNot(duplicate, source)
        self.assertIs(duplicate.type, DataType.TEXT)
        self.assertEqual(duplicate.as_text(), "abc")
        self.assertEqual(source.as_text(), "abc")

    def testCopyIsIndependent(self):
        source = Value(1)
        duplicate = copy.copy(source)
        source.assign(2)
        self.assertEqual(duplicate.as_int(), 1)
        self.assertEqual(copy.deepcopy(source).as_int(), 2)

    def testMoveEmptiesSource(self):
        source = Value(2.5)
        target = source.move()
        self.assertIs(target.type, DataType.NUMBER)
        self.assertEqual(target.as_number(), 2.5)
        self.assertTrue(source.empty)
        self.assertIs(source.type, DataType.UNKNOWN)

    def testAssignReplacesTag(self):
        value = Value(1)
        self.assertIs(value.assign("one"), value)
        self.assertIs(value.type, DataType.TEXT)
        with self.assertRaises(TypeMismatchError):
            value.as_int()

    def testAssignFromValueCopies(self):
        source = Value(True)
        target = Value("x").assign(source)
        source.assign(False)
        self.assertIs(target.as_bool(), True)

    def testFailedAssignKeepsPayload(self):
        value = Value(7)
        with self.assertRaises(TypeError):
            value.assign(object())
        self.assertEqual(value.as_int(), 7)


class TestValueParse(TestCase):

    def testIntParse(self):
        self.assertEqual(Value.parse("-12", DataType.INT).as_int(), -12)
        self.assertTrue(Value.parse("1.5", DataType.INT).empty)
        self.assertTrue(Value.parse("abc", DataType.INT).empty)

    def testNumberParse(self):
        self.assertEqual(Value.parse("-3.14", DataType.NUMBER).as_number(), -3.14)
        self.assertEqual(Value.parse("2", DataType.NUMBER).as_number(), 2.0)
        self.assertEqual(Value.parse("1e3", DataType.NUMBER).as_number(), 1000.0)
        self.assertTrue(Value.parse("pi", DataType.NUMBER).empty)

    def testBoolFalseFamily(self):
        for token in ("false", "False", "F", "f", "FALSE"):
            with self.subTest(token=token):
                self.assertIs(Value.parse(token, DataType.BOOL).as_bool(), False)

    def testBoolEverythingElseIsTrue(self):
        for token in ("0", "no", "true", "", "off"):
            with self.subTest(token=token):
                self.assertIs(Value.parse(token, DataType.BOOL).as_bool(), True)

    def testTextParseKeepsLiteral(self):
        self.assertEqual(Value.parse("-x", DataType.TEXT).as_text(), "-x")
        self.assertEqual(Value.parse("42", DataType.UNKNOWN).as_text(), "42")


class TestValueRendering(TestCase):

    def testRender(self):
        self.assertEqual(Value(7).render(), "7")
        self.assertEqual(Value(3.14).render(), "3.140000")
        self.assertEqual(Value(True).render(), "true")
        self.assertEqual(Value(False).render(), "false")
        self.assertEqual(Value("hi").render(), '"hi"')
        self.assertEqual(Value('say "hi"').render(), '"say ""hi"""')
        self.assertEqual(Value().render(), "")

    def testRenderType(self):
        self.assertEqual(Value(1).render_type(), "int")
        self.assertEqual(Value(1.0).render_type(), "number")
        self.assertEqual(Value(True).render_type(), "bool")
        self.assertEqual(Value("").render_type(), "text")
        self.assertEqual(Value().render_type(), "unknown")

    def testRepr(self):
        self.assertEqual(repr(Value(1)), "value(int, 1)")
        self.assertEqual(repr(Value()), "value(unknown)")


if __name__ == "__main__":
    unittest.main()
