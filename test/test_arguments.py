"""
Arguments module behavioral tests.

Scope
- Validate the Arg fluent builder: chaining, additive aliases, defaults vs requiredness.
- Validate matching (exact, no prefixes, no case folding) and is_done().
- Validate read-only introspection, representations and input sanitizing.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from flagstone import Arg


class TestArgBuilder(TestCase):
    """Behavioral tests for the Arg builder."""

    def testBuilderReturnsSameInstance(self):
        arg = Arg("HasValue")
        self.assertIs(arg.add_short("-v"), arg)
        self.assertIs(arg.add_long("--value"), arg)
        self.assertIs(arg.accepts_value(), arg)
        self.assertIs(arg.help("Some help"), arg)
        self.assertIs(arg.set_default("x"), arg)
        self.assertIs(arg.environment("VALUE"), arg)
        self.assertIs(arg.set_required(), arg)

    def testFreshArgHasNoMetadata(self):
        arg = Arg("Plain")
        self.assertEqual(arg.name, "Plain")
        self.assertEqual(arg.shorts, ())
        self.assertEqual(arg.longs, ())
        self.assertFalse(arg.valued)
        self.assertFalse(arg.required)
        self.assertIsNone(arg.default)
        self.assertIsNone(arg.envvar)
        self.assertIsNone(arg.descr)

    def testAliasesAreAdditiveAndOrdered(self):
        arg = Arg("TestArg3").add_short("-1").add_short("-2").add_short("-3").add_long("-one").add_long("-two")
        self.assertEqual(arg.shorts, ("-1", "-2", "-3"))
        self.assertEqual(arg.longs, ("-one", "-two"))
        self.assertEqual(arg.aliases, ("-1", "-2", "-3", "-one", "-two"))

    def testRepeatedAliasKeptOnce(self):
        arg = Arg("Verbose").add_short("-v").add_short("-v")
        self.assertEqual(arg.shorts, ("-v",))

    def testBuilderOrderIndependent(self):
        one = Arg("A").accepts_value().add_long("--a").help("text").add_short("-a")
        two = Arg("A").add_short("-a").add_long("--a").accepts_value().help("text")
        self.assertEqual(repr(one), repr(two))

    def testSetDefaultClearsRequired(self):
        arg = Arg("Name").set_required().set_default("anonymous")
        self.assertFalse(arg.required)
        self.assertEqual(arg.default, "anonymous")

    def testSetRequiredAfterDefaultKeepsOptional(self):
        arg = Arg("Name").set_default("anonymous").set_required()
        self.assertFalse(arg.required)

    def testSetRequired(self):
        self.assertTrue(Arg("Name").set_required().required)

    def testEmptyStringDefaultIsKept(self):
        self.assertEqual(Arg("Extra").set_default("").default, "")

    def testEnvironmentAndHelpKeptAsGiven(self):
        arg = Arg("Token").environment("APP_TOKEN").help("  Access token  ")
        self.assertEqual(arg.envvar, "APP_TOKEN")
        self.assertEqual(arg.descr, "  Access token  ")


class TestArgSanitizing(TestCase):
    """Builder input validation."""

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            Arg(42)

    def testNameCannotBeEmpty(self):
        with self.assertRaises(ValueError):
            Arg("  ")

    def testAliasMustBeString(self):
        with self.assertRaises(TypeError):
            Arg("A").add_short(None)
        with self.assertRaises(TypeError):
            Arg("A").add_long(b"--a")

    def testAliasCannotBeEmpty(self):
        with self.assertRaises(ValueError):
            Arg("A").add_long("")

    def testDefaultMustBeString(self):
        with self.assertRaises(TypeError):
            Arg("A").set_default(1)

    def testEnvironmentCannotBeEmpty(self):
        with self.assertRaises(ValueError):
            Arg("A").environment("")


class TestArgQueries(TestCase):
    """matches(), is_done() and read-only introspection."""

    def setUp(self):
        self.arg = Arg("HasValue").add_short("-v").add_long("-value").accepts_value()

    def testMatchesEveryAlias(self):
        self.assertTrue(self.arg.matches("-v"))
        self.assertTrue(self.arg.matches("-value"))

    def testMatchesIsExact(self):
        self.assertFalse(self.arg.matches("-V"))
        self.assertFalse(self.arg.matches("-val"))
        self.assertFalse(self.arg.matches("-values"))
        self.assertFalse(self.arg.matches("value"))

    def testArgWithoutAliasesMatchesNothing(self):
        arg = Arg("Hidden").set_default("x")
        self.assertFalse(arg.matches(""))
        self.assertFalse(arg.matches("Hidden"))

    def testIsDone(self):
        self.assertTrue(self.arg.is_done())
        required = Arg("Req").set_required()
        self.assertFalse(required.is_done())
        self.assertFalse(required.is_done(False))
        self.assertTrue(required.is_done(True))

    def testPropertiesAreReadOnly(self):
        with self.assertRaises(AttributeError):
            self.arg.name = "Other"
        with self.assertRaises(AttributeError):
            self.arg.required = True

    def testReprListsFields(self):
        text = repr(self.arg)
        self.assertTrue(text.startswith("arg(name='HasValue'"))
        self.assertIn("shorts=('-v',)", text)
        self.assertIn("valued=True", text)
        self.assertIn("default=None", text)

    def testStrIsHelpRow(self):
        arg = self.arg.help("A command line option that accepts a value")
        self.assertEqual(str(arg), "  -v\t-value\t(value)\tA command line option that accepts a value")

    def testStrWithoutShortsOrHelp(self):
        self.assertEqual(str(Arg("Flag").add_long("--flag")), "\t--flag\t")


if __name__ == '__main__':
    unittest.main()
