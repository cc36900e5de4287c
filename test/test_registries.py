"""
Registries module behavioral tests (storage, overwrite, subscription).

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from camdo import ArgumentType, CommandSpec, TypeRegistry, CommandRegistry


class TestTypeRegistry(TestCase):
    """Behavioral tests for TypeRegistry."""

    def setUp(self):
        self.types = TypeRegistry()

    def testDefineAndLookup(self):
        spec = self.types.define({"id": "small_size", "validate": lambda raw: len(raw) < 5})
        self.assertIs(self.types.lookup("small_size"), spec)
        self.assertIn("small_size", self.types)
        self.assertIs(self.types.get("small_size"), spec)
        self.assertEqual(len(self.types), 1)

    def testLookupOfUnknownIdReturnsNone(self):
        self.assertIsNone(self.types.lookup("missing"))
        self.assertNotIn("missing", self.types)

    def testRedefinitionReplaces(self):
        old = self.types.define(ArgumentType("size", lambda raw: True))
        new = self.types.define(ArgumentType("size", lambda raw: False))
        self.assertIs(self.types.lookup("size"), new)
        self.assertIsNot(self.types.lookup("size"), old)
        self.assertFalse(self.types["size"].validate("anything"))
        self.assertEqual(list(self.types), ["size"])

    def testRegistryIsReadOnly(self):
        with self.assertRaises(TypeError):
            self.types["size"] = ArgumentType("size", len)


class TestCommandRegistry(TestCase):
    """Behavioral tests for CommandRegistry."""

    def setUp(self):
        self.commands = CommandRegistry()

    def testDefineDoesNotResolveTypes(self):
        spec = self.commands.define({
            "id": "echo",
            "args": [{"id": "sentence", "type": "undefined"}],
            "run": lambda bound: bound,
        })
        self.assertIs(self.commands.lookup("echo"), spec)

    def testRedefinitionReplaces(self):
        self.commands.define(CommandSpec("echo", lambda bound: "old"))
        self.commands.define(CommandSpec("echo", lambda bound: "new"))
        self.assertEqual(self.commands["echo"](()), "new")
        self.assertEqual(len(self.commands), 1)

    def testSubscribersSeeNewIdsOnly(self):
        seen = []
        self.commands.subscribe(seen.append)
        first = self.commands.define(CommandSpec("echo", lambda bound: "old"))
        self.commands.define(CommandSpec("echo", lambda bound: "new"))
        second = self.commands.define(CommandSpec("ping", lambda bound: "pong"))
        self.assertEqual(seen, [first, second])

    def testUnsubscribe(self):
        seen = []
        self.commands.subscribe(seen.append)
        self.commands.unsubscribe(seen.append)
        self.commands.define(CommandSpec("echo", lambda bound: None))
        self.assertEqual(seen, [])
        with self.assertRaises(ValueError):
            self.commands.unsubscribe(seen.append)

    def testSubscribeRequiresCallable(self):
        with self.assertRaises(TypeError):
            self.commands.subscribe("not callable")


if __name__ == "__main__":
    unittest.main()
