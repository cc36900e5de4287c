"""
Faults module behavioral tests (payloads, rendering, trigger, host overrides).

Scope
- Validate the payload produced by __result__() for user faults.
- Validate Rich rendering in plain and panel form, with and without colour.
- Validate trigger(): raise outside shell mode, render in shell mode.
- Validate __main__ overrides for codes and docs.

Conventions
- Test method names follow CamelCase per project convention.
"""
import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from camdo import (
    Dispatcher,
    FaultCode,
    DispatchException,
    InvalidArgumentError,
    MissingArgumentError,
    UnknownTypeError,
    getdoc,
    trigger,
)
from camdo import faults


def render(renderable):
    stream = io.StringIO()
    Console(file=stream, width=120, color_system=None).print(renderable)
    return stream.getvalue()


def invalid(**options):
    return InvalidArgumentError(
        'argument "sentence" does not accept `too_long!`.',
        title="invalid argument",
        code=FaultCode.INVALID_ARGUMENT,
        hint="the first position expects a valid small_size",
        **options,
    )


class TestFaultCode(TestCase):
    """Behavioral tests for FaultCode."""

    def testCodesAreStable(self):
        self.assertEqual(FaultCode.MISSING_ARGUMENT, 11121)
        self.assertEqual(FaultCode.INVALID_ARGUMENT, 11122)
        self.assertEqual(FaultCode.UNKNOWN_TYPE, 11131)

    def testNormalizeDefaultsToTheNumber(self):
        self.assertEqual(FaultCode.UNKNOWN_TYPE.normalize(), "11131")

    def testHostCanRemapCodes(self):
        codes = {FaultCode.INVALID_ARGUMENT: "E-INVALID"}
        with mock.patch.object(sys.modules["__main__"], "__codes__", codes, create=True):
            self.assertEqual(FaultCode.INVALID_ARGUMENT.normalize(), "E-INVALID")
            self.assertEqual(invalid().__result__()["code"], "E-INVALID")
            self.assertEqual(FaultCode.MISSING_ARGUMENT.normalize(), "11121")


class TestDispatchException(TestCase):
    """Behavioral tests for DispatchException and its payloads."""

    def testHierarchy(self):
        self.assertTrue(issubclass(InvalidArgumentError, faults.ArgumentError))
        self.assertTrue(issubclass(MissingArgumentError, faults.ArgumentError))
        self.assertTrue(issubclass(UnknownTypeError, faults.ConfigurationError))
        self.assertTrue(issubclass(faults.ArgumentError, DispatchException))

    def testResultPayload(self):
        self.assertEqual(invalid().__result__(), {
            "title": "invalid argument",
            "description": 'argument "sentence" does not accept `too_long!`.',
            "color": faults.DEFAULT_COLOR,
            "code": "11122",
        })

    def testResultColorComesFromOptions(self):
        self.assertEqual(invalid(color=0x555555).__result__()["color"], 0x555555)

    def testResultWithoutCode(self):
        payload = DispatchException("boom").__result__()
        self.assertEqual(payload["title"], "dispatch error")
        self.assertIsNone(payload["code"])

    def testStrWithoutMessage(self):
        self.assertEqual(str(DispatchException()), "")

    def testReplaceKeepsTypeAndMergesOptions(self):
        fault = invalid()
        replaced = fault.__replace__(shell=True, hint="other")
        self.assertIsInstance(replaced, InvalidArgumentError)
        self.assertIsNot(replaced, fault)
        self.assertEqual(replaced.message, fault.message)
        self.assertEqual(replaced.hint, "other")
        self.assertTrue(replaced.options["shell"])
        self.assertIsNone(fault.options.get("shell"))

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            invalid().options["code"] = None


class TestRendering(TestCase):
    """Behavioral tests for Rich rendering of faults."""

    def testPlainRendering(self):
        output = render(invalid(colorful=False))
        self.assertIn("[ camdo", output)
        self.assertIn("11122 | Invalid Argument ]", output)
        self.assertIn('argument "sentence" does not accept `too_long!`.', output)
        self.assertIn("→ the first position expects a valid small_size", output)

    def testFancyRenderingUsesAPanel(self):
        output = render(invalid(fancy=True, colorful=False))
        self.assertIn("Invalid Argument", output)
        self.assertIn("╭", output)
        self.assertIn("too_long!", output)

    def testHostProgramName(self):
        with mock.patch.object(sys.modules["__main__"], "__prog__", "gateway", create=True):
            self.assertIn("[ gateway", render(invalid()))

    def testMissingHintIsOmitted(self):
        output = render(MissingArgumentError('argument "x" is required.', code=FaultCode.MISSING_ARGUMENT))
        self.assertNotIn("→", output)


class TestTrigger(TestCase):
    """Behavioral tests for trigger()."""

    def testRaisesOutsideShellMode(self):
        fault = UnknownTypeError("undefined type", code=FaultCode.UNKNOWN_TYPE)
        with self.assertRaises(UnknownTypeError) as context:
            trigger(fault)
        self.assertEqual(context.exception.message, "undefined type")

    def testRendersInShellMode(self):
        stream = io.StringIO()
        fault = UnknownTypeError("undefined type", code=FaultCode.UNKNOWN_TYPE)
        with mock.patch.object(faults, "console", Console(file=stream, width=120, color_system=None)):
            self.assertIsNone(trigger(fault, shell=True, colorful=False))
        self.assertIn("11131", stream.getvalue())
        self.assertIn("undefined type", stream.getvalue())

    def testRejectsObjectsWithoutTheProtocol(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


class TestGetdoc(TestCase):
    """Behavioral tests for getdoc()."""

    def testMissingDocsReturnNone(self):
        self.assertIsNone(getdoc(FaultCode.UNKNOWN_TYPE))

    def testHostDocs(self):
        docs = {FaultCode.UNKNOWN_TYPE: "define every type before dispatching"}
        with mock.patch.object(sys.modules["__main__"], "__docs__", docs, create=True):
            self.assertEqual(getdoc(FaultCode.UNKNOWN_TYPE), "define every type before dispatching")

    def testRejectsPlainIntegers(self):
        with self.assertRaises(TypeError):
            getdoc(11131)


class TestHostDocsReachTheUser(TestCase):
    """Host __docs__ entries surface in rendered faults and sink payloads."""

    def setUp(self):
        docs = {
            FaultCode.UNKNOWN_TYPE: "see the type catalogue",
            FaultCode.INVALID_ARGUMENT: "see the argument guide",
        }
        patcher = mock.patch.object(sys.modules["__main__"], "__docs__", docs, create=True)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.dispatcher = Dispatcher(shell=True, colorful=False)
        self.dispatcher.define_type({"id": "small_size", "validate": lambda raw: len(raw) < 5})
        self.dispatcher.define_command({"id": "echo", "args": [{"id": "x", "type": "small_size"}], "run": print})
        self.dispatcher.define_command({"id": "ghost", "args": [{"id": "x", "type": "missing"}], "run": print})

    def testPayloadCarriesDocs(self):
        results = []
        self.dispatcher.dispatch("echo toolong", results.append)
        self.assertEqual(results[0]["docs"], "see the argument guide")

    def testShellRenderingShowsDocs(self):
        stream = io.StringIO()
        with mock.patch.object(faults, "console", Console(file=stream, width=120, color_system=None)):
            self.dispatcher.dispatch("ghost value", print)
        self.assertIn("see the type catalogue", stream.getvalue())

    def testFancyRenderingShowsDocs(self):
        self.assertIn("read me", render(invalid(docs="read me", fancy=True, colorful=False)))

    def testPayloadOmitsDocsWhenUndocumented(self):
        self.assertNotIn("docs", invalid().__result__())


if __name__ == "__main__":
    unittest.main()
