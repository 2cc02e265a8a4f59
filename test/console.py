"""
Console facade tests (registration, lazy parsing, output, prompts, validation).

Scope
- Registration keys and duplicate warnings.
- Lazy parsing and the valid/invalid replacement rule.
- Output helpers: write/send, header, alert, colorize.
- Interactive prompt loop.
- help() rendering and validate() in raising and shell modes.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with colorless rich consoles for deterministic comparisons.
"""
import io
import unittest
import warnings
from unittest import TestCase, mock

from rich.console import Console as Terminal

from termina import (
    ArgumentScanner,
    Color,
    Command,
    Console,
    DuplicateInputWarning,
    Option,
    ProcessEnvironment,
    Request,
    RequiredParamsNotFoundError,
    Response,
    ValueMode,
    colorize,
)


def request(*tokens):
    return Request(ArgumentScanner(ProcessEnvironment(("app.py", *tokens), {})))


def terminal():
    return Terminal(file=io.StringIO(), width=100, color_system=None, force_terminal=False)


class TestRegistration(TestCase):
    """Registries before parsing."""

    def testKeys(self):
        console = Console(
            [Command("run")],
            [Option("-o|--output", ValueMode.REQUIRED), Option("-v")],
            request=request("--output"),
        )
        self.assertEqual(list(console.commands), ["run"])
        self.assertEqual(list(console.options), ["--output", "-v"])

    def testChaining(self):
        console = Console(request=request())
        self.assertIs(console.add_command(Command("run")), console)
        self.assertIs(console.add_options([Option("-v")]), console)

    def testDuplicateWarns(self):
        console = Console([Command("run")], request=request())
        with self.assertWarns(DuplicateInputWarning):
            console.add_command(Command("run"))

    def testSameCommandDoesNotWarn(self):
        run = Command("run")
        console = Console([run], request=request("run"))
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            console.add_command(run)
        self.assertIs(console.commands["run"], run)

    def testWrongTypesRaise(self):
        with self.assertRaises(TypeError):
            Console([Option("-v")], request=request())
        with self.assertRaises(TypeError):
            Console(request=object())
        with self.assertRaises(ValueError):
            Console(width=0, request=request())


class TestLazyParsing(TestCase):
    """Accessors parse on first use."""

    def testValidRequestReplacesRegistries(self):
        console = Console(
            [Command("run"), Command("stop")],
            [Option("-o|--output", ValueMode.REQUIRED), Option("-q")],
            request=request("run", "-oout.txt", "extra"),
        )
        self.assertFalse(console.request.parsed)

        self.assertIs(console.get_command("run"), True)
        self.assertTrue(console.request.parsed)
        self.assertEqual(console.get_option("-o"), "out.txt")
        self.assertEqual(console.get_option("--output"), "out.txt")
        self.assertIsNone(console.get_option("-q"))
        self.assertFalse(console.has_command("stop"))
        self.assertEqual(console.arguments, ["run", "extra"])
        self.assertTrue(console.has_argument("extra"))
        self.assertTrue(console.is_request_valid())

    def testInvalidRequestKeepsRegistries(self):
        console = Console(
            [Command("run")],
            [Option("-o|--output", ValueMode.REQUIRED, required=True)],
            request=request("run"),
        )
        self.assertFalse(console.is_request_valid())
        self.assertEqual(console.required_params_not_found, ["-o|--output"])
        self.assertEqual(console.arguments, [])
        self.assertTrue(console.has_option("--output"))
        self.assertFalse(console.has_option("-o"))
        self.assertIsNone(console.get_option("--output"))

    def testParsesOnce(self):
        console = Console([Command("run")], request=request("run"))
        with mock.patch.object(Request, "parse", wraps=console.request.parse) as parse:
            console.has_command("run")
            console.get_command("run")
        parse.assert_called_once()


class TestOutput(TestCase):
    """Response buffering and formatting helpers."""

    def testWriteAndSend(self):
        stream = io.StringIO()
        response = Response()
        console = Console(request=request(), response=response, console=Terminal(file=stream, color_system=None))
        console.write("hello", indent="  ").write("world")
        self.assertEqual(response.body, "  hello\nworld\n")

        console.send()
        self.assertEqual(stream.getvalue(), "  hello\nworld\n")
        self.assertEqual(response.body, "")

    def testWriteWraps(self):
        response = Response()
        console = Console(width=10, request=request(), response=response, console=terminal())
        console.write("aaaa bbbb cccc")
        self.assertEqual(response.body, "aaaa bbbb\ncccc\n")

    def testHeader(self):
        console = Console(request=request())
        self.assertEqual(console.header("Title"), "Title\n-----")
        self.assertEqual(console.header("Title", "=", 3), "Title\n===")

    def testAlertPlain(self):
        console = Console(request=request(), colorful=False)
        alert = console.alert("Careful", Color.WHITE, Color.RED, width=30)
        lines = alert.splitlines()
        self.assertTrue(lines[0].startswith("╭"))
        self.assertTrue(all(len(line) == 30 for line in lines))
        self.assertIn("Careful", alert)
        self.assertNotIn("\x1b[", alert)

    def testAlertColored(self):
        console = Console(request=request())
        self.assertIn("\x1b[", console.alert("Careful", Color.WHITE, Color.RED, width=30))

    def testColorize(self):
        colored = colorize("text", Color.RED)
        self.assertIn("\x1b[31m", colored)
        self.assertIn("text", colored)
        self.assertTrue(colored.endswith("\x1b[0m"))

    def testColorizePassThrough(self):
        self.assertEqual(colorize("text"), "text")
        self.assertEqual(colorize("text", Color.RED, raw=True), "text")
        self.assertEqual(colorize("text", 99), "text")
        self.assertEqual(Console(request=request(), colorful=False).colorize("text", Color.RED), "text")

    def testColorStyles(self):
        self.assertEqual(Color.NORMAL.foreground, "default")
        self.assertEqual(Color.BRIGHT_BLUE.foreground, "bright_blue")
        self.assertEqual(Color.BRIGHT_BOLD_RED.foreground, "bold bright_red")
        self.assertEqual(Color.GREEN.background, "on green")
        self.assertIsNone(Color.BOLD_GREEN.background)


class TestPrompt(TestCase):
    """Interactive questions."""

    def testRepeatsUntilAValidOption(self):
        console = Console(request=request(), console=terminal())
        with mock.patch("builtins.input", side_effect=["maybe ", "YES "]) as ask:
            self.assertEqual(console.prompt("continue? ", ["yes", "no"]), "yes")
        self.assertEqual(ask.call_count, 2)

    def testCaseSensitive(self):
        console = Console(request=request(), console=terminal())
        with mock.patch("builtins.input", side_effect=["yes", "Yes"]):
            self.assertEqual(console.prompt("continue? ", ["Yes"], case_sensitive=True), "Yes")

    def testFreeAnswer(self):
        console = Console(request=request(), console=terminal())
        with mock.patch("builtins.input", return_value="Anything  "):
            self.assertEqual(console.prompt("name? "), "anything")


class TestHelpAndValidation(TestCase):
    """Usage rendering and required-parameter failures."""

    def setUp(self):
        self.terminal = terminal()

    def console(self, *tokens, shell=False):
        return Console(
            [Command("help", override=True, help="show this help"), Command("print", ValueMode.REQUIRED)],
            [Option("-o|--output", ValueMode.REQUIRED, required=True, help="output file")],
            request=request(*tokens),
            console=self.terminal,
            shell=shell,
            colorful=False,
        )

    def testHelp(self):
        self.console().help()
        output = self.terminal.file.getvalue()
        self.assertIn("usage: app.py <command> [options]", output)
        self.assertIn("show this help", output)
        self.assertIn("print <value>", output)
        self.assertIn("-o | --output <value> *", output)
        self.assertIn("output file", output)

    def testValidRequestPasses(self):
        self.assertIsNone(self.console("-oout.txt").validate())
        self.assertIsNone(self.console("help").validate())

    def testInvalidRequestRaises(self):
        with self.assertRaises(RequiredParamsNotFoundError) as context:
            self.console("print").validate()
        self.assertEqual(context.exception.params, ("-o|--output", "print"))
        self.assertIn("-o|--output, print", context.exception.message)

    def testInvalidRequestExitsInShellMode(self):
        stderr = Terminal(file=io.StringIO(), width=100, color_system=None)
        with mock.patch("termina.faults.console", stderr):
            with self.assertRaises(SystemExit) as context:
                self.console("print", shell=True).validate()
        self.assertEqual(context.exception.code, 1)
        self.assertIn("usage:", self.terminal.file.getvalue())
        self.assertIn("required parameters not found", stderr.file.getvalue().lower())


if __name__ == "__main__":
    unittest.main()
