"""
Termina console: the presentation layer over a Request.

What this module provides
- Color: the ANSI palette (base, bright, bold and bright-bold variants) and
  colorize(), which renders a string with rich's standard color system.
- Console: registers commands/options, parses the request lazily on first access,
  exposes the resolved values, and writes to the terminal (wrapped text, headers,
  alert boxes, prompts, help and usage failures).

Runtime flags
- shell: render faults (and the help) instead of raising, then exit with status 1.
- fancy: draw faults and the help inside panels.
- colorful: use the palette; otherwise output plain text.

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry of
  the help renderer (see Console.help) or the fault renderer (see termina.faults).

Quick start
    from termina import Console, Command, Option, ValueMode

    console = Console(
        [Command("help", override=True), Command("print", ValueMode.REQUIRED)],
        [Option("-v|--verbose"), Option("-o|--output", ValueMode.REQUIRED, required=True)],
        shell=True,
    )
    console.validate()
    console.write(f"printing {console.get_command('print')} to {console.get_option('--output')}")
    console.send()
"""
import io
import os.path
from collections import defaultdict
from enum import IntEnum

from rich.box import ROUNDED
from rich.console import Console as Terminal, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .faults import DuplicateInputWarning, RequiredParamsNotFoundError, trigger
from .inputs import Command, Option
from .request import Request
from .response import Response
from .utils import *


class Color(IntEnum):
    NORMAL = 0
    BLACK = 1
    RED = 2
    GREEN = 3
    YELLOW = 4
    BLUE = 5
    MAGENTA = 6
    CYAN = 7
    WHITE = 8
    BRIGHT_BLACK = 9
    BRIGHT_RED = 10
    BRIGHT_GREEN = 11
    BRIGHT_YELLOW = 12
    BRIGHT_BLUE = 13
    BRIGHT_MAGENTA = 14
    BRIGHT_CYAN = 15
    BRIGHT_WHITE = 16
    BOLD_BLACK = 17
    BOLD_RED = 18
    BOLD_GREEN = 19
    BOLD_YELLOW = 20
    BOLD_BLUE = 21
    BOLD_MAGENTA = 22
    BOLD_CYAN = 23
    BOLD_WHITE = 24
    BRIGHT_BOLD_BLACK = 25
    BRIGHT_BOLD_RED = 26
    BRIGHT_BOLD_GREEN = 27
    BRIGHT_BOLD_YELLOW = 28
    BRIGHT_BOLD_BLUE = 29
    BRIGHT_BOLD_MAGENTA = 30
    BRIGHT_BOLD_CYAN = 31
    BRIGHT_BOLD_WHITE = 32

    @property
    def foreground(self):
        """
        Rich style for this color as a foreground.
        """
        if self is Color.NORMAL:
            return "default"
        name = self.name.lower()
        bold = "bold_" in name
        name = name.replace("bold_", "")
        return ("bold " if bold else "") + name

    @property
    def background(self):
        """
        Rich style for this color as a background (None for bold variants).
        """
        if self is Color.NORMAL:
            return "on default"
        if "BOLD" in self.name:
            return None
        return "on " + self.name.lower()


def _resolve_color(color, /):
    if color is None:
        return None
    try:
        return Color(color)
    except ValueError:
        return None


def colorize(string, fg=None, bg=None, /, *, raw=False):
    """
    Wrap a string in ANSI color sequences.

    Parameters
    - fg, bg: Color | int | None. Unknown values are ignored (bold variants have no background).
    - raw: return the string untouched.
    """
    if not isinstance(string, str):
        raise TypeError("colorize() first argument must be a string")
    if raw:
        return string

    fg, bg = _resolve_color(fg), _resolve_color(bg)
    style = " ".join(filter(None, (fg and fg.foreground, bg and bg.background)))
    if not style:
        return string

    terminal = Terminal(file=io.StringIO(), color_system="standard", force_terminal=True, no_color=False, highlight=False, width=max(len(string), 1))
    with terminal.capture() as capture:
        terminal.print(Text(string, style=style), end="", soft_wrap=True)
    return capture.get()


class Console:
    """
    Console application facade.

    Lifecycle
    - Commands are registered by name, options by long name (else short name).
    - The first accessor that needs parsed data runs parse_request(). When the request
      is valid, the registries are replaced by the matched inputs (options then become
      reachable under every one of their names) and the leftover arguments are kept.
    - Value accessors (get_command/get_option) return the resolved value or None.
    """

    def __init__(
            self,
            commands=(),
            options=(),
            width=80,
            *,
            request=Unset,
            response=Unset,
            console=Unset,
            shell=False,
            fancy=False,
            colorful=True
    ):
        if request is Unset:
            request = Request()
        elif not isinstance(request, Request):
            raise TypeError("console 'request' must be a request")

        if response is Unset:
            response = Response()
        elif not isinstance(response, Response):
            raise TypeError("console 'response' must be a response")

        self._request = request
        self._response = response
        if console is Unset:
            console = Terminal(no_color=not colorful)
        self._console = console
        self._commands = {}
        self._options = {}
        self._arguments = []
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self.set_width(width)
        self.add_commands(commands)
        self.add_options(options)

    request = mirror("request")
    response = mirror("response")
    width = mirror("width")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    def set_width(self, width, /):
        if not isinstance(width, int) or isinstance(width, bool):
            raise TypeError("console 'width' must be an integer")
        elif width < 1:
            raise ValueError("console 'width' must be a positive integer")
        self._width = width
        return self

    def _warn(self, message, /):
        trigger(DuplicateInputWarning(message), shell=self._shell, fancy=self._fancy, colorful=self._colorful, prog=self._prog())

    def add_command(self, command, /):
        if not isinstance(command, Command):
            raise TypeError("add_command() argument must be a command")
        if self._commands.get(name := command.name, command) is not command:
            self._warn(f"command {name!r} was already registered")
        self._commands[name] = command
        return self

    def add_commands(self, commands, /):
        for command in commands:
            self.add_command(command)
        return self

    def add_option(self, option, /):
        if not isinstance(option, Option):
            raise TypeError("add_option() argument must be an option")
        name = option.long_name if option.has_long_name() else option.short_name
        if self._options.get(name, option) is not option:
            self._warn(f"option {name!r} was already registered")
        self._options[name] = option
        return self

    def add_options(self, options, /):
        for option in options:
            self.add_option(option)
        return self

    def parse_request(self):
        self._request.parse(self._commands, self._options)
        if self._request.is_valid():
            self._commands = self._request.commands
            self._options = self._request.options
            self._arguments = self._request.arguments

    def _parsed(self):
        if not self._request.parsed:
            self.parse_request()

    @property
    def arguments(self):
        self._parsed()
        return list(self._arguments)

    def has_argument(self, argument, /):
        self._parsed()
        return argument in self._arguments

    @property
    def commands(self):
        self._parsed()
        return dict(self._commands)

    def get_command(self, name, /):
        self._parsed()
        command = self._commands.get(name)
        return command.value if command is not None else None

    def has_command(self, name, /):
        self._parsed()
        return name in self._commands

    @property
    def options(self):
        self._parsed()
        return dict(self._options)

    def get_option(self, name, /):
        self._parsed()
        option = self._options.get(name)
        return option.value if option is not None else None

    def has_option(self, name, /):
        self._parsed()
        return name in self._options

    @property
    def required_params_not_found(self):
        self._parsed()
        return self._request.required_params_not_found

    def is_request_valid(self):
        self._parsed()
        return self._request.is_valid()

    def _prog(self):
        return os.path.basename(self._request.script_name) or "termina"

    def validate(self):
        """
        Surface unmet required parameters as a fault.

        Nothing happens for a valid request. Otherwise a RequiredParamsNotFoundError
        listing the parameters is triggered: in shell mode the help and the fault are
        rendered and the process exits with status 1; outside shell mode it is raised.
        """
        if self.is_request_valid():
            return
        params = self.required_params_not_found
        if self._shell:
            self.help()
        trigger(
            RequiredParamsNotFoundError(f"the following required parameters were not found: {', '.join(params)}"),
            params=params,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
            prog=self._prog(),
        )

    def colorize(self, string, fg=None, bg=None, /, *, raw=False):
        return colorize(string, fg, bg, raw=raw or not self._colorful)

    def header(self, string, /, char="-", size=Unset):
        """
        Return the string over an underline made of char (as long as the string by default).
        """
        if not isinstance(char, str) or len(char) != 1:
            raise TypeError("header() 'char' must be a single character")
        size = coalesce(size, len(string))
        return f"{string}\n{char * size}"

    def alert(self, string, /, fg=None, bg=None, width=Unset):
        """
        Render the string centered in a rounded box and return it as ANSI text.
        """
        width = coalesce(width, self._width)
        fg, bg = _resolve_color(fg), _resolve_color(bg)
        style = " ".join(filter(None, (fg and fg.foreground, bg and bg.background))) if self._colorful else ""

        terminal = Terminal(
            file=io.StringIO(),
            color_system="standard" if self._colorful else None,
            force_terminal=self._colorful,
            no_color=not self._colorful,
            highlight=False,
            width=width,
        )
        with terminal.capture() as capture:
            terminal.print(Panel(Text(string, justify="center"), box=ROUNDED, style=style, padding=(1, 2)))
        return capture.get()

    def write(self, text, /, indent=""):
        """
        Wrap text to the console width and append it to the response, one line at a time.
        """
        if len(text) > self._width:
            lines = [line.plain.rstrip() for line in Text(text).wrap(self._console, self._width)]
        else:
            lines = [text]
        for line in lines:
            self._response.append(indent + line + "\n")
        return self

    def send(self):
        self._response.send(self._console)
        return self

    def clear(self):
        self._console.clear()

    def prompt(self, prompt, /, options=Unset, case_sensitive=False):
        """
        Ask until a valid answer is given.

        Answers are right-stripped (and lowercased unless case_sensitive). With options,
        the question is repeated until the answer is one of them.
        """
        if options is not Unset:
            options = [option if case_sensitive else option.lower() for option in options]

        while True:
            answer = self._console.input(prompt, markup=False).rstrip()
            if not case_sensitive:
                answer = answer.lower()
            if options is Unset or answer in options:
                return answer

    def help(self):
        """
        Render usage, commands and options to the console.

        Palette keys
        - usage-label, program-name, group-label
        - command-name, option-name, metavar, required-mark, description
        - panel-title
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "group-label": "bold #FFFFFF",
            "command-name": "bold #36C5F0",
            "option-name": "bold #00E6FF",
            "metavar": "bold #FFD600",
            "required-mark": "bold #EF4444",
            "description": "#9CA3AF",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styler(style))

        def metavar(x):
            if not x.accepts_value():
                return Text("")
            value = Text.assemble("<", text("value", "metavar"), ">")
            if x.value_array:
                value = Text.assemble(value, "[,", text("...", "metavar"), "]")
            if x.value_optional:
                value = Text.assemble("[", value, "]")
            return Text.assemble(" ", value)

        commands = list(dict.fromkeys(self._commands.values()))
        options = list(dict.fromkeys(self._options.values()))

        usage = Text.assemble(text("usage", "usage-label"), ": ", text(self._prog(), "program-name"))
        if commands:
            usage.append(" <command>")
        if options:
            usage.append(" [options]")

        renders = [usage]

        for label, inputs, names in (
                ("commands", commands, lambda x: text(x.name, "command-name")),
                ("options", options, lambda x: Text(" | ").join(text(name, "option-name") for name in x.names)),
        ):
            if not inputs:
                continue
            table = Table(box=None, show_header=False, padding=(0, 2), title=None)
            table.add_column()
            table.add_column()
            for x in inputs:
                name = Text.assemble(names(x), metavar(x))
                if getattr(x, "required", False):
                    name.append(" *", styler("required-mark"))
                table.add_row(name, text(x.help or "", "description"))
            renders.append(Text.assemble("\n", text(label, "group-label"), ":"))
            renders.append(table)

        renderable = Group(*renders)
        if self._fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", f"{self._prog()} HELP".upper(), " ", "]", style=styler("panel-title")),
                title_align="left",
            )
        self._console.print(renderable)

    def __repr__(self):
        return f"console(commands={list(self._commands)!r}, options={list(self._options)!r}, width={self._width!r})"


__all__ = (
    "Color",
    "colorize",
    "Console",
)
