"""
Termina request layer: scan the argument vector and bind it to inputs.

What this module provides
- ProcessEnvironment: an explicit (argv, env) snapshot. The parser never reads
  sys.argv or os.environ on its own; ProcessEnvironment.current() does it once,
  on demand, so tests can feed any vector they like.
- ArgumentScanner: the token list (argv minus the script name) with deferred
  consumption. Consumed tokens keep their index until compact() runs, so a phase
  can iterate a stable snapshot and drop its matches in one go.
- Request: the parser. parse(commands, options) resolves the inputs in place and
  records which required parameters were not satisfied.

Parsing phases
1. Options, in registration order. Matching is prefix based ("-v" matches "-verbose"),
   the earliest token wins the value, later matching tokens are still consumed.
   Options that already hold a value are skipped entirely.
2. Compaction: consumed tokens are dropped, the remaining ones keep their order.
3. Commands, in registration order, by exact token equality. Command tokens are
   never consumed; a value-accepting command takes the following token unless that
   token is itself a registered command name.
4. Override: if an override command matched, every unmet requirement is waived.

Errors
- Wrong user input is never an exception: is_valid() and required_params_not_found
  report it. Only programmer errors (badly declared inputs) and environment errors (no argv)
  raise.

Concurrency
- A Request mutates the inputs it parses. One Request per thread; sharing inputs
  between concurrent parses is undefined.

Quick example:
    >>> scanner = ArgumentScanner(ProcessEnvironment(("app", "print", "-ta,b"), {}))
    >>> request = Request(scanner)
    >>> request.parse([Command("print")], [Option("-t", ValueMode.REQUIRED | ValueMode.IS_ARRAY)])
    >>> request.get_option("-t").value, request.arguments
    (['a', 'b'], ['print'])
"""
import os
import sys
from collections.abc import Iterable, Mapping
from typing import NamedTuple

from .faults import MissingArgumentsError
from .inputs import Command, Option
from .utils import *


class ProcessEnvironment(NamedTuple):
    """
    Snapshot of the process inputs the parser depends on.

    - argv: the full argument vector, script name first (None when unavailable).
    - env: environment variables.
    """
    argv: tuple[str, ...] | None
    env: Mapping[str, str]

    @classmethod
    def current(cls):
        """
        Snapshot the live sys.argv and os.environ.
        """
        argv = getattr(sys, "argv", None)
        return cls(tuple(argv) if argv is not None else None, dict(os.environ))


class ArgumentScanner:
    """
    Ordered token source with deferred consumption.

    Indexes are stable between compactions: consume(index) only marks a token, and
    compact() rebuilds the list without the marked ones. Membership checks and
    iteration already ignore consumed tokens.
    """

    def __init__(self, environment=Unset, /):
        if environment is Unset:
            environment = ProcessEnvironment.current()
        elif not isinstance(environment, ProcessEnvironment):
            raise TypeError("argument-scanner 'environment' must be a process environment")

        if not environment.argv:
            raise MissingArgumentsError("the command line arguments are not set")
        if not all(isinstance(token, str) for token in environment.argv):
            raise TypeError("argument-scanner 'argv' must be a sequence of strings")
        if not isinstance(environment.env, Mapping):
            raise TypeError("argument-scanner 'env' must be a mapping")

        self._script_name = environment.argv[0]
        self._tokens = list(environment.argv[1:])
        self._consumed = set()
        self._env = dict(environment.env)

    script_name = mirror("script_name")
    env = mirror("env")

    @property
    def tokens(self):
        """
        Current token list (consumed tokens included until the next compact()).
        """
        return tuple(self._tokens)

    def consume(self, index, /):
        if not 0 <= index < len(self._tokens):
            raise IndexError("argument-scanner token index out of range")
        self._consumed.add(index)

    def consumed(self, index, /):
        return index in self._consumed

    def compact(self):
        """
        Drop consumed tokens, preserving the relative order of the others.
        """
        self._tokens = [token for index, token in enumerate(self._tokens) if index not in self._consumed]
        self._consumed.clear()

    def has_token(self, token, /):
        return token in iter(self)

    def index(self, token, /):
        """
        Position of the first unconsumed occurrence of token in the current list.

        Raises ValueError when the token is absent.
        """
        for index, candidate in enumerate(self._tokens):
            if candidate == token and index not in self._consumed:
                return index
        raise ValueError(f"{token!r} is not an unconsumed token")

    def get_argument(self, index, /):
        try:
            return list(self)[index]
        except IndexError:
            return None

    def get_env(self, key, default=None, /):
        return self._env.get(key, default)

    def __iter__(self):
        return (token for index, token in enumerate(self._tokens) if index not in self._consumed)

    def __len__(self):
        return len(self._tokens) - len(self._consumed)

    def __repr__(self):
        return f"argument-scanner(script_name={self._script_name!r}, tokens={list(self)!r})"


def _registry(inputs, kind, key, /):
    """
    Normalize a mapping or an iterable of inputs into an ordered {key: input} dict.
    """
    if isinstance(inputs, Mapping):
        inputs = dict(inputs)
    elif isinstance(inputs, Iterable) and not isinstance(inputs, str):
        inputs = list(inputs)
    else:
        raise TypeError(f"parse() {kind.__typename__}s must be a mapping or an iterable")

    for x in (inputs.values() if isinstance(inputs, dict) else inputs):
        if not isinstance(x, kind):
            raise TypeError(f"parse() {kind.__typename__}s must only contain {kind.__typename__} objects")

    if isinstance(inputs, dict):
        return inputs
    return {key(x): x for x in inputs}


def _split(value, array, /):
    return value.split(",") if array else value


def _empty(value, /):
    if isinstance(value, list):
        return bool(value) and value[0] == ""
    return value == ""


class Request:
    """
    Argument parser bound to one scanner.

    Lifecycle
    - Unparsed until parse() runs; parse() is effective once, later calls are no-ops.
    - Inputs passed to parse() are resolved in place (set_value), and the matched ones
      are recorded in the commands/options mappings.

    Accessors
    - is_valid(): no unmet requirement left.
    - required_params_not_found: identifiers of the unmet requirements, in order
      ("-p|--print" for options with both names, the bare name for commands).
    - arguments: tokens left over after the option phase (commands included).
    """

    def __init__(self, scanner=Unset, /):
        if scanner is Unset:
            scanner = ArgumentScanner()
        elif not isinstance(scanner, ArgumentScanner):
            raise TypeError("request 'scanner' must be an argument scanner")
        self._scanner = scanner
        self._commands = {}
        self._options = {}
        self._required_params_not_found = []
        self._parsed = False

    commands = mirror("commands")
    options = mirror("options")
    required_params_not_found = mirror("required_params_not_found")
    parsed = mirror("parsed")

    @property
    def scanner(self):
        return self._scanner

    @property
    def arguments(self):
        return list(self._scanner)

    @property
    def script_name(self):
        return self._scanner.script_name

    @property
    def env(self):
        return self._scanner.env

    def get_env(self, key, default=None, /):
        return self._scanner.get_env(key, default)

    def get_argument(self, index, /):
        return self._scanner.get_argument(index)

    def get_command(self, name, /):
        return self._commands.get(name)

    def has_command(self, name, /):
        return name in self._commands

    def get_option(self, name, /):
        return self._options.get(name)

    def has_option(self, name, /):
        return name in self._options

    def is_valid(self):
        return not self._required_params_not_found

    def parse(self, commands=(), options=(), /):
        """
        Resolve options then commands against the scanned tokens.

        Parameters
        - commands: Mapping[str, Command] | Iterable[Command] (keyed by name when iterable).
        - options: Mapping[str, Option] | Iterable[Option] (keyed by identifier when iterable).

        Behavior
        - No-op when this request was already parsed.
        - Never raises for user input; see is_valid()/required_params_not_found.
        """
        if self._parsed:
            return

        commands = _registry(commands, Command, lambda command: command.name)
        options = _registry(options, Option, lambda option: option.identifier)

        for option in options.values():
            self._resolve_option(option)

        self._scanner.compact()

        override = False
        for command in commands.values():
            override |= self._resolve_command(command, commands)

        if override:
            self._required_params_not_found.clear()

        self._parsed = True

    def _unmet(self, identifier, /):
        if identifier not in self._required_params_not_found:
            self._required_params_not_found.append(identifier)

    def _resolve_option(self, option, /):
        """
        Scan every unconsumed token for the option's prefixes.

        An occurrence counts unless the option (or its value) is required and the
        extracted value is empty; such an occurrence leaves the token in place so a
        later token can still satisfy the option.
        """
        if option.value is not None:
            return

        present = found = False

        for index, token in enumerate(self._scanner.tokens):
            if self._scanner.consumed(index):
                continue

            for prefix in option.names:
                if not token.startswith(prefix):
                    continue
                present = True

                if option.accepts_value():
                    if option.has_long_name() and "=" in token:
                        value = token.partition("=")[2]
                    else:
                        value = token[len(prefix):]
                    value = _split(value, option.value_array)
                    if (option.required or option.value_required) and _empty(value):
                        break
                else:
                    value = True

                # first counted occurrence wins, later ones are only consumed
                if not found:
                    option.set_value(True if value == "" else value)
                    found = True
                self._scanner.consume(index)
                for name in option.names:
                    self._options[name] = option
                break

        if not found and (option.required or (present and option.value_required)):
            self._unmet(option.identifier)

    def _resolve_command(self, command, commands, /):
        """
        Match the command by exact token equality; return whether it is an override.
        """
        if not self._scanner.has_token(command.name):
            return False

        if command.accepts_value():
            tokens = self._scanner.tokens
            index = self._scanner.index(command.name)
            try:
                value = tokens[index + 1]
            except IndexError:
                value = ""
            if value in {x.name for x in commands.values()}:
                value = ""
            value = _split(value, command.value_array)

            if command.value_required and _empty(value):
                self._unmet(command.name)
            else:
                command.set_value(True if value == "" else value)
        else:
            command.set_value(True)

        self._commands[command.name] = command
        return command.override

    def __rich_repr__(self):
        yield "parsed", self._parsed
        yield "valid", self.is_valid()
        yield "arguments", self.arguments
        yield "required_params_not_found", self.required_params_not_found

    def __repr__(self):
        return f"request({', '.join('%s=%r' % pair for pair in self.__rich_repr__())})"


__all__ = (
    "ProcessEnvironment",
    "ArgumentScanner",
    "Request",
)
