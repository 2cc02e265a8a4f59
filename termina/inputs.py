r"""
Termina inputs: commands, options and their value modes.

Overview
- ValueMode
  • NONE, REQUIRED, OPTIONAL and IS_ARRAY. Array modes are built by or-ing
    IS_ARRAY into REQUIRED or OPTIONAL (e.g. ValueMode.REQUIRED | ValueMode.IS_ARRAY).

- Inputs
  • Command: a bare word recognized anywhere in the argument vector ("help", "user edit").
    An override command waives every required-parameter failure of the request.
  • Option: a dashed switch with a short name ("-p"), a long name ("--print") or both
    ("-p|--print"). A required option must appear at least once.

- Values
  Once resolved by a Request, an input holds one of
  • True            (present without a value, or present with an empty value),
  • str             (single value),
  • list[str]       (array value, split on ",").
  Before that, value is None.

Value modes
- set_value_mode() only understands the four canonical combinations:
    REQUIRED, OPTIONAL, REQUIRED | IS_ARRAY, OPTIONAL | IS_ARRAY
  Anything else (NONE included) leaves the flags untouched. Flags are only ever
  switched on, never reset.
- "required" (options only) and "value required" are independent:
  • required: the option itself must appear;
  • value required: once it appears, it must carry a non-empty value.

Quick example:
    >>> option = Option("-p|--print", ValueMode.REQUIRED | ValueMode.IS_ARRAY)
    >>> option.short_name, option.long_name, option.value_array
    ('-p', '--print', True)
    >>> Command("user edit", ValueMode.OPTIONAL).accepts_value()
    True
"""
import functools
import operator
import re
from enum import IntEnum

from .faults import InvalidNameError, InvalidValueModeError
from .utils import *


class ValueMode(IntEnum):
    """
    Value modes for inputs.

    Combinations are plain integers (REQUIRED | IS_ARRAY == 6, OPTIONAL | IS_ARRAY == 7).
    """
    NONE = 1
    REQUIRED = 2
    OPTIONAL = 3
    IS_ARRAY = 4


class InputType(type):
    """
    Metaclass that gives inputs a stable, introspectable shape.

    Responsibilities
    - Expose the names listed in __introspectable__ as read-only properties backed by
      "_{name}" fields (see mirror()).
    - Provide readable __repr__/__rich_repr__ implementations for diagnostics.
    - Derive __typename__ from the class name ("Command" -> "command") for messages.
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

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(short_name='-p', long_name='--print', required=False, ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_help(cls, help, /):
    if not isinstance(help, str | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    return coalesce(help)


class Input(metaclass=InputType):
    """
    Abstract input: the value-mode state machine shared by commands and options.

    The three mode flags start switched off and the value starts as None. A Request
    resolves the value in place while parsing.
    """

    VALUE_NONE = ValueMode.NONE
    VALUE_REQUIRED = ValueMode.REQUIRED
    VALUE_OPTIONAL = ValueMode.OPTIONAL
    VALUE_IS_ARRAY = ValueMode.IS_ARRAY

    __introspectable__ = (
        "value_optional",
        "value_required",
        "value_array",
        "value",
    )

    def __init__(self):
        if type(self) is Input:
            raise TypeError("type 'Input' is abstract, use a command or an option")
        self._value_optional = False
        self._value_required = False
        self._value_array = False
        self._value = None

    def set_value_mode(self, mode, /):
        """
        Switch on the mode flags matching one of the canonical combinations.

        Unrecognized integer combinations are ignored. Non-integers are programmer
        errors and raise InvalidValueModeError.
        """
        if not isinstance(mode, int) or isinstance(mode, bool):
            raise InvalidValueModeError(f"{type(self).__typename__} value mode must be a ValueMode")

        if mode == ValueMode.REQUIRED:
            self.set_value_required(True)
        elif mode == ValueMode.OPTIONAL:
            self.set_value_optional(True)
        elif mode == ValueMode.REQUIRED | ValueMode.IS_ARRAY:
            self.set_value_required(True)
            self.set_value_array(True)
        elif mode == ValueMode.OPTIONAL | ValueMode.IS_ARRAY:
            self.set_value_optional(True)
            self.set_value_array(True)
        return self

    def set_value_optional(self, optional, /):
        self._value_optional = bool(optional)
        return self

    def set_value_required(self, required, /):
        self._value_required = bool(required)
        return self

    def set_value_array(self, array, /):
        self._value_array = bool(array)
        return self

    def set_value(self, value, /):
        """
        Store a resolved value, overwriting any previous one.
        """
        self._value = value
        return self

    def accepts_value(self):
        return self.value_optional or self.value_required


class Command(Input):
    """
    Bare-word command.

    The name is stored verbatim; it may contain spaces ("user edit"), in which case it
    only matches an argument that is exactly that string.
    """

    __introspectable__ = (
        "name",
        "help",
        "override",
        "value_optional",
        "value_required",
        "value_array",
        "value",
    )

    def __init__(self, name, /, value_mode=Unset, override=False, help=Unset):
        super().__init__()
        self.set_name(name)
        if value_mode is not Unset:
            self.set_value_mode(value_mode)
        self.set_override(override)
        self._help = _sanitize_help(type(self), help)

    def set_name(self, name, /):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not name.strip():
            raise InvalidNameError(f"{type(self).__typename__} 'name' cannot be empty")
        self._name = name
        return self

    def set_override(self, override, /):
        self._override = bool(override)
        return self

    def set_help(self, help, /):
        self._help = _sanitize_help(type(self), help)
        return self

    def __str__(self):
        return self._name


class Option(Input):
    """
    Dashed option.

    Accepted names
    - "-x"        short only
    - "--xxxx"    long only
    - "-x|--xxxx" both (short part with a single dash, long part with two)

    Anything else raises InvalidNameError.
    """

    __introspectable__ = (
        "short_name",
        "long_name",
        "required",
        "help",
        "value_optional",
        "value_required",
        "value_array",
        "value",
    )

    def __init__(self, name, /, value_mode=Unset, required=False, help=Unset):
        super().__init__()
        self._short_name = None
        self._long_name = None
        self.set_name(name)
        if value_mode is not Unset:
            self.set_value_mode(value_mode)
        self.set_required(required)
        self._help = _sanitize_help(type(self), help)

    def set_name(self, name, /):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")

        if not name.strip("-"):
            raise InvalidNameError(f"{type(self).__typename__} name {name!r} cannot be made of dashes only")
        elif "|" in name[1:]:
            short, _, long = name.partition("|")
            if not re.match(r"-[^\s-]", short) or not re.fullmatch(r"--\S+", long):
                raise InvalidNameError(
                    f"{type(self).__typename__} name {name!r} must be either a short option or long option, "
                    f"with dashes (-o, --option or -o|--option)"
                )
            self._short_name, self._long_name = short, long
        elif re.match(r"--\S", name):
            self._short_name, self._long_name = None, name
        elif re.match(r"-\S", name):
            self._short_name, self._long_name = name, None
        else:
            raise InvalidNameError(
                f"{type(self).__typename__} name {name!r} must be either a short option or long option, "
                f"with dashes (-o, --option or -o|--option)"
            )
        return self

    def set_required(self, required, /):
        self._required = bool(required)
        return self

    def set_help(self, help, /):
        self._help = _sanitize_help(type(self), help)
        return self

    def has_short_name(self):
        return self._short_name is not None

    def has_long_name(self):
        return self._long_name is not None

    @property
    def names(self):
        """
        Present names, short first.
        """
        return tuple(name for name in (self._short_name, self._long_name) if name is not None)

    @property
    def identifier(self):
        """
        Display identifier: "-x|--xxxx" when both names exist, otherwise the one that does.
        """
        return "|".join(self.names)


__all__ = (
    "ValueMode",
    "Input",
    "Command",
    "Option",
)

# Internal metaclass, not part of the public API.
del InputType
