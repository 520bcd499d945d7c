from collections.abc import Sequence
from typing import TYPE_CHECKING

from attrs import define, field

from argweave.utils import display_token, to_tuple_converter

if TYPE_CHECKING:
    from argweave.outcome import Failed


__all__ = [
    "ArgweaveError",
    "ConversionError",
    "DuplicateArgumentError",
    "InvalidValueError",
    "MissingRequiredArgumentsError",
    "MissingValueError",
    "ParseError",
    "SchemaError",
    "UnexpectedArgumentError",
    "UnknownSubcommandError",
    "UnrecognizedArgumentError",
]


class SchemaError(Exception):
    """The declared schema is inconsistent.

    This doesn't derive from ArgweaveError since this is a developer error
    rather than a runtime error.
    """


class ConversionError(ValueError):
    """Raised by a converter when a raw value can't be converted.

    The exception message is shown to the user verbatim.
    """


@define(kw_only=True)
class ArgweaveError(Exception):
    """Root exception for runtime parsing errors.

    Resolution never raises these; they are collected into :attr:`.Failed.errors`.
    """

    msg: str | None = None
    """
    If set, override automatic message generation.
    """

    command_path: tuple[str, ...] = field(default=(), converter=to_tuple_converter)
    """
    Command path of the schema level that recorded the error.
    """

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return ""


@define(kw_only=True)
class UnrecognizedArgumentError(ArgweaveError):
    """An option-like token doesn't match any option in scope."""

    argument: str
    """The offending option, e.g. ``--frobnicate`` or ``-x``."""

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return f"Unrecognized argument: {display_token(self.argument)}"


@define(kw_only=True)
class MissingValueError(ArgweaveError):
    """An option requiring a value was the last token."""

    option: str

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return f"No value provided for option '{self.option}'."


@define(kw_only=True)
class DuplicateArgumentError(ArgweaveError):
    """A non-repeating switch or option was given more than once."""

    option: str

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return f"Duplicate values provided for '{self.option}'."


@define(kw_only=True)
class InvalidValueError(ArgweaveError):
    """A converter rejected the raw value."""

    field: str
    """Option name as given on the command line, or the positional's name."""

    raw: str
    """Raw value, as received."""

    message: str
    """Human-readable reason from the converter."""

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return f"Error parsing argument '{self.field}' with value '{display_token(self.raw)}': {self.message}"


@define(kw_only=True)
class MissingRequiredArgumentsError(ArgweaveError):
    """One or more required arguments were not provided.

    A single instance lists every missing positional, option and subcommand of one command level.
    """

    positionals: tuple[str, ...] = field(default=(), converter=to_tuple_converter)
    options: tuple[str, ...] = field(default=(), converter=to_tuple_converter)
    subcommands: tuple[str, ...] | None = None
    """Available subcommands if a required subcommand is missing."""

    @property
    def names(self) -> tuple[str, ...]:
        """Every missing positional and option, in reporting order."""
        return self.positionals + self.options

    def __str__(self):
        if self.msg is not None:
            return self.msg

        indent = "\n    "
        sections = []
        if self.positionals:
            sections.append("Required positional arguments not provided:" + "".join(indent + x for x in self.positionals))
        if self.options:
            sections.append("Required options not provided:" + "".join(indent + x for x in self.options))
        if self.subcommands is not None:
            choices = ("help", *self.subcommands)
            sections.append("One of the following subcommands must be present:" + "".join(indent + x for x in choices))
        return "\n".join(sections)


@define(kw_only=True)
class UnknownSubcommandError(ArgweaveError):
    """Token did not match any subcommand of a command that requires one."""

    token: str
    choices: tuple[str, ...] = field(default=(), converter=to_tuple_converter)

    def __str__(self):
        if self.msg is not None:
            return self.msg

        response = f'Unknown subcommand "{display_token(self.token)}".'

        import difflib

        close_matches = difflib.get_close_matches(self.token, self.choices, n=1, cutoff=0.6)
        if close_matches:
            response += f' Did you mean "{close_matches[0]}"?'
        if self.choices:
            response += f" Available subcommands: {', '.join(self.choices)}."
        return response


@define(kw_only=True)
class UnexpectedArgumentError(ArgweaveError):
    """A token couldn't be attributed to any positional slot."""

    argument: str

    after_help: bool = False
    """The token followed the ``help`` subcommand literal."""

    def __str__(self):
        if self.msg is not None:
            return self.msg
        if self.after_help:
            return f"Trailing arguments are not allowed after `help`: {display_token(self.argument)}"
        return f"Unexpected argument: {display_token(self.argument)}"


@define(kw_only=True)
class ParseError(ArgweaveError):
    """Raised by :func:`argweave.parse_args` when parsing failed and exiting was disabled."""

    outcome: "Failed"

    @property
    def errors(self) -> Sequence[ArgweaveError]:
        return self.outcome.errors

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return "\n".join(str(e) for e in self.outcome.errors)
