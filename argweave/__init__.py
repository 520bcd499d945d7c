__version__ = "0.0.0"

__all__ = [
    "ArgumentSpec",
    "ArgweaveError",
    "Cardinality",
    "CommandSchema",
    "ConversionError",
    "DuplicateArgumentError",
    "Failed",
    "HelpFormatter",
    "HelpRequested",
    "HelpStyle",
    "InvalidValueError",
    "Kind",
    "MissingRequiredArgumentsError",
    "MissingValueError",
    "Outcome",
    "ParseError",
    "Resolver",
    "SchemaError",
    "UNSET",
    "UnexpectedArgumentError",
    "UnknownSubcommandError",
    "UnrecognizedArgumentError",
    "Value",
    "command",
    "convert",
    "exit_code",
    "format_error",
    "format_help",
    "format_usage",
    "option",
    "parse_args",
    "positional",
    "report",
    "resolve",
    "switch",
]

from argweave import convert
from argweave.exceptions import (
    ArgweaveError,
    ConversionError,
    DuplicateArgumentError,
    InvalidValueError,
    MissingRequiredArgumentsError,
    MissingValueError,
    ParseError,
    SchemaError,
    UnexpectedArgumentError,
    UnknownSubcommandError,
    UnrecognizedArgumentError,
)
from argweave.help import HelpFormatter, HelpStyle, format_help, format_usage
from argweave.outcome import Failed, HelpRequested, Outcome, Value
from argweave.report import exit_code, format_error, parse_args, report
from argweave.resolve import Resolver, resolve
from argweave.schema import ArgumentSpec, Cardinality, CommandSchema, Kind, command, option, positional, switch
from argweave.utils import UNSET
