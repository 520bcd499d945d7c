"""Turning an :data:`~argweave.outcome.Outcome` into user-facing output.

Help goes to standard output with exit code 0; failures go to standard error
as the usage line followed by every collected error, with a nonzero exit code.
"""

import logging
import shlex
import sys
from collections.abc import Iterable
from typing import TYPE_CHECKING

from argweave.exceptions import ParseError
from argweave.help import HelpFormatter
from argweave.outcome import Failed, HelpRequested, Outcome, Value
from argweave.resolve import Resolver

if TYPE_CHECKING:
    from rich.console import Console

    from argweave.schema import CommandSchema

logger = logging.getLogger(__name__)

__all__ = ["exit_code", "format_error", "normalize_tokens", "parse_args", "report"]

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def exit_code(outcome: Outcome) -> int:
    """Process exit code intended for ``outcome``."""
    return EXIT_FAILURE if isinstance(outcome, Failed) else EXIT_SUCCESS


def format_error(failed: Failed) -> str:
    """Usage line, then every error message (one per line), then a hint to run ``--help``."""
    lines = []
    if failed.usage:
        lines.extend([failed.usage, ""])
    lines.extend(failed.messages)
    lines.append(f"Run {' '.join(failed.command_path)} --help for more information.")
    return "\n".join(lines)


def _stdout_console() -> "Console":
    from rich.console import Console

    return Console()


def _stderr_console() -> "Console":
    from rich.console import Console

    return Console(stderr=True)


def _print_plain(console: "Console", text: str):
    """Print without markup, highlighting or re-wrapping."""
    console.print(text.rstrip("\n"), markup=False, highlight=False, emoji=False, soft_wrap=True)


def report(
    outcome: Outcome,
    *,
    console: "Console | None" = None,
    error_console: "Console | None" = None,
) -> int:
    """Display ``outcome`` and return its exit code.

    Parameters
    ----------
    outcome: Value | HelpRequested | Failed
        Result of :func:`~argweave.resolve`.
    console: ~rich.console.Console | None
        Receives help text. Defaults to a console on standard output.
    error_console: ~rich.console.Console | None
        Receives error reports. Defaults to a console on standard error.
    """
    if isinstance(outcome, HelpRequested):
        _print_plain(console or _stdout_console(), outcome.text)
    elif isinstance(outcome, Failed):
        _print_plain(error_console or _stderr_console(), format_error(outcome))
    return exit_code(outcome)


def normalize_tokens(tokens: None | str | Iterable[str | bytes]) -> list[str | bytes]:
    if tokens is None:
        tokens = sys.argv[1:]  # Remove the executable
    elif isinstance(tokens, str):
        tokens = shlex.split(tokens)
    else:
        tokens = list(tokens)
    return tokens


def parse_args(
    schema: "CommandSchema",
    tokens: None | str | Iterable[str | bytes] = None,
    *,
    prog: str | None = None,
    console: "Console | None" = None,
    error_console: "Console | None" = None,
    formatter: HelpFormatter | None = None,
    print_error: bool = True,
    exit_on_error: bool = True,
) -> Value | HelpRequested:
    """Resolve the command line and act on the outcome.

    Parameters
    ----------
    schema: CommandSchema
        Root command.
    tokens: None | str | Iterable[str | bytes]
        Arguments to parse. If :obj:`None`, ``sys.argv[1:]`` is used.
        A string is split with :func:`shlex.split`.
    prog: str | None
        Name of the root command in usage and help. Defaults to ``schema.name``.
    console: ~rich.console.Console | None
        Receives help text.
    error_console: ~rich.console.Console | None
        Receives error reports.
    formatter: HelpFormatter | None
        Help renderer; its console is also used for the terminal width query.
    print_error: bool
        Print the help text or error report.
    exit_on_error: bool
        On help, ``sys.exit(0)``; on failure, ``sys.exit(1)``.
        Otherwise, help is returned and failures raise :exc:`.ParseError`.

    Returns
    -------
    Value | HelpRequested
        :class:`.HelpRequested` is only returned if ``exit_on_error`` is :obj:`False`.

    Raises
    ------
    ParseError
        Parsing failed and ``exit_on_error`` is :obj:`False`.
    """
    if formatter is None:
        formatter = HelpFormatter(console=console)
    tokens = normalize_tokens(tokens)
    outcome = Resolver(schema, prog=prog, formatter=formatter).resolve(tokens)

    if isinstance(outcome, Value):
        return outcome

    if print_error:
        report(outcome, console=console, error_console=error_console)

    if exit_on_error:
        logger.debug("Exiting with code %d", exit_code(outcome))
        sys.exit(exit_code(outcome))

    if isinstance(outcome, Failed):
        raise ParseError(outcome=outcome, command_path=outcome.command_path)
    return outcome
