"""Converters turning a raw argument into a typed value.

A converter is any callable taking the raw argument and returning the typed value.
Failures are signalled by raising :exc:`ValueError` (or :exc:`TypeError`); the
exception message is shown to the user. :class:`~argweave.exceptions.ConversionError`
is a :exc:`ValueError` subclass provided for convenience.

Raw arguments are :class:`str` in the operating system's argument form: bytes that
aren't valid in the filesystem encoding are carried as surrogate escapes. Converters
that require text (:func:`text`, and anything wrapped with :func:`from_text`) reject
such values, while :func:`path` and :func:`raw_bytes` accept them unchanged.
"""

import functools
import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from argweave.exceptions import ConversionError, InvalidValueError

if TYPE_CHECKING:
    from argweave.schema import ArgumentSpec

T = TypeVar("T")

_INTEGER_BASES = {"x": 16, "o": 8, "b": 2}

__all__ = [
    "boolean",
    "choice",
    "convert_value",
    "existing_path",
    "from_text",
    "integer",
    "number",
    "path",
    "raw_bytes",
    "text",
]


def text(raw: str) -> str:
    """Return ``raw`` as text, rejecting undecodable input."""
    try:
        raw.encode("utf-8")
    except UnicodeEncodeError:
        raise ConversionError("not a valid UTF-8 string") from None
    return raw


def from_text(func: Callable[[str], T]) -> Callable[[str], T]:
    """Adapt a ``str -> T`` callable so it only ever receives valid text."""

    @functools.wraps(func)
    def inner(raw: str) -> T:
        return func(text(raw))

    return inner


@from_text
def boolean(s: str) -> bool:
    s = s.lower()
    if s in {"no", "n", "0", "false", "f", "off"}:
        return False
    elif s in {"yes", "y", "1", "true", "t", "on"}:
        return True
    else:
        raise ConversionError(f"expected a boolean, got '{s}'")


@from_text
def integer(s: str) -> int:
    """Parse an integer; ``0x``, ``0o`` and ``0b`` prefixes select the base.

    At most one leading sign is accepted, before the prefix.
    """
    sign, digits = (s[0], s[1:]) if s[:1] in ("+", "-") else ("", s)
    digits = digits.lower()
    base = 10
    if digits[:2] in ("0x", "0o", "0b"):
        base = _INTEGER_BASES[digits[1]]
        digits = digits[2:]
    if "+" in digits or "-" in digits:
        raise ConversionError(f"invalid digit found in '{s}'")
    try:
        value = int(digits, base)
    except ValueError:
        raise ConversionError(f"invalid digit found in '{s}'") from None
    return -value if sign == "-" else value


@from_text
def number(s: str) -> float:
    try:
        return float(s)
    except ValueError:
        raise ConversionError(f"invalid float literal '{s}'") from None


def path(raw: str) -> Path:
    """Raw-bytes conversion; tolerates arguments that aren't valid text."""
    return Path(raw)


def raw_bytes(raw: str) -> bytes:
    """Recover the exact bytes the operating system passed."""
    return os.fsencode(raw)


def existing_path(raw: str) -> Path:
    p = path(raw)
    if not p.exists():
        raise ConversionError(f"no such file or directory: {p}")
    return p


def choice(values: Iterable[str], *, case_sensitive: bool = True) -> Callable[[str], str]:
    """Create a converter accepting only one of ``values``."""
    values = tuple(values)

    @from_text
    def inner(s: str) -> str:
        for value in values:
            if s == value or (not case_sensitive and s.lower() == value.lower()):
                return value
        raise ConversionError(f"expected one of {{{', '.join(values)}}}")

    return inner


def convert_value(spec: "ArgumentSpec", raw: str, *, keyword: str | None = None) -> Any:
    """Run ``spec.converter`` on ``raw``.

    Parameters
    ----------
    spec: ArgumentSpec
        Field receiving the value.
    raw: str
        Raw argument.
    keyword: str | None
        Option name as supplied on the command line (e.g. ``-n``); used in the error message.

    Raises
    ------
    InvalidValueError
        The converter rejected ``raw``.
    """
    try:
        return spec.converter(raw)
    except (ValueError, TypeError) as e:
        raise InvalidValueError(field=keyword or spec.label, raw=raw, message=str(e)) from e
