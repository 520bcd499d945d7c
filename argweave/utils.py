"""To prevent circular dependencies, this module should never import anything else from argweave."""

import functools
import os
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Literal

# https://threeofwands.com/attra-iv-zero-overhead-frozen-attrs-classes/
if TYPE_CHECKING:
    from attrs import frozen
    from rich.console import Console
else:
    from attrs import define

    frozen = functools.partial(define, unsafe_hash=True)


class SentinelMeta(type):
    def __repr__(cls) -> str:
        return f"<{cls.__name__}>"

    def __bool__(cls) -> Literal[False]:
        return False


class Sentinel(metaclass=SentinelMeta):
    def __new__(cls):
        raise ValueError("Sentinel objects are not intended to be instantiated. Subclass instead.")


class UNSET(Sentinel):
    """Special sentinel value indicating that no data was provided. **Do not instantiate**."""


def is_iterable(obj) -> bool:
    if isinstance(obj, list | tuple | set | dict):  # Fast path for common types
        return True
    return not isinstance(obj, str | bytes) and isinstance(obj, Iterable)


def to_tuple_converter(value: None | Any | Iterable[Any]) -> tuple[Any, ...]:
    """Convert a single element or an iterable of elements into a tuple.

    Intended to be used in an ``attrs.Field``. If :obj:`None` is provided, returns an empty tuple.
    """
    if value is None:
        return ()
    elif is_iterable(value):
        return tuple(value)
    else:
        return (value,)


def fsdecode_token(token: str | bytes) -> str:
    """Normalize a raw argument to the OS string form.

    Undecodable bytes survive as surrogate escapes, so the original bytes can be
    recovered with :func:`os.fsencode`.
    """
    if isinstance(token, bytes):
        return os.fsdecode(token)
    return token


def display_token(token: str) -> str:
    """Render a raw token for messages, replacing undecodable bytes."""
    return os.fsencode(token).decode("utf-8", errors="replace")


def default_name_transform(s: str) -> str:
    """Converts a python identifier into a long option name (without dashes).

    ``_`` are replaced with ``-`` and leading/trailing ``-`` are stripped.
    """
    return s.lower().replace("_", "-").strip("-")


def terminal_width(fallback: int = 80, console: "Console | None" = None) -> int:
    """Query the current terminal width.

    Rich honors the ``COLUMNS`` environment variable and falls back to 80
    columns when no terminal is attached.
    """
    try:
        if console is None:
            from rich.console import Console

            console = Console()
        width = console.width
    except (OSError, ValueError):
        return fallback
    return width if width and width > 0 else fallback
