"""Classification of raw command-line tokens."""

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Optional, Union

from attrs import field

from argweave.utils import frozen, fsdecode_token, to_tuple_converter

if TYPE_CHECKING:
    from argweave.schema import ArgumentSpec

logger = logging.getLogger(__name__)

TERMINATOR = "--"


@frozen
class Terminator:
    """The literal ``--``; every later token is positional."""


@frozen(kw_only=True)
class LongOption:
    """``--name`` or ``--name=value``."""

    name: str
    value: str | None = None


@frozen(kw_only=True)
class ShortFlag:
    """One character of an expanded short cluster."""

    char: str

    spec: Optional["ArgumentSpec"] = field(default=None, eq=False, hash=False)
    """Matched switch or option; :obj:`None` if the character is unknown."""

    value: str | None = None
    """Remainder of the cluster, if this character is an option."""

    @property
    def keyword(self) -> str:
        return f"-{self.char}"


@frozen(kw_only=True)
class ShortCluster:
    """``-abc``, expanded against the options in scope."""

    raw: str
    flags: tuple[ShortFlag, ...] = field(default=(), converter=to_tuple_converter)


@frozen(kw_only=True)
class Positional:
    value: str


ClassifiedToken = Union[Terminator, LongOption, ShortCluster, Positional]


def expand_short_cluster(raw: str, lookup: Callable[[str], Optional["ArgumentSpec"]]) -> ShortCluster:
    """Expand ``-abc`` left to right.

    Switches consume one character each. The first option consumes the remainder
    of the cluster as its value; if there is no remainder, the value is the next token.
    Unknown characters are kept (with ``spec=None``) and expansion continues.
    """
    chars = raw[1:]
    flags = []
    for i, char in enumerate(chars):
        spec = lookup(char)
        if spec is None or not spec.takes_value:
            flags.append(ShortFlag(char=char, spec=spec))
            continue
        remainder = chars[i + 1 :]
        flags.append(ShortFlag(char=char, spec=spec, value=remainder or None))
        break
    return ShortCluster(raw=raw, flags=flags)


class Tokenizer:
    """Lazily classifies one argument vector.

    Each call to :meth:`next_token` consumes exactly one raw token (plus, via
    :meth:`take_value`, the value of an option). A tokenizer is single use;
    to parse again, build a new one from the full vector.

    Parameters
    ----------
    tokens: Iterable[str | bytes]
        Arguments, excluding the program name. Bytes are decoded with :func:`os.fsdecode`.
    """

    def __init__(self, tokens: Iterable[str | bytes]):
        self._tokens = [fsdecode_token(x) for x in tokens]
        self._index = 0
        self.options_ended = False

    def __repr__(self):
        return f"Tokenizer(remaining={self._tokens[self._index :]!r}, options_ended={self.options_ended})"

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._tokens)

    def peek(self) -> str | None:
        """Next raw token, without consuming it."""
        if self.exhausted:
            return None
        return self._tokens[self._index]

    def take_value(self) -> str | None:
        """Consume the next raw token verbatim, as an option's value."""
        if self.exhausted:
            return None
        value = self._tokens[self._index]
        self._index += 1
        return value

    def remaining(self) -> list[str]:
        """Consume and return every remaining raw token."""
        out = self._tokens[self._index :]
        self._index = len(self._tokens)
        return out

    def end_options(self):
        """Treat every later token as positional."""
        self.options_ended = True

    def next_token(self, lookup_short: Callable[[str], Optional["ArgumentSpec"]]) -> ClassifiedToken | None:
        """Classify the next raw token.

        Parameters
        ----------
        lookup_short: Callable[[str], ArgumentSpec | None]
            Resolves a short-name character against the options currently in scope.

        Returns
        -------
        ClassifiedToken | None
            :obj:`None` once the vector is exhausted.
        """
        raw = self.take_value()
        if raw is None:
            return None

        if self.options_ended:
            token = Positional(value=raw)
        elif raw == TERMINATOR:
            self.options_ended = True
            token = Terminator()
        elif raw.startswith("--"):
            name, sep, value = raw.partition("=")
            token = LongOption(name=name, value=value if sep else None)
        elif raw.startswith("-") and len(raw) > 1:
            token = expand_short_cluster(raw, lookup_short)
        else:
            token = Positional(value=raw)

        logger.debug("Classified %r as %r", raw, token)
        return token
