from collections.abc import Iterator
from typing import Any, Optional, Union

from attrs import field

from argweave.exceptions import ArgweaveError
from argweave.utils import frozen, to_tuple_converter

__all__ = ["Failed", "HelpRequested", "Outcome", "Value"]


@frozen(kw_only=True)
class Value:
    """Successfully resolved command line.

    ``fields`` holds this level's values keyed by field name; the chosen
    subcommand (if any) is a nested :class:`Value`.
    """

    command_path: tuple[str, ...] = field(converter=to_tuple_converter)
    fields: dict[str, Any] = field(factory=dict, hash=False)
    subcommand: Optional["Value"] = None

    @property
    def name(self) -> str:
        return self.command_path[-1]

    def __getitem__(self, key: str) -> Any:
        return self.fields[key]

    def __contains__(self, key: str) -> bool:
        return key in self.fields

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def chain(self) -> Iterator["Value"]:
        """This value followed by every nested subcommand value."""
        value = self
        while value is not None:
            yield value
            value = value.subcommand

    @property
    def leaf(self) -> "Value":
        """Value of the innermost chosen subcommand."""
        *_, last = self.chain()
        return last

    def as_dict(self) -> dict[str, Any]:
        """Nested plain-dict view; the chosen subcommand is stored under its name."""
        out = dict(self.fields)
        if self.subcommand is not None:
            out[self.subcommand.name] = self.subcommand.as_dict()
        return out


@frozen(kw_only=True)
class HelpRequested:
    """``-h``, ``--help`` or ``help`` was given; not a failure."""

    text: str
    command_path: tuple[str, ...] = field(converter=to_tuple_converter)


@frozen(kw_only=True)
class Failed:
    """Every error collected while resolving, in the order they were found."""

    errors: tuple[ArgweaveError, ...] = field(converter=to_tuple_converter)
    command_path: tuple[str, ...] = field(converter=to_tuple_converter)
    usage: str = ""
    """Usage line of the command that failed."""

    @property
    def messages(self) -> list[str]:
        return [str(e) for e in self.errors]


Outcome = Union[Value, HelpRequested, Failed]
