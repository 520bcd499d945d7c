"""Declarative description of a command line.

A schema is a tree of :class:`CommandSchema`, each holding the :class:`ArgumentSpec`
of one command level. Schemas are built once, validated on construction, and only
read afterwards; they may be shared between any number of parses.

.. code-block:: python

    schema = command(
        "prog",
        switch("verbose", short="v", global_=True, description="Print more."),
        subcommands=[
            command("one", option("x", converter=integer, required=True)),
            command("two", switch("fooey")),
        ],
    )
"""

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from enum import Enum
from typing import Any, Optional

from attrs import Factory, field

from argweave.convert import text
from argweave.exceptions import SchemaError
from argweave.utils import UNSET, default_name_transform, frozen, to_tuple_converter

__all__ = [
    "ArgumentSpec",
    "Cardinality",
    "CommandSchema",
    "Kind",
    "command",
    "option",
    "positional",
    "switch",
]

_LONG_NAME_RE = re.compile(r"--[a-z0-9][a-z0-9-]*")


class Kind(Enum):
    SWITCH = "switch"
    OPTION = "option"
    POSITIONAL = "positional"


class Cardinality(Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    REPEATED = "repeated"


def _default_long(self: "ArgumentSpec") -> str | None:
    if self.kind is Kind.POSITIONAL:
        return None
    return "--" + default_name_transform(self.name)


@frozen(kw_only=True)
class ArgumentSpec:
    """One switch, option or positional of a command."""

    kind: Kind

    name: str
    """Field identity; key of the value in :attr:`.Value.fields`."""

    long: str | None = field(default=Factory(_default_long, takes_self=True))
    """Long name including the leading ``--``. Derived from :attr:`name` if not provided."""

    short: str | None = None
    """Single character short name, without the leading ``-``."""

    cardinality: Cardinality = Cardinality.OPTIONAL

    default: Any = UNSET
    """Typed value used when an optional field was not provided."""

    global_: bool = False
    """Matchable at every descendant subcommand level."""

    arg_name: str | None = None
    """Value placeholder shown in help."""

    description: str = ""

    converter: Callable[[str], Any] = field(default=text, hash=False)

    greedy: bool = False
    """Once this (last, repeated) positional absorbs a value, every following token is positional."""

    hidden: bool = False
    """Omit from usage and help."""

    def __attrs_post_init__(self):
        if not self.name:
            raise SchemaError("Argument name must not be empty.")

        if self.kind is Kind.POSITIONAL:
            if self.long is not None or self.short is not None:
                raise SchemaError(f'Positional "{self.name}" cannot have a long or short name.')
            if self.global_:
                raise SchemaError(f'Positional "{self.name}" cannot be global.')
        else:
            if self.long is None or not _LONG_NAME_RE.fullmatch(self.long):
                raise SchemaError(
                    f'Invalid long name {self.long!r} for "{self.name}": '
                    "long names must start with `--` and contain only lowercase ASCII letters, digits and `-`."
                )
            if self.short is not None and (len(self.short) != 1 or not self.short.isascii() or self.short == "-"):
                raise SchemaError(f'Invalid short name {self.short!r} for "{self.name}": must be a single ASCII character.')
            if self.greedy:
                raise SchemaError(f'Only positionals can be greedy; "{self.name}" is a {self.kind.value}.')

        if self.kind is Kind.SWITCH and self.cardinality is Cardinality.REQUIRED:
            raise SchemaError(f'Switch "{self.name}" cannot be required.')
        if self.default is not UNSET and self.cardinality is not Cardinality.OPTIONAL:
            raise SchemaError(f'Only optional arguments can have a default; "{self.name}" is {self.cardinality.value}.')
        if self.greedy and self.cardinality is not Cardinality.REPEATED:
            raise SchemaError(f'Greedy positional "{self.name}" must be repeated.')

    @property
    def required(self) -> bool:
        return self.cardinality is Cardinality.REQUIRED

    @property
    def repeated(self) -> bool:
        return self.cardinality is Cardinality.REPEATED

    @property
    def takes_value(self) -> bool:
        return self.kind is not Kind.SWITCH

    @property
    def value_name(self) -> str:
        """Placeholder for the value, e.g. ``n`` in ``--num <n>``."""
        if self.arg_name:
            return self.arg_name
        if self.long is not None:
            return self.long[2:]
        return self.name

    @property
    def label(self) -> str:
        """Name used in error messages."""
        if self.long is not None:
            return self.long
        return self.value_name

    def missing_value(self) -> Any:
        """Value of this field when it never appeared on the command line."""
        if self.default is not UNSET:
            return self.default
        if self.kind is Kind.SWITCH:
            return 0 if self.repeated else False
        if self.repeated:
            return []
        return None


def _check_unique(names: Iterable[str], what: str, where: str):
    seen = set()
    for name in names:
        if name in seen:
            raise SchemaError(f"Duplicate {what} {name!r} in command {where!r}.")
        seen.add(name)


@frozen(kw_only=True)
class CommandSchema:
    """One command level: its options, positionals and subcommands."""

    name: str

    options: tuple[ArgumentSpec, ...] = field(default=(), converter=to_tuple_converter)
    """Switches and options, in help order."""

    positionals: tuple[ArgumentSpec, ...] = field(default=(), converter=to_tuple_converter)

    subcommands: tuple["CommandSchema", ...] = field(default=(), converter=to_tuple_converter)
    """Mutually exclusive nested commands."""

    subcommand_required: bool = True
    """If subcommands exist, one must be chosen."""

    description: str = ""

    footer: str = ""

    _by_long: dict[str, ArgumentSpec] = field(init=False, factory=dict, eq=False, hash=False, repr=False)
    _by_short: dict[str, ArgumentSpec] = field(init=False, factory=dict, eq=False, hash=False, repr=False)
    _by_subcommand: dict[str, "CommandSchema"] = field(init=False, factory=dict, eq=False, hash=False, repr=False)

    def __attrs_post_init__(self):
        if not self.name:
            raise SchemaError("Command name must not be empty.")

        for spec in self.options:
            if spec.kind is Kind.POSITIONAL:
                raise SchemaError(f'Positional "{spec.name}" declared as an option of {self.name!r}.')
        for spec in self.positionals:
            if spec.kind is not Kind.POSITIONAL:
                raise SchemaError(f'{spec.kind.value.capitalize()} "{spec.name}" declared as a positional of {self.name!r}.')

        _check_unique((x.name for x in self.options + self.positionals), "argument", self.name)
        _check_unique((x.long for x in self.options if x.long), "long name", self.name)
        _check_unique((x.short for x in self.options if x.short), "short name", self.name)
        _check_unique((x.name for x in self.subcommands), "subcommand", self.name)

        for spec in self.positionals[:-1]:
            if not spec.required:
                raise SchemaError(
                    f'Only the last positional of {self.name!r} may be optional or repeated; "{spec.name}" is {spec.cardinality.value}.'
                )

        fields = {x.name for x in self.options + self.positionals}
        for subcommand in self.subcommands:
            if subcommand.name.startswith("-") or subcommand.name == "help":
                raise SchemaError(f"Invalid subcommand name {subcommand.name!r} in command {self.name!r}.")
            # Subcommand names share the Value.as_dict namespace with this level's fields.
            if subcommand.name in fields:
                raise SchemaError(f"Subcommand {subcommand.name!r} clashes with an argument of command {self.name!r}.")

        for spec in self.options:
            self._by_long[spec.long] = spec  # pyright: ignore[reportArgumentType]
            if spec.short:
                self._by_short[spec.short] = spec
        for subcommand in self.subcommands:
            self._by_subcommand[subcommand.name] = subcommand

        self._check_inherited(self.global_options)

    def _check_inherited(self, inherited: Mapping[str, ArgumentSpec]):
        """Reject descendant options that shadow a global option of an ancestor."""
        for subcommand in self.subcommands:
            for spec in subcommand.options:
                for key in filter(None, (spec.long, spec.short and f"-{spec.short}")):
                    if key in inherited:
                        raise SchemaError(
                            f'Option {key!r} of subcommand {subcommand.name!r} clashes with global option "{inherited[key].name}".'
                        )
            subcommand._check_inherited({**inherited, **subcommand.global_options})

    @property
    def global_options(self) -> dict[str, ArgumentSpec]:
        """Global options of this level, keyed by ``--long`` and ``-s``."""
        out = {}
        for spec in self.options:
            if spec.global_:
                out[spec.long] = spec
                if spec.short:
                    out[f"-{spec.short}"] = spec
        return out

    def find_long(self, long: str) -> Optional[ArgumentSpec]:
        return self._by_long.get(long)

    def find_short(self, short: str) -> Optional[ArgumentSpec]:
        return self._by_short.get(short)

    def subcommand(self, name: str) -> Optional["CommandSchema"]:
        return self._by_subcommand.get(name)

    @property
    def subcommand_names(self) -> tuple[str, ...]:
        return tuple(x.name for x in self.subcommands)

    @property
    def requires_subcommand(self) -> bool:
        return bool(self.subcommands) and self.subcommand_required

    def walk(self) -> Iterator["CommandSchema"]:
        """Depth-first iteration over this command and all nested subcommands."""
        yield self
        for subcommand in self.subcommands:
            yield from subcommand.walk()


def switch(
    name: str,
    *,
    short: str | None = None,
    long: str | None = None,
    description: str = "",
    count: bool = False,
    global_: bool = False,
    hidden: bool = False,
) -> ArgumentSpec:
    """Declare a zero-argument flag.

    With ``count=True`` the switch may repeat and its value is the number of occurrences.
    """
    kwargs = {} if long is None else {"long": long}
    return ArgumentSpec(
        kind=Kind.SWITCH,
        name=name,
        short=short,
        cardinality=Cardinality.REPEATED if count else Cardinality.OPTIONAL,
        global_=global_,
        description=description,
        hidden=hidden,
        **kwargs,
    )


def _cardinality(name: str, required: bool, repeated: bool, default: Any) -> Cardinality:
    if repeated:
        if required:
            raise SchemaError(f'"{name}" cannot be both required and repeated.')
        return Cardinality.REPEATED
    if required:
        if default is not UNSET:
            raise SchemaError(f'Required argument "{name}" cannot have a default.')
        return Cardinality.REQUIRED
    return Cardinality.OPTIONAL


def option(
    name: str,
    *,
    short: str | None = None,
    long: str | None = None,
    description: str = "",
    required: bool = False,
    repeated: bool = False,
    default: Any = UNSET,
    converter: Callable[[str], Any] = text,
    arg_name: str | None = None,
    global_: bool = False,
    hidden: bool = False,
) -> ArgumentSpec:
    """Declare a flag taking exactly one value per occurrence."""
    kwargs = {} if long is None else {"long": long}
    return ArgumentSpec(
        kind=Kind.OPTION,
        name=name,
        short=short,
        cardinality=_cardinality(name, required, repeated, default),
        default=default,
        converter=converter,
        arg_name=arg_name,
        global_=global_,
        description=description,
        hidden=hidden,
        **kwargs,
    )


def positional(
    name: str,
    *,
    description: str = "",
    required: bool | None = None,
    repeated: bool = False,
    default: Any = UNSET,
    converter: Callable[[str], Any] = text,
    arg_name: str | None = None,
    greedy: bool = False,
    hidden: bool = False,
) -> ArgumentSpec:
    """Declare a value matched by position.

    Positionals are required unless ``repeated`` or a ``default`` is given.
    """
    if required is None:
        required = not repeated and not greedy and default is UNSET
    return ArgumentSpec(
        kind=Kind.POSITIONAL,
        name=name,
        cardinality=_cardinality(name, required, repeated or greedy, default),
        default=default,
        converter=converter,
        arg_name=arg_name,
        greedy=greedy,
        description=description,
        hidden=hidden,
    )


def command(
    name: str,
    *arguments: ArgumentSpec,
    subcommands: Iterable[CommandSchema] = (),
    subcommand_required: bool = True,
    description: str = "",
    footer: str = "",
) -> CommandSchema:
    """Build a :class:`CommandSchema`, sorting ``arguments`` into options and positionals."""
    return CommandSchema(
        name=name,
        options=[x for x in arguments if x.kind is not Kind.POSITIONAL],
        positionals=[x for x in arguments if x.kind is Kind.POSITIONAL],
        subcommands=subcommands,
        subcommand_required=subcommand_required,
        description=description,
        footer=footer,
    )
