"""The resolution engine.

Tokens are consumed greedily, left to right, against one :class:`.CommandSchema`
level at a time. A subcommand token hands the rest of the stream to the nested
level; global options of ancestor levels stay matchable there and store their
values in the level that declared them.

Errors are collected rather than raised so a single run reports every independent
problem. The only exception is an unknown subcommand, after which the remaining
tokens can't be attributed and are left unconsumed.
"""

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any, Optional

from attrs import define, field

from argweave.convert import convert_value
from argweave.exceptions import (
    ArgweaveError,
    DuplicateArgumentError,
    InvalidValueError,
    MissingRequiredArgumentsError,
    MissingValueError,
    UnexpectedArgumentError,
    UnknownSubcommandError,
    UnrecognizedArgumentError,
)
from argweave.help import HelpFormatter, format_usage
from argweave.outcome import Failed, HelpRequested, Outcome, Value
from argweave.schema import ArgumentSpec, CommandSchema, Kind
from argweave.token import LongOption, Positional, ShortCluster, Terminator, Tokenizer
from argweave.utils import UNSET

logger = logging.getLogger(__name__)

__all__ = ["ParseState", "Resolver", "resolve"]

HELP_FLAGS = ("-h", "--help")
HELP_SUBCOMMAND = "help"


class State(Enum):
    EXPECT_ANY = "expect-any"
    IN_SUBCOMMAND = "in-subcommand"
    DONE = "done"


@define
class ParseState:
    """Bookkeeping for one command level of one parse."""

    schema: CommandSchema
    command_path: tuple[str, ...]
    parent: Optional["ParseState"] = None
    """State of the enclosing command level; consulted for global options."""

    values: dict[str, Any] = field(factory=dict)
    seen: set[str] = field(factory=set)
    errors: list[ArgweaveError] = field(factory=list)
    positional_index: int = 0
    positional_seen: bool = False
    halted: bool = False
    """An unknown subcommand stopped token consumption."""
    state: State = State.EXPECT_ANY

    def ancestors(self) -> list["ParseState"]:
        """Enclosing levels, nearest first."""
        out = []
        parent = self.parent
        while parent is not None:
            out.append(parent)
            parent = parent.parent
        return out

    def find(self, keyword: str) -> tuple[ArgumentSpec, "ParseState"] | None:
        """Match ``--long`` or ``-s`` against own options, then ancestors' global options.

        Returns the spec and the state owning its value.
        """
        if keyword.startswith("--"):
            spec = self.schema.find_long(keyword)
        else:
            spec = self.schema.find_short(keyword[1:])
        if spec is not None:
            return spec, self

        for ancestor in self.ancestors():
            spec = ancestor.schema.global_options.get(keyword)
            if spec is not None:
                return spec, ancestor
        return None

    def find_short(self, char: str) -> ArgumentSpec | None:
        match = self.find(f"-{char}")
        return match[0] if match else None

    def inherited(self) -> list[ArgumentSpec]:
        """Global options of every ancestor, outermost first."""
        out = []
        for ancestor in reversed(self.ancestors()):
            out.extend(x for x in ancestor.schema.options if x.global_)
        return out

    def record(self, error: ArgweaveError):
        error.command_path = self.command_path
        logger.debug("%s: %s", " ".join(self.command_path), error)
        self.errors.append(error)

    def fields(self) -> dict[str, Any]:
        out = {}
        for spec in self.schema.options + self.schema.positionals:
            out[spec.name] = self.values[spec.name] if spec.name in self.values else spec.missing_value()
        return out


class Resolver:
    """Resolves argument vectors against a schema.

    The schema is never mutated; a resolver may be reused for any number of parses.

    Parameters
    ----------
    schema: CommandSchema
        Root command.
    prog: str | None
        Name shown for the root command. Defaults to ``schema.name``.
    formatter: HelpFormatter | None
        Renders help when requested.
    width: int | None
        Help wrap width; if :obj:`None`, the formatter decides.
    """

    def __init__(
        self,
        schema: CommandSchema,
        *,
        prog: str | None = None,
        formatter: HelpFormatter | None = None,
        width: int | None = None,
    ):
        self.schema = schema
        self.prog = prog or schema.name
        self.formatter = formatter or HelpFormatter()
        self.width = width

    def __call__(self, tokens: Iterable[str | bytes]) -> Outcome:
        return self.resolve(tokens)

    def resolve(self, tokens: Iterable[str | bytes]) -> Outcome:
        tokenizer = Tokenizer(tokens)
        state = ParseState(schema=self.schema, command_path=(self.prog,))
        outcome = self._resolve_level(state, tokenizer)
        logger.debug("Resolved to %s", type(outcome).__name__)
        return outcome

    def _help(self, state: ParseState) -> HelpRequested:
        text = self.formatter.format(state.schema, state.command_path, state.inherited(), width=self.width)
        return HelpRequested(text=text, command_path=state.command_path)

    def _usage(self, state: ParseState) -> str:
        return format_usage(state.schema, state.command_path, state.inherited())

    def _resolve_level(self, state: ParseState, tokenizer: Tokenizer) -> Outcome:
        schema = state.schema

        while (raw := tokenizer.peek()) is not None:
            if not tokenizer.options_ended and not state.positional_seen:
                if raw in HELP_FLAGS and state.find(raw) is None:
                    tokenizer.take_value()
                    state.state = State.DONE
                    return self._help(state)
                if raw == HELP_SUBCOMMAND and (schema.subcommands or not schema.positionals):
                    tokenizer.take_value()
                    state.state = State.DONE
                    trailing = tokenizer.remaining()
                    if trailing:
                        state.record(UnexpectedArgumentError(argument=trailing[0], after_help=True))
                        return Failed(errors=state.errors, command_path=state.command_path, usage=self._usage(state))
                    return self._help(state)

            token = tokenizer.next_token(state.find_short)

            if isinstance(token, Terminator):
                continue
            elif isinstance(token, LongOption):
                match = state.find(token.name)
                if match is None:
                    state.record(UnrecognizedArgumentError(argument=token.name))
                    continue
                spec, owner = match
                self._apply_option(state, owner, spec, token.name, token.value, tokenizer)
            elif isinstance(token, ShortCluster):
                for flag in token.flags:
                    if flag.spec is None:
                        state.record(UnrecognizedArgumentError(argument=flag.keyword))
                        continue
                    match = state.find(flag.keyword)
                    assert match is not None
                    self._apply_option(state, match[1], flag.spec, flag.keyword, flag.value, tokenizer)
            elif isinstance(token, Positional):
                if schema.subcommands and not state.positional_seen:
                    subcommand = schema.subcommand(token.value)
                    if subcommand is not None:
                        return self._descend(state, subcommand, tokenizer)
                    if schema.subcommand_required and not self._can_absorb(state):
                        state.record(UnknownSubcommandError(token=token.value, choices=schema.subcommand_names))
                        state.halted = True
                        break
                self._apply_positional(state, token.value, tokenizer)

        state.state = State.DONE
        self._check_required(state, subcommand_chosen=False)
        if state.errors:
            return Failed(errors=state.errors, command_path=state.command_path, usage=self._usage(state))
        return Value(command_path=state.command_path, fields=state.fields())

    def _descend(self, state: ParseState, subcommand: CommandSchema, tokenizer: Tokenizer) -> Outcome:
        state.state = State.IN_SUBCOMMAND
        child = ParseState(schema=subcommand, command_path=state.command_path + (subcommand.name,), parent=state)
        logger.debug("Entering subcommand %r", " ".join(child.command_path))
        outcome = self._resolve_level(child, tokenizer)
        state.state = State.DONE

        if isinstance(outcome, HelpRequested):
            return outcome

        self._check_required(state, subcommand_chosen=True)
        if isinstance(outcome, Failed):
            return Failed(
                errors=[*state.errors, *outcome.errors],
                command_path=outcome.command_path,
                usage=outcome.usage,
            )
        if state.errors:
            return Failed(errors=state.errors, command_path=outcome.command_path, usage=self._usage(child))
        return Value(command_path=state.command_path, fields=state.fields(), subcommand=outcome)

    @staticmethod
    def _can_absorb(state: ParseState) -> bool:
        positionals = state.schema.positionals
        return state.positional_index < len(positionals) or bool(positionals and positionals[-1].repeated)

    def _convert(self, state: ParseState, spec: ArgumentSpec, raw: str, keyword: str | None = None) -> Any:
        try:
            return convert_value(spec, raw, keyword=keyword)
        except InvalidValueError as e:
            state.record(e)
            return UNSET

    def _store(self, owner: ParseState, spec: ArgumentSpec, value: Any):
        if spec.repeated:
            owner.values.setdefault(spec.name, []).append(value)
        else:
            owner.values[spec.name] = value

    def _apply_option(
        self,
        state: ParseState,
        owner: ParseState,
        spec: ArgumentSpec,
        keyword: str,
        inline: str | None,
        tokenizer: Tokenizer,
    ):
        if spec.kind is Kind.SWITCH:
            if inline is not None:
                state.record(
                    UnexpectedArgumentError(
                        argument=f"{keyword}={inline}", msg=f"Option '{keyword}' does not take a value."
                    )
                )
            elif spec.repeated:
                owner.values[spec.name] = owner.values.get(spec.name, 0) + 1
            elif spec.name in owner.seen:
                state.record(DuplicateArgumentError(option=keyword))
            else:
                owner.values[spec.name] = True
            owner.seen.add(spec.name)
            return

        raw = inline if inline is not None else tokenizer.take_value()
        if raw is None:
            state.record(MissingValueError(option=keyword))
            return
        if not spec.repeated and spec.name in owner.seen:
            state.record(DuplicateArgumentError(option=keyword))
            return
        owner.seen.add(spec.name)

        value = self._convert(state, spec, raw, keyword)
        if value is not UNSET:
            self._store(owner, spec, value)

    def _apply_positional(self, state: ParseState, raw: str, tokenizer: Tokenizer):
        positionals = state.schema.positionals
        state.positional_seen = True
        if state.positional_index >= len(positionals):
            state.record(UnexpectedArgumentError(argument=raw))
            return

        spec = positionals[state.positional_index]
        if not spec.repeated:
            state.positional_index += 1
        state.seen.add(spec.name)
        if spec.greedy:
            tokenizer.end_options()

        value = self._convert(state, spec, raw)
        if value is not UNSET:
            self._store(state, spec, value)

    def _check_required(self, state: ParseState, *, subcommand_chosen: bool):
        schema = state.schema
        missing_positionals = [x.value_name for x in schema.positionals if x.required and x.name not in state.seen]
        missing_options = [x.long for x in schema.options if x.required and x.name not in state.seen]
        missing_subcommands = None
        if schema.requires_subcommand and not subcommand_chosen and not state.halted:
            missing_subcommands = schema.subcommand_names

        if missing_positionals or missing_options or missing_subcommands is not None:
            state.record(
                MissingRequiredArgumentsError(
                    positionals=missing_positionals,
                    options=missing_options,  # pyright: ignore[reportArgumentType]
                    subcommands=missing_subcommands,
                )
            )


def resolve(
    schema: CommandSchema,
    tokens: Iterable[str | bytes],
    *,
    prog: str | None = None,
    formatter: HelpFormatter | None = None,
    width: int | None = None,
) -> Outcome:
    """Resolve ``tokens`` (excluding the program name) against ``schema``.

    Returns
    -------
    Value | HelpRequested | Failed
    """
    return Resolver(schema, prog=prog, formatter=formatter, width=width).resolve(tokens)
