"""Help text rendering.

The layout is computed per render: the description column starts after the
widest label of every printed row (across all sections) plus a fixed gutter,
and descriptions are word-wrapped to the terminal width.
"""

import logging
import textwrap
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from attrs import field, validators

from argweave.schema import ArgumentSpec, CommandSchema, Kind
from argweave.utils import frozen, terminal_width

if TYPE_CHECKING:
    from rich.console import Console

logger = logging.getLogger(__name__)

__all__ = [
    "HelpFormatter",
    "HelpStyle",
    "format_help",
    "format_usage",
    "option_label",
]

SECTION_SEPARATOR = "\n\n"


@frozen(kw_only=True)
class HelpStyle:
    """Knobs for :class:`HelpFormatter`."""

    indent: int = field(default=2, validator=validators.ge(0))
    """Spaces before each row label."""

    gutter: int = field(default=2, validator=validators.ge(2))
    """Minimum spaces between the widest label and the description column."""

    width: int | None = field(default=None, validator=validators.optional(validators.gt(0)))
    """Fixed wrap width. If :obj:`None`, the terminal width is queried at render time."""

    fallback_width: int = field(default=80, validator=validators.gt(0))
    """Wrap width when the terminal width can't be determined."""

    max_label_width: int | None = None
    """Labels wider than this don't widen the label column; their description starts on the next line."""

    help_description: str = "Show this help message and exit."


def option_usage(spec: ArgumentSpec) -> str:
    """Usage fragment such as ``[-v]``, ``--name <name>`` or ``[--tag <tag...>]``."""
    out = f"-{spec.short}" if spec.short else spec.long
    if spec.kind is Kind.OPTION:
        out += f" <{spec.value_name}{'...' if spec.repeated else ''}>"
    if not spec.required:
        out = f"[{out}]"
    return out


def positional_usage(spec: ArgumentSpec) -> str:
    """Usage fragment such as ``<file>``, ``[<file>]``, ``[<file...>]`` or ``[rest...]``."""
    out = spec.value_name
    if spec.repeated:
        out += "..."
    if not spec.greedy:
        out = f"<{out}>"
    if not spec.required:
        out = f"[{out}]"
    return out


def option_label(spec: ArgumentSpec) -> str:
    """Left-hand column of an option row, e.g. ``-n, --num <n>``.

    Options without a short name are padded so long names line up.
    """
    out = f"-{spec.short}, {spec.long}" if spec.short else f"    {spec.long}"
    if spec.kind is Kind.OPTION:
        out += f" <{spec.value_name}>"
    return out


def format_usage(
    schema: CommandSchema,
    command_path: Sequence[str],
    inherited: Iterable[ArgumentSpec] = (),
) -> str:
    """Render the ``Usage:`` line.

    Parameters
    ----------
    schema: CommandSchema
        Command to describe.
    command_path: Sequence[str]
        Names from the root command down to ``schema``.
    inherited: Iterable[ArgumentSpec]
        Global options of ancestor commands, outermost first.
    """
    parts = ["Usage:", *command_path]
    parts.extend(option_usage(x) for x in (*inherited, *schema.options) if not x.hidden)
    parts.extend(positional_usage(x) for x in schema.positionals if not x.hidden)
    if schema.subcommands:
        parts.append("<command>" if schema.subcommand_required else "[<command>]")
        parts.append("[<args>]")
    return " ".join(parts)


def _first_line(s: str) -> str:
    return s.strip().split("\n", 1)[0].strip()


class HelpFormatter:
    """Renders the help text of one command level.

    Parameters
    ----------
    style: HelpStyle | None
        Layout settings; defaults to :class:`HelpStyle` defaults.
    console: ~rich.console.Console | None
        Console used to query the terminal width when ``style.width`` is unset.
    """

    def __init__(self, style: HelpStyle | None = None, console: "Console | None" = None):
        self.style = style or HelpStyle()
        self.console = console

    def resolve_width(self, width: int | None = None) -> int:
        """Explicit ``width``, else the style's width, else the terminal width.

        A non-positive explicit width falls back to :attr:`HelpStyle.fallback_width`.
        """
        if width is not None:
            return width if width > 0 else self.style.fallback_width
        if self.style.width is not None:
            return self.style.width
        return terminal_width(self.style.fallback_width, self.console)

    def _help_row(self, options: Sequence[ArgumentSpec]) -> tuple[str, str] | None:
        """``-h, --help`` row, leaving out whichever form a declared option shadows."""
        taken = {x.long for x in options} | {f"-{x.short}" for x in options if x.short}
        names = [x for x in ("-h", "--help") if x not in taken]
        if not names:
            return None
        label = ", ".join(names) if "-h" in names else f"    {names[0]}"
        return label, self.style.help_description

    def sections(
        self,
        schema: CommandSchema,
        inherited: Sequence[ArgumentSpec] = (),
    ) -> list[tuple[str, list[tuple[str, str]]]]:
        """Titled rows of ``(label, description)``, in display order; empty sections are dropped."""
        options = [*inherited, *schema.options]
        option_rows = [(option_label(x), x.description) for x in options if not x.hidden]
        if (help_row := self._help_row(options)) is not None:
            option_rows.append(help_row)

        argument_rows = [
            (x.value_name, x.description) for x in schema.positionals if not x.hidden and not x.greedy
        ]
        subcommand_rows = [(x.name, _first_line(x.description)) for x in schema.subcommands]

        out = [
            ("Options:", option_rows),
            ("Arguments:", argument_rows),
            ("Subcommands:", subcommand_rows),
        ]
        return [(title, rows) for title, rows in out if rows]

    def description_column(self, labels: Iterable[str]) -> int:
        """Column where descriptions start: widest label plus the gutter."""
        widths = [len(x) for x in labels]
        if self.style.max_label_width is not None:
            widths = [x for x in widths if x <= self.style.max_label_width]
        return self.style.indent + max(widths, default=0) + self.style.gutter

    def format_row(self, label: str, description: str, column: int, width: int) -> list[str]:
        line = " " * self.style.indent + label
        if not description.strip():
            return [line]

        wrapped = textwrap.wrap(
            description,
            width=max(width - column, 1),
            break_long_words=False,
            break_on_hyphens=False,
        )
        lines = []
        if len(line) + self.style.gutter <= column:
            lines.append(line.ljust(column) + wrapped.pop(0))
        else:
            lines.append(line)
        lines.extend(" " * column + x for x in wrapped)
        return lines

    def format_paragraphs(self, s: str, width: int) -> str:
        paragraphs = [p for p in s.strip().split("\n\n") if p.strip()]
        return "\n\n".join(textwrap.fill(p, width=width, break_long_words=False, break_on_hyphens=False) for p in paragraphs)

    def format(
        self,
        schema: CommandSchema,
        command_path: Sequence[str],
        inherited: Sequence[ArgumentSpec] = (),
        width: int | None = None,
    ) -> str:
        """Render the complete help text, ending with a newline.

        Parameters
        ----------
        schema: CommandSchema
            Command to describe.
        command_path: Sequence[str]
            Names from the root command down to ``schema``.
        inherited: Sequence[ArgumentSpec]
            Global options of ancestor commands, outermost first.
        width: int | None
            Wrap width. Overrides :attr:`HelpStyle.width` and the terminal width.
        """
        width = self.resolve_width(width)
        command_name = " ".join(command_path)

        blocks = [format_usage(schema, command_path, inherited)]

        if schema.description:
            blocks.append(self.format_paragraphs(schema.description.replace("{command_name}", command_name), width))

        sections = self.sections(schema, inherited)
        column = self.description_column(label for _, rows in sections for label, _ in rows)
        logger.debug("Rendering help for %r at width %d, description column %d", command_name, width, column)
        for title, rows in sections:
            lines = [title]
            for label, description in rows:
                lines.extend(self.format_row(label, description, column, width))
            blocks.append("\n".join(lines))

        if schema.footer:
            blocks.append(schema.footer.replace("{command_name}", command_name))

        return SECTION_SEPARATOR.join(blocks) + "\n"


def format_help(
    schema: CommandSchema,
    command_path: Sequence[str],
    inherited: Sequence[ArgumentSpec] = (),
    *,
    width: int | None = None,
    style: HelpStyle | None = None,
) -> str:
    """Shortcut for ``HelpFormatter(style).format(...)``."""
    return HelpFormatter(style).format(schema, command_path, inherited, width=width)
