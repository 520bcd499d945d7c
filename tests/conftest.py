import pytest
from rich.console import Console

from argweave import command, option, positional, switch
from argweave.convert import integer


@pytest.fixture
def console():
    return Console(width=70, force_terminal=True, highlight=False, color_system=None, legacy_windows=False)


@pytest.fixture
def go_up():
    return command(
        "goup",
        switch("jump", short="j", description="whether or not to jump"),
        option("height", converter=integer, required=True, description="how high to go"),
        option("pilot_nickname", description="an optional nickname for the pilot"),
        description="Reach new heights.",
    )


@pytest.fixture
def top_level():
    return command(
        "cmdname",
        switch("verbose", short="v", global_=True, description="Verbose output."),
        subcommands=[
            command(
                "one",
                option("x", converter=integer, required=True, description="A number."),
                description="First subcommand.",
            ),
            command(
                "two",
                switch("fooey", description="Whether to fooey."),
                description="Second subcommand.",
            ),
        ],
        description="Top level.",
    )


@pytest.fixture
def copy_cmd():
    return command(
        "cp",
        switch("recursive", short="r"),
        positional("source"),
        positional("dest", default="."),
    )
