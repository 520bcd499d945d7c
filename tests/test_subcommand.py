import pytest

from argweave import (
    Failed,
    HelpRequested,
    InvalidValueError,
    MissingRequiredArgumentsError,
    UnexpectedArgumentError,
    UnknownSubcommandError,
    UnrecognizedArgumentError,
    Value,
    command,
    option,
    positional,
    resolve,
    switch,
)


def test_subcommand_one(top_level):
    outcome = resolve(top_level, ["one", "--x", "5"])
    assert outcome == Value(
        command_path=("cmdname",),
        fields={"verbose": False},
        subcommand=Value(command_path=("cmdname", "one"), fields={"x": 5}),
    )
    assert outcome.leaf["x"] == 5
    assert outcome.leaf.name == "one"


def test_subcommand_two(top_level):
    outcome = resolve(top_level, ["two", "--fooey"])
    assert outcome.subcommand.name == "two"
    assert outcome.subcommand["fooey"] is True


def test_subcommand_unknown(top_level):
    outcome = resolve(top_level, ["bogus", "--x", "5"])
    assert isinstance(outcome, Failed)
    (error,) = outcome.errors
    assert isinstance(error, UnknownSubcommandError)
    assert str(error) == 'Unknown subcommand "bogus". Available subcommands: one, two.'


def test_subcommand_unknown_suggestion(top_level):
    outcome = resolve(top_level, ["on"])
    assert str(outcome.errors[0]) == 'Unknown subcommand "on". Did you mean "one"? Available subcommands: one, two.'


@pytest.mark.parametrize(
    "cmd",
    [
        ["-v", "one", "--x", "5"],
        ["one", "-v", "--x", "5"],
        ["one", "--x", "5", "--verbose"],
    ],
)
def test_subcommand_global_switch(top_level, cmd):
    outcome = resolve(top_level, cmd)
    assert outcome.fields == {"verbose": True}
    assert outcome.leaf.fields == {"x": 5}


def test_subcommand_global_duplicate_across_levels(top_level):
    outcome = resolve(top_level, ["-v", "one", "-v", "--x", "5"])
    assert isinstance(outcome, Failed)
    assert str(outcome.errors[0]) == "Duplicate values provided for '-v'."


def test_subcommand_local_option_not_inherited(top_level):
    outcome = resolve(top_level, ["--fooey", "two"])
    assert isinstance(outcome, Failed)
    (error,) = outcome.errors
    assert isinstance(error, UnrecognizedArgumentError)
    assert error.command_path == ("cmdname",)
    assert outcome.command_path == ("cmdname", "two")


def test_subcommand_missing(top_level):
    outcome = resolve(top_level, ["-v"])
    (error,) = outcome.errors
    assert isinstance(error, MissingRequiredArgumentsError)
    assert error.subcommands == ("one", "two")
    assert str(error) == "One of the following subcommands must be present:\n    help\n    one\n    two"


def test_subcommand_missing_required_in_child(top_level):
    outcome = resolve(top_level, ["one"])
    (error,) = outcome.errors
    assert error.names == ("--x",)
    assert error.command_path == ("cmdname", "one")
    assert outcome.usage == "Usage: cmdname one [-v] --x <x>"


def test_subcommand_errors_from_all_levels(top_level):
    outcome = resolve(top_level, ["--bogus", "one", "--x", "nope"])
    assert [type(e) for e in outcome.errors] == [UnrecognizedArgumentError, InvalidValueError]
    assert [e.command_path for e in outcome.errors] == [("cmdname",), ("cmdname", "one")]


@pytest.mark.parametrize(
    "cmd, path",
    [
        (["help"], ("cmdname",)),
        (["-h", "one"], ("cmdname",)),
        (["one", "-h"], ("cmdname", "one")),
        (["two", "--help"], ("cmdname", "two")),
        (["-v", "two", "--fooey", "--help"], ("cmdname", "two")),
    ],
)
def test_subcommand_help(top_level, cmd, path):
    outcome = resolve(top_level, cmd, width=80)
    assert isinstance(outcome, HelpRequested)
    assert outcome.command_path == path


def test_subcommand_help_even_if_child_incomplete(top_level):
    """Required ``--x`` is missing, but help wins."""
    outcome = resolve(top_level, ["one", "--help"], width=80)
    assert isinstance(outcome, HelpRequested)


def test_subcommand_help_literal_rejects_trailing(top_level):
    outcome = resolve(top_level, ["help", "one"])
    assert isinstance(outcome, Failed)
    (error,) = outcome.errors
    assert isinstance(error, UnexpectedArgumentError)
    assert error.after_help
    assert str(error) == "Trailing arguments are not allowed after `help`: one"


@pytest.mark.parametrize(
    "cmd, path",
    [
        (["one", "help"], ("cmdname", "one")),
        (["-v", "two", "--fooey", "help"], ("cmdname", "two")),
    ],
)
def test_subcommand_help_literal_at_leaf(top_level, cmd, path):
    outcome = resolve(top_level, cmd, width=80)
    assert isinstance(outcome, HelpRequested)
    assert outcome.command_path == path


def test_subcommand_help_literal_at_leaf_rejects_trailing(top_level):
    outcome = resolve(top_level, ["two", "help", "--fooey"])
    (error,) = outcome.errors
    assert error.after_help
    assert error.command_path == ("cmdname", "two")


def test_subcommand_help_literal_without_subcommands_is_positional():
    schema = command("prog", positional("topic"))
    assert resolve(schema, ["help"]).fields == {"topic": "help"}


@pytest.fixture
def nested():
    return command(
        "cmdname",
        option("a", global_=True),
        option("x"),
        subcommands=[
            command(
                "one",
                switch("b", global_=True),
                subcommands=[command("two", switch("fooey"))],
                subcommand_required=False,
            )
        ],
    )


def test_subcommand_nested_globals(nested):
    outcome = resolve(nested, ["one", "two", "--a", "5", "--b", "--fooey"])
    assert outcome.fields == {"a": "5", "x": None}
    assert outcome.subcommand.fields == {"b": True}
    assert outcome.leaf.fields == {"fooey": True}
    assert [v.name for v in outcome.chain()] == ["cmdname", "one", "two"]


def test_subcommand_globals_not_propagated_up(nested):
    outcome = resolve(nested, ["one", "two", "--x", "6"])
    assert str(outcome.errors[0]) == "Unrecognized argument: --x"

    outcome = resolve(nested, ["--b", "one"])
    assert str(outcome.errors[0]) == "Unrecognized argument: --b"


def test_subcommand_optional(nested):
    outcome = resolve(nested, ["one"])
    assert outcome.subcommand.subcommand is None
    assert outcome.as_dict() == {"a": None, "x": None, "one": {"b": False}}


def test_subcommand_optional_unknown_is_unexpected(nested):
    outcome = resolve(nested, ["one", "three"])
    (error,) = outcome.errors
    assert isinstance(error, UnexpectedArgumentError)


def test_subcommand_positional_precedence():
    schema = command(
        "prog",
        positional("file", default=None),
        subcommands=[command("one")],
        subcommand_required=False,
    )
    outcome = resolve(schema, ["one"])
    assert outcome.subcommand.name == "one"

    outcome = resolve(schema, ["one.txt"])
    assert outcome.fields == {"file": "one.txt"}
    assert outcome.subcommand is None

    outcome = resolve(schema, ["one.txt", "one"])
    (error,) = outcome.errors
    assert isinstance(error, UnexpectedArgumentError)
    assert error.argument == "one"


def test_subcommand_unknown_halts(top_level):
    outcome = resolve(top_level, ["bogus", "--nonsense", "one"])
    assert len(outcome.errors) == 1
