import pytest

from argweave import (
    ArgumentSpec,
    Cardinality,
    CommandSchema,
    Kind,
    SchemaError,
    command,
    option,
    positional,
    switch,
)
from argweave.convert import integer


def test_schema_derived_long_name():
    assert option("pilot_nickname").long == "--pilot-nickname"
    assert switch("_private_").long == "--private"
    assert switch("verbose", long="--loud").long == "--loud"
    assert positional("file").long is None


def test_schema_builders_cardinality():
    assert option("a").cardinality is Cardinality.OPTIONAL
    assert option("a", required=True).cardinality is Cardinality.REQUIRED
    assert option("a", repeated=True).cardinality is Cardinality.REPEATED
    assert switch("a", count=True).cardinality is Cardinality.REPEATED
    assert positional("a").cardinality is Cardinality.REQUIRED
    assert positional("a", default="x").cardinality is Cardinality.OPTIONAL
    assert positional("a", required=False).cardinality is Cardinality.OPTIONAL
    assert positional("a", greedy=True).cardinality is Cardinality.REPEATED


@pytest.mark.parametrize(
    "spec, expected",
    [
        (switch("a"), False),
        (switch("a", count=True), 0),
        (option("a"), None),
        (option("a", default=3, converter=integer), 3),
        (option("a", repeated=True), []),
        (positional("a", default="."), "."),
        (positional("a", repeated=True), []),
    ],
)
def test_schema_missing_value(spec, expected):
    assert spec.missing_value() == expected


def test_schema_value_name_and_label():
    assert option("n", arg_name="count").value_name == "count"
    assert option("n").value_name == "n"
    assert option("n").label == "--n"
    assert positional("file").label == "file"
    assert positional("file", arg_name="path").label == "path"


def test_schema_command_sorts_arguments():
    a, b, c = switch("a"), positional("b"), option("c")
    schema = command("prog", a, b, c)
    assert schema.options == (a, c)
    assert schema.positionals == (b,)


def test_schema_lookup(top_level):
    assert top_level.find_long("--verbose").name == "verbose"
    assert top_level.find_short("v").name == "verbose"
    assert top_level.find_long("--nope") is None
    assert top_level.subcommand("one").name == "one"
    assert top_level.subcommand("three") is None
    assert top_level.subcommand_names == ("one", "two")
    assert set(top_level.global_options) == {"--verbose", "-v"}
    assert [x.name for x in top_level.walk()] == ["cmdname", "one", "two"]


def test_schema_requires_subcommand():
    assert not command("a").requires_subcommand
    assert command("a", subcommands=[command("b")]).requires_subcommand
    assert not command("a", subcommands=[command("b")], subcommand_required=False).requires_subcommand


@pytest.mark.parametrize(
    "build",
    [
        lambda: switch(""),
        lambda: option("a", long="-a"),
        lambda: option("a", long="--Upper"),
        lambda: option("a", long="--"),
        lambda: option("a", long="--with space"),
        lambda: option("a", short="ab"),
        lambda: option("a", short="-"),
        lambda: option("a", short="é"),
        lambda: option("a", required=True, repeated=True),
        lambda: option("a", required=True, default=1),
        lambda: option("a", repeated=True, default=[]),
        lambda: positional("a", required=True, default="x"),
        lambda: ArgumentSpec(kind=Kind.POSITIONAL, name="a", global_=True),
        lambda: ArgumentSpec(kind=Kind.POSITIONAL, name="a", long="--a"),
        lambda: ArgumentSpec(kind=Kind.POSITIONAL, name="a", greedy=True),
        lambda: ArgumentSpec(kind=Kind.OPTION, name="a", greedy=True, cardinality=Cardinality.REPEATED),
        lambda: ArgumentSpec(kind=Kind.SWITCH, name="a", cardinality=Cardinality.REQUIRED),
    ],
)
def test_schema_invalid_argument(build):
    with pytest.raises(SchemaError):
        build()


@pytest.mark.parametrize(
    "build",
    [
        lambda: command(""),
        lambda: command("p", switch("a"), option("a", long="--b")),
        lambda: command("p", switch("a"), switch("b", long="--a")),
        lambda: command("p", switch("a", short="x"), switch("b", short="x")),
        lambda: command("p", subcommands=[command("one"), command("one")]),
        lambda: command("p", subcommands=[command("help")]),
        lambda: command("p", subcommands=[command("-one")]),
        lambda: command("p", switch("one"), subcommands=[command("one")]),
        lambda: command("p", positional("one", default=None), subcommands=[command("one")], subcommand_required=False),
        lambda: command("p", positional("a", default="x"), positional("b")),
        lambda: command("p", positional("a", repeated=True), positional("b")),
        lambda: CommandSchema(name="p", positionals=[switch("a")]),
        lambda: CommandSchema(name="p", options=[positional("a")]),
    ],
)
def test_schema_invalid_command(build):
    with pytest.raises(SchemaError):
        build()


def test_schema_subcommand_clashes_with_global():
    with pytest.raises(SchemaError):
        command(
            "p",
            switch("verbose", short="v", global_=True),
            subcommands=[command("one", switch("v", short="v"))],
        )


def test_schema_nested_subcommand_clashes_with_global():
    with pytest.raises(SchemaError):
        command(
            "p",
            switch("verbose", global_=True),
            subcommands=[command("one", subcommands=[command("two", option("verbose"))])],
        )


def test_schema_local_option_may_repeat_in_sibling_levels():
    schema = command(
        "p",
        switch("verbose"),
        subcommands=[command("one", switch("verbose")), command("two", switch("verbose"))],
    )
    assert schema.subcommand("one").find_long("--verbose") is not None


def test_schema_is_hashable(top_level):
    assert hash(top_level) == hash(top_level)
    assert option("a", converter=integer) == option("a", converter=integer)
