import dataclasses
from typing import NamedTuple

from clickwire.row import column, column_names, join_column_names


def test_grabs_simple_struct():
    @dataclasses.dataclass
    class Simple1:
        one: int

    @dataclasses.dataclass
    class Simple2:
        one: int
        two: int

    assert join_column_names(Simple1) == "`one`"
    assert join_column_names(Simple2) == "`one`,`two`"


def test_grabs_mix():
    @dataclasses.dataclass
    class SomeRow:
        _a: int

    assert join_column_names((SomeRow, int)) == "`_a`"


def test_supports_renaming():
    @dataclasses.dataclass
    class TopLevel:
        one: int = column(rename="two")

    assert join_column_names(TopLevel) == "`two`"


def test_skips_serializing():
    @dataclasses.dataclass
    class TopLevel:
        one: int
        two: int = column(skip_serializing=True)

    assert join_column_names(TopLevel) == "`one`"


def test_skips_deserializing():
    @dataclasses.dataclass
    class TopLevel:
        one: int
        two: int = column(skip_deserializing=True)

    assert join_column_names(TopLevel) == "`one`"


def test_rejects_other():
    class NamedPair(NamedTuple):
        a: int
        b: int

    assert join_column_names(int) is None
    assert join_column_names((int, int)) is None
    assert join_column_names(NamedPair) is None


def test_handles_keyword_like_names():
    @dataclasses.dataclass
    class MyRow:
        type: int
        match: int = column(rename="if")

    assert join_column_names(MyRow) == "`type`,`if`"


def test_column_names_tuple():
    @dataclasses.dataclass
    class MyRow:
        a: int
        b: str

    assert column_names(MyRow) == ("a", "b")
    assert column_names(()) == ()


def test_column_passes_field_options():
    @dataclasses.dataclass
    class MyRow:
        a: int = column(rename="x", default=7)

    assert MyRow().a == 7
    assert column_names(MyRow) == ("x",)


def test_names_are_escaped():
    @dataclasses.dataclass
    class MyRow:
        a: int = column(rename="we`ird")

    assert join_column_names(MyRow) == "`we\\`ird`"