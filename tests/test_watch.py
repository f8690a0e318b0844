import dataclasses
from datetime import timedelta

import pytest

from clickwire.sql import InvalidParamsError
from clickwire.watch import Watch, WatchPlan, is_table_name, make_live_view_name


@dataclasses.dataclass
class MyRow:
    num: int


def test_it_makes_live_view_name():
    a = make_live_view_name("SELECT 1")
    b = make_live_view_name("SELECT 2")
    assert a != b
    assert len(a) == 3 + 40
    assert len(b) == 3 + 40


def test_live_view_name_pinned():
    assert make_live_view_name("abc") == "lv_a9993e364706816aba3e25717850c26c9cd0d89d"


@pytest.mark.parametrize(
    "sql, expected",
    [("test", True), ("  test \n", True), ("SELECT 1", False), ("", False), ("   ", False)],
)
def test_is_table_name(sql, expected):
    assert is_table_name(sql) is expected


def test_rows_plan_with_limit():
    plan = Watch("SELECT ?fields FROM test ORDER BY num").limit(1).plan(MyRow)
    sql = "SELECT `num` FROM test ORDER BY num"
    view = make_live_view_name(sql)
    assert plan.sql == sql
    assert plan.view == view
    assert plan.statements() == [
        f"CREATE LIVE VIEW IF NOT EXISTS {view} AS {sql}",
        f"WATCH {view} LIMIT 1 FORMAT JSONEachRowWithProgress",
    ]


def test_events_plan():
    plan = Watch("SELECT sum(num) as num FROM test").only_events().plan()
    view = make_live_view_name("SELECT sum(num) as num FROM test")
    assert plan.only_events is True
    assert plan.statements()[-1] == f"WATCH {view} EVENTS FORMAT JSONEachRowWithProgress"


def test_refresh():
    plan = Watch("SELECT 1").refresh(timedelta(seconds=5.7)).only_events().plan()
    assert plan.statements()[0] == (
        f"CREATE LIVE VIEW IF NOT EXISTS {plan.view} REFRESH 5 AS SELECT 1"
    )
    numeric = Watch("SELECT 1").refresh(3).only_events().plan()
    assert numeric.refresh == timedelta(seconds=3)


def test_table_name_is_watched_directly():
    plan = Watch("my_view").plan(MyRow)
    assert plan.sql is None
    assert plan.statements() == ["WATCH my_view FORMAT JSONEachRowWithProgress"]


def test_bind_in_watch():
    plan = Watch("SELECT ?fields FROM test WHERE num > ?").bind(3).plan(MyRow)
    assert plan.sql == "SELECT `num` FROM test WHERE num > 3"


def test_non_struct_rows_rejected():
    with pytest.raises(TypeError, match="only structs are supported"):
        Watch("SELECT 1").plan(int)


def test_unbound_argument_raises():
    with pytest.raises(InvalidParamsError):
        Watch("SELECT ?fields FROM t WHERE a = ?").plan(MyRow)


def test_plan_options():
    plan = WatchPlan(sql=None, view="v")
    assert plan.options["allow_experimental_live_view"] == "1"
    assert plan.options["max_execution_time"] == "0"
    assert plan.options["output_format_json_quote_64bit_integers"] == "0"