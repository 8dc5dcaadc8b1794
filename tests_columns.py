import pytest

from csvpeek.columns import ColumnIndex
from csvpeek.errors import UnknownColumn
from csvpeek.filters import Operator, parse_filters


def test_resolve_is_case_insensitive():
    index = ColumnIndex(["Name", "Value"])
    assert index.resolve("value") == 1
    assert index.resolve(" NAME ") == 0


def test_header_with_surrounding_blanks():
    index = ColumnIndex(["Name ", "Age"])
    assert index.resolve("Name ") == 0
    assert index.resolve("Name") == 0
    assert index.resolve("name ") == 0
    assert index.display_names([0]) == ["Name "]


def test_no_prefix_matching():
    with pytest.raises(UnknownColumn):
        ColumnIndex(["Name"]).resolve("Nam")


def test_default_projection_is_first_column():
    index = ColumnIndex(["A", "B"])
    assert index.resolve_display(None) == [0]
    assert index.resolve_display([]) == [0]


def test_projection_keeps_order_and_duplicates():
    index = ColumnIndex(["Name", "Value"])
    positions = index.resolve_display(["Value", "name", "VALUE"])
    assert positions == [1, 0, 1]
    assert index.display_names(positions) == ["Value", "Name", "Value"]


def test_unknown_display_column():
    with pytest.raises(UnknownColumn) as exc:
        ColumnIndex(["A", "B"]).resolve_display(["Zzz"])
    msg = str(exc.value)
    assert "Zzz" in msg and "['A', 'B']" in msg
    assert exc.value.headers == ["A", "B"]


def test_unknown_filter_column():
    with pytest.raises(UnknownColumn) as exc:
        ColumnIndex(["Header1", "Header2"]).resolve_predicates(parse_filters(["NonExistent=x"]))
    assert str(exc.value).startswith("Filter column 'NonExistent' not found")
    assert exc.value.purpose == "filter"


def test_predicates_bind_positions():
    preds = ColumnIndex(["Name", "Age"]).resolve_predicates(parse_filters(["age>=30", "NAME!=bob"]))
    assert [(p.index, p.op) for p in preds] == [(1, Operator.GE), (0, Operator.NE)]


def test_same_name_resolves_to_same_position():
    index = ColumnIndex(["Name", "Age"])
    (pred,) = index.resolve_predicates(parse_filters(["AGE=3"]))
    assert index.resolve_display(["age"]) == [pred.index]


def test_duplicate_headers_use_first_position():
    assert ColumnIndex(["id", "ID", "x"]).resolve("Id") == 0
