import pytest

from csvpeek.errors import MalformedFilterExpression
from csvpeek.filters import (FilterExpr, Operator, Predicate, apply_filters, as_number, compare,
                             matches_all, parse_filter, parse_filters)


def test_parse_filter_valid():
    assert parse_filter("Artist=Queen") == FilterExpr("Artist", Operator.EQ, "Queen")
    assert parse_filter("  Year = 1999  ") == FilterExpr("Year", Operator.EQ, "1999")
    assert parse_filter("Artist=") == FilterExpr("Artist", Operator.EQ, "")


@pytest.mark.parametrize("text,column,op,value", [
    ("Age>=30", "Age", Operator.GE, "30"),
    ("Age<=30", "Age", Operator.LE, "30"),
    ("Age>30", "Age", Operator.GT, "30"),
    ("Age<30", "Age", Operator.LT, "30"),
    ("City!=London", "City", Operator.NE, "London"),
    ("Age => 30", "Age", Operator.EQ, "> 30"),
])
def test_parse_filter_operators(text, column, op, value):
    expr = parse_filter(text)
    assert (expr.column, expr.op, expr.value) == (column, op, value)


def test_operator_in_value_belongs_to_value():
    expr = parse_filter("Formula=a>=b")
    assert (expr.column, expr.op, expr.value) == ("Formula", Operator.EQ, "a>=b")


def test_parse_filter_without_operator():
    with pytest.raises(MalformedFilterExpression) as exc:
        parse_filter("ArtistQueen")
    assert "ArtistQueen" in str(exc.value)
    assert "COLUMN<OP>VALUE" in str(exc.value)


@pytest.mark.parametrize("text", ["=Value", "=", "  >= 3"])
def test_parse_filter_empty_column(text):
    with pytest.raises(MalformedFilterExpression) as exc:
        parse_filter(text)
    assert "Column name cannot be empty" in str(exc.value)


def test_parse_filter_bang_in_column():
    with pytest.raises(MalformedFilterExpression) as exc:
        parse_filter("A!B=3")
    assert "'!'" in str(exc.value)


def test_parse_filters_keeps_order():
    exprs = parse_filters(["b>1", "a=x"])
    assert [e.column for e in exprs] == ["b", "a"]
    assert parse_filters(None) == []


def test_describe():
    assert parse_filter("Age >= 30").describe() == "Age >= '30'"


def test_as_number():
    assert as_number(" 42 ") == 42.0
    assert as_number("-1.5e3") == -1500.0
    assert as_number("") is None
    assert as_number("1_000") is None
    assert as_number("London") is None


def test_equality_ignores_case():
    assert compare(Operator.EQ, "QUEEN", "queen")
    assert not compare(Operator.NE, "QUEEN", "queen")
    assert compare(Operator.NE, "Queen", "Abba")


def test_ordering_is_numeric_when_both_sides_parse():
    assert compare(Operator.GE, " 42 ", "40")
    assert compare(Operator.LT, "9", "10")
    assert compare(Operator.LE, "10.0", "10")
    assert not compare(Operator.GT, "nan", "1")


def test_ordering_falls_back_to_codepoints():
    assert compare(Operator.LT, "Berlin", "London")
    # 'l' sorts after 'B', case is kept in the fallback
    assert compare(Operator.GT, "london", "Berlin")
    assert not compare(Operator.LT, "london", "Berlin")
    # one side not numeric: plain string comparison, so "9" > "10a"
    assert not compare(Operator.LT, "9", "10a")
    assert not compare(Operator.GT, "1_000", "2")


def test_missing_field_fails_both_eq_and_ne():
    row = ["only"]
    assert not Predicate(3, Operator.EQ, "x").matches(row)
    assert not Predicate(3, Operator.NE, "x").matches(row)
    assert not Predicate(3, Operator.GE, "").matches(row)


def test_empty_value_matches_empty_field():
    assert Predicate(1, Operator.EQ, "").matches(["a", ""])


def test_empty_predicate_set_is_identity():
    rows = [["b", "2"], ["a", "1"], ["c"]]
    out = apply_filters(rows, [])
    assert out == rows
    assert matches_all(["anything"], [])


def test_and_of_predicates():
    rows = [["Alpha", "10", "X"], ["Beta", "5", "X"], ["Gamma", "15", "Y"]]
    preds = [Predicate(1, Operator.GE, "7"), Predicate(2, Operator.EQ, "x")]
    assert apply_filters(rows, preds) == [["Alpha", "10", "X"]]


def test_value_filter_scenario():
    rows = [["Alpha", "10"], ["Beta", "5"]]
    expr = parse_filter("Value>=7")
    assert apply_filters(rows, [Predicate.bind(expr, 1)]) == [["Alpha", "10"]]
