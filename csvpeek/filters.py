"""Row filters: the COLUMN<OP>VALUE mini-language and predicate evaluation.

``=`` and ``!=`` compare case-insensitively. The ordering operators compare
numerically when both sides parse as floats (surrounding whitespace ignored)
and otherwise fall back to plain codepoint comparison of the raw strings.
"""
import operator
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .errors import MalformedFilterExpression


class Operator(Enum):
    EQ = "="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="


# longest tokens first so ">=" is never read as ">"
TOKEN_ORDER = ("!=", ">=", "<=", "=", ">", "<")
OPERATOR_CHARS = frozenset("!=<>")

_ORDERING = {
    Operator.LT: operator.lt,
    Operator.GT: operator.gt,
    Operator.LE: operator.le,
    Operator.GE: operator.ge,
}


class FilterExpr:
    """A parsed, not yet resolved, filter clause."""
    __slots__ = ("column", "op", "value", "text")

    def __init__(self, column: str, op: Operator, value: str, text: str = ""):
        self.column = column
        self.op = op
        self.value = value
        self.text = text

    def describe(self) -> str:
        return f"{self.column} {self.op.value} '{self.value}'"

    def __eq__(self, other):
        if not isinstance(other, FilterExpr):
            return NotImplemented
        return (self.column, self.op, self.value) == (other.column, other.op, other.value)

    def __repr__(self):
        return f"FilterExpr({self.column!r}, {self.op.value!r}, {self.value!r})"


def parse_filter(text: str) -> FilterExpr:
    pos = next((i for i, ch in enumerate(text) if ch in OPERATOR_CHARS), None)
    if pos is None:
        raise MalformedFilterExpression(text, "no comparison operator found")
    token = next((t for t in TOKEN_ORDER if text.startswith(t, pos)), None)
    if token is None:
        # a '!' that is not part of '!='
        raise MalformedFilterExpression(text, f"column name contains operator character '{text[pos]}'")
    column = text[:pos].strip()
    if not column:
        raise MalformedFilterExpression(text, "Column name cannot be empty")
    value = text[pos + len(token):].strip()
    return FilterExpr(column, Operator(token), value, text)


def parse_filters(texts: Optional[Iterable[str]]) -> List[FilterExpr]:
    return [parse_filter(t) for t in (texts or ())]


def as_number(s: str) -> Optional[float]:
    s = s.strip()
    if not s or "_" in s:
        return None
    try:
        return float(s)
    except ValueError:
        return None


def compare(op: Operator, field: str, value: str) -> bool:
    if op is Operator.EQ:
        return field.casefold() == value.casefold()
    if op is Operator.NE:
        return field.casefold() != value.casefold()
    cmp = _ORDERING[op]
    a, b = as_number(field), as_number(value)
    if a is not None and b is not None:
        return cmp(a, b)
    return cmp(field, value)


class Predicate:
    """A filter clause bound to a header position."""
    __slots__ = ("index", "op", "value", "column")

    def __init__(self, index: int, op: Operator, value: str, column: str = ""):
        self.index = index
        self.op = op
        self.value = value
        self.column = column

    @classmethod
    def bind(cls, expr: FilterExpr, index: int) -> "Predicate":
        return cls(index, expr.op, expr.value, expr.column)

    def matches(self, row: Sequence[str]) -> bool:
        # short rows never match, whatever the operator
        if self.index >= len(row):
            return False
        return compare(self.op, row[self.index], self.value)

    def __repr__(self):
        return f"Predicate({self.index}, {self.op.value!r}, {self.value!r})"


def matches_all(row: Sequence[str], predicates: Sequence[Predicate]) -> bool:
    return all(p.matches(row) for p in predicates)


def apply_filters(rows: Iterable[Sequence[str]], predicates: Sequence[Predicate]) -> list:
    if not predicates:
        return list(rows)
    return [r for r in rows if matches_all(r, predicates)]
