from typing import Dict, Iterable, List, Optional, Sequence

from .errors import UnknownColumn
from .filters import FilterExpr, Predicate


def _key(name: str) -> str:
    return name.strip().casefold()


class ColumnIndex:
    """Lookup from column name to header position, ignoring case and surrounding blanks.

    Built once per run; duplicate header names resolve to their first position.
    """
    __slots__ = ("headers", "_positions")

    def __init__(self, headers: Sequence[str]):
        self.headers = list(headers)
        self._positions: Dict[str, int] = {}
        for i, h in enumerate(self.headers):
            self._positions.setdefault(_key(h), i)

    def resolve(self, name: str, purpose: str = "display") -> int:
        try:
            return self._positions[_key(name)]
        except KeyError:
            raise UnknownColumn(name, self.headers, purpose) from None

    def resolve_display(self, names: Optional[Iterable[str]] = None) -> List[int]:
        names = list(names or ())
        if not names:
            return [0]
        return [self.resolve(n, "display") for n in names]

    def display_names(self, positions: Sequence[int]) -> List[str]:
        return [self.headers[i] for i in positions]

    def resolve_predicates(self, exprs: Iterable[FilterExpr]) -> List[Predicate]:
        return [Predicate.bind(e, self.resolve(e.column, "filter")) for e in exprs]
