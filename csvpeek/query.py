"""Loads a dataset from an origin and answers one query over it.

Everything that can fail (schema resolution, column lookup) fails here, before
a single row is filtered or sampled.
"""
import random
from typing import Callable, Iterable, List, Optional, Union

from .columns import ColumnIndex
from .filters import FilterExpr, parse_filter
from .headers import Dataset, resolve_headers
from .selector import MISSING, project, sample_row, select_rows
from .sources import Origin, read_file, read_stdin, scan_directory

LIST, SAMPLE, HEADERS = "list", "sample", "headers"
MODES = (LIST, SAMPLE, HEADERS)


class QueryResult:
    __slots__ = ("mode", "title", "headers", "rows", "empty", "filtered")

    def __init__(self, mode: str, title: str = "", headers: Optional[List[str]] = None,
                 rows: Optional[List[List[str]]] = None, empty: bool = False, filtered: bool = False):
        self.mode = mode
        self.title = title
        self.headers = headers or []
        self.rows = rows or []
        self.empty = empty
        self.filtered = filtered

    @property
    def no_matches(self) -> bool:
        return self.mode == LIST and not self.empty and not self.rows

    @property
    def row(self) -> Optional[List[str]]:
        return self.rows[0] if self.rows else None


def load_dataset(origin: Origin, header_file: Optional[str] = None, headers_only: bool = False,
                 engine: str = "python", on_file: Optional[Callable[[str], None]] = None,
                 stdin=None) -> Dataset:
    if header_file and origin.kind != Origin.DIRECTORY:
        raise ValueError("header_file only applies to directory origins")
    if origin.kind == Origin.DIRECTORY:
        reads = scan_directory(origin.path, headers_only=headers_only, engine=engine, on_file=on_file)
        return resolve_headers(reads, header_file=header_file, directory=origin.path)
    if origin.kind == Origin.STDIN:
        headers, rows = read_stdin(headers_only=headers_only, stream=stdin)
        return Dataset(headers, rows)
    headers, rows = read_file(origin.path, headers_only=headers_only, engine=engine)
    return Dataset(headers, rows)


def _exprs(filters: Iterable[Union[str, FilterExpr]]) -> List[FilterExpr]:
    return [f if isinstance(f, FilterExpr) else parse_filter(f) for f in filters]


def run_query(dataset: Dataset, origin: Origin, mode: str = SAMPLE,
              columns: Optional[Iterable[str]] = None, filters: Iterable[Union[str, FilterExpr]] = (),
              raw: bool = False, rng: Optional[random.Random] = None) -> QueryResult:
    if mode not in MODES:
        raise ValueError(f"unknown mode {mode!r}")
    source = origin.describe()
    if mode == HEADERS:
        return QueryResult(mode, f"Headers from {source}", headers=list(dataset.headers))

    exprs = _exprs(filters)
    if exprs and mode != LIST:
        # sampling draws from the whole dataset; combining it with filters is undefined
        raise ValueError("filters can only be combined with list mode")
    if dataset.empty:
        return QueryResult(mode, headers=list(dataset.headers), empty=True)

    index = ColumnIndex(dataset.headers)
    positions = index.resolve_display(columns)
    predicates = index.resolve_predicates(exprs)
    shown = ", ".join(index.display_names(positions))
    missing = "" if raw else MISSING

    if mode == LIST:
        title = f"List from {source} (displaying column(s): {shown})"
        if exprs:
            title += " filtered where " + " AND ".join(e.describe() for e in exprs)
        rows = [project(r, positions, missing) for r in select_rows(dataset.rows, predicates)]
        return QueryResult(mode, title, dataset.headers, rows, filtered=bool(exprs))

    row = sample_row(dataset.rows, rng)
    title = f"Random entry (from column(s) '{shown}' in {source})"
    return QueryResult(mode, title, dataset.headers, [project(row, positions, missing)])
