import pytest

from csvpeek.errors import HeaderMismatch, IngestionError, NoCanonicalHeaders
from csvpeek.headers import Dataset, HeaderResolution, resolve_headers
from csvpeek.sources import SourceRead


def ok(name, headers, rows):
    return SourceRead(f"./{name}", headers, rows)


def bad(name):
    return SourceRead(f"./{name}", error=IngestionError("CSV data is missing headers or is empty."))


def test_merge_matching_files_and_skip_mismatch():
    reads = [
        ok("a.csv", ["A", "B"], [["1", "2"], ["3", "4"]]),
        ok("b.csv", ["A", "B"], [["5", "6"]]),
        ok("c.csv", ["A", "C"], [["7", "8"], ["9", "0"], ["x", "y"]]),
    ]
    ds = resolve_headers(reads, directory=".")
    assert ds.headers == ["A", "B"]
    assert ds.rows == [["1", "2"], ["3", "4"], ["5", "6"]]
    assert len(ds.warnings) == 1
    w = ds.warnings[0]
    assert isinstance(w, HeaderMismatch)
    assert w.expected == ["A", "B"] and w.received == ["A", "C"]
    assert "./c.csv" in str(w)


def test_headers_must_match_exactly():
    reads = [
        ok("a.csv", ["A", "B"], [["1", "2"]]),
        ok("b.csv", ["B", "A"], [["2", "1"]]),
        ok("c.csv", ["A", "B", "C"], [["1", "2", "3"]]),
        ok("d.csv", ["a", "b"], [["1", "2"]]),
    ]
    ds = resolve_headers(reads)
    assert ds.rows == [["1", "2"]]
    assert len(ds.warnings) == 3


def test_first_readable_file_becomes_canonical():
    reads = [bad("a.csv"), ok("b.csv", ["X"], [["1"]]), ok("c.csv", ["X"], [["2"]])]
    ds = resolve_headers(reads)
    assert ds.headers == ["X"]
    assert ds.rows == [["1"], ["2"]]
    assert isinstance(ds.warnings[0], IngestionError)
    assert "Could not read or parse CSV file './a.csv'" in str(ds.warnings[0])


def test_every_file_unreadable():
    with pytest.raises(NoCanonicalHeaders) as exc:
        resolve_headers([bad("a.csv"), bad("b.csv")], directory="data")
    assert "directory 'data'" in str(exc.value)
    assert len(exc.value.warnings) == 2


def test_designated_header_file():
    reads = [
        ok("a.csv", ["A", "B"], [["1", "2"]]),
        ok("b.csv", ["A", "C"], [["3", "4"]]),
        ok("c.csv", ["A", "C"], [["5", "6"]]),
    ]
    ds = resolve_headers(reads, header_file="c.csv")
    assert ds.headers == ["A", "C"]
    assert ds.rows == [["3", "4"], ["5", "6"]]
    assert [w.path for w in ds.warnings] == ["./a.csv"]


def test_designated_header_file_accepts_path():
    reads = [ok("a.csv", ["A"], [["1"]])]
    ds = resolve_headers(reads, header_file="some/dir/a.csv")
    assert ds.headers == ["A"]


def test_designated_header_file_missing():
    with pytest.raises(NoCanonicalHeaders) as exc:
        resolve_headers([ok("a.csv", ["A"], [])], header_file="zzz.csv")
    assert "zzz.csv" in str(exc.value)


def test_designated_header_file_unreadable():
    with pytest.raises(NoCanonicalHeaders):
        resolve_headers([bad("a.csv"), ok("b.csv", ["A"], [])], header_file="a.csv")


def test_resolution_state_is_sequential():
    state = HeaderResolution()
    state.consider(ok("a.csv", ["A"], [["1"]]))
    state.consider(ok("b.csv", ["B"], [["2"]]))
    assert state.canonical == ["A"]
    assert state.admitted == ["./a.csv"]
    assert len(state.warnings) == 1


def test_dataset_without_rows_is_empty():
    ds = Dataset(["A"], [])
    assert ds.empty
    assert ds.warnings == []
