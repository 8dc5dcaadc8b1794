import io, os

import pytest

from csvpeek import sources
from csvpeek.errors import IngestionError
from csvpeek.sources import (EMPTY_MESSAGE, MB, Origin, human, list_csv_files, memory_warning, parse_csv,
                             read_file, read_stdin, scan_directory)


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_parse_csv_header_and_rows():
    headers, rows = parse_csv(io.StringIO("Name,Value\nAlpha,10\nBeta,5\n"))
    assert headers == ["Name", "Value"]
    assert rows == [["Alpha", "10"], ["Beta", "5"]]


def test_parse_csv_quoting():
    _, rows = parse_csv(io.StringIO('a,b\n"x, y","he said ""hi"""\n'))
    assert rows == [["x, y", 'he said "hi"']]


def test_parse_csv_keeps_ragged_rows():
    _, rows = parse_csv(io.StringIO("a,b,c\n1\n1,2,3,4\n"))
    assert rows == [["1"], ["1", "2", "3", "4"]]


def test_parse_csv_header_only_file_has_no_rows():
    headers, rows = parse_csv(io.StringIO("a,b\n"))
    assert headers == ["a", "b"]
    assert rows == []


@pytest.mark.parametrize("text", ["", "\n"])
def test_parse_csv_without_headers(text):
    with pytest.raises(IngestionError) as exc:
        parse_csv(io.StringIO(text))
    assert str(exc.value) == EMPTY_MESSAGE


def test_headers_only_skips_rows():
    headers, rows = read_stdin(headers_only=True, stream=io.StringIO("a,b\n1,2\n"))
    assert headers == ["a", "b"]
    assert rows == []


def test_read_file_missing(tmp_path):
    missing = str(tmp_path / "nope.csv")
    with pytest.raises(IngestionError) as exc:
        read_file(missing)
    assert exc.value.path == missing
    assert "nope.csv" in str(exc.value)


def test_read_file_not_utf8(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_bytes(b"a,b\n\xff\xfe,x\n")
    with pytest.raises(IngestionError) as exc:
        read_file(str(path))
    assert "UTF-8" in str(exc.value)
    assert exc.value.path == str(path)


PARITY_CASES = [
    "Name,Value\nAlpha,10\nBeta,20\n",
    "Name,Value\nAlpha,10\nBeta,\n",
    'Name,Value\n"x, y","he said ""hi"""\n',
    "A,B\nx\ny,z\n",
    "A,B\n1,2,3\n",
    "A,B\n1,2\n\n3,4\n",
    "A,B\r\n1,2\r\n",
    "A,B\r1,2\r",
    "\ufeffName,Value\nAlpha,10\n",
    "A,A\n1,2\n",
    "A,B\n",
]


@pytest.mark.parametrize("text", PARITY_CASES)
def test_polars_engine_matches_python_reader(tmp_path, text):
    path = str(tmp_path / "data.csv")
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    assert read_file(path, engine="polars") == read_file(path, engine="python")


def test_polars_engine_keeps_short_rows_short(tmp_path):
    path = write(tmp_path / "ragged.csv", "A,B\nx\ny,z\n")
    headers, rows = read_file(path, engine="polars")
    assert headers == ["A", "B"]
    assert rows == [["x"], ["y", "z"]]


def test_polars_engine_errors_match_python_reader(tmp_path):
    empty = write(tmp_path / "empty.csv", "")
    with pytest.raises(IngestionError) as exc:
        read_file(empty, engine="polars")
    assert str(exc.value) == EMPTY_MESSAGE
    assert exc.value.path == empty
    bad = tmp_path / "bad.csv"
    bad.write_bytes(b"a,b\n\xff\xfe,x\n")
    with pytest.raises(IngestionError) as exc:
        read_file(str(bad), engine="polars")
    assert "UTF-8" in str(exc.value)
    with pytest.raises(IngestionError):
        read_file(str(tmp_path / "nope.csv"), engine="polars")


def test_polars_engine_headers_only(tmp_path):
    path = write(tmp_path / "data.csv", "Name,Value\nAlpha,10\n")
    assert read_file(path, headers_only=True, engine="polars") == (["Name", "Value"], [])


def test_read_file_strips_bom(tmp_path):
    path = write(tmp_path / "bom.csv", "\ufeffName,Value\nAlpha,10\n")
    headers, rows = read_file(path)
    assert headers == ["Name", "Value"]
    assert rows == [["Alpha", "10"]]


def test_parse_csv_strips_bom_from_stdin():
    headers, _ = read_stdin(stream=io.StringIO("\ufeffName,Value\nAlpha,10\n"))
    assert headers == ["Name", "Value"]


def test_scan_directory_bom_and_plain_files_share_headers(tmp_path):
    write(tmp_path / "a.csv", "\ufeffName,Value\nAlpha,10\n")
    write(tmp_path / "b.csv", "Name,Value\nBeta,20\n")
    reads = scan_directory(str(tmp_path))
    assert [r.headers for r in reads] == [["Name", "Value"], ["Name", "Value"]]


def test_list_csv_files_sorted_bytewise(tmp_path):
    write(tmp_path / "b.csv", "x\n")
    write(tmp_path / "a.csv", "x\n")
    write(tmp_path / "B.csv", "x\n")
    write(tmp_path / "notes.txt", "x\n")
    write(tmp_path / "UPPER.CSV", "x\n")
    (tmp_path / "folder.csv").mkdir()
    names = [os.path.basename(p) for p in list_csv_files(str(tmp_path))]
    assert names == ["B.csv", "a.csv", "b.csv"]


def test_scan_directory_isolates_bad_files(tmp_path):
    write(tmp_path / "a.csv", "A,B\n1,2\n")
    write(tmp_path / "b.csv", "")
    write(tmp_path / "c.csv", "A,B\n3,4\n")
    seen = []
    reads = scan_directory(str(tmp_path), on_file=seen.append)
    assert [r.name for r in reads] == ["a.csv", "b.csv", "c.csv"]
    assert seen == [r.path for r in reads]
    assert [r.ok for r in reads] == [True, False, True]
    assert isinstance(reads[1].error, IngestionError)
    assert reads[2].rows == [["3", "4"]]


def test_scan_directory_without_csv_files(tmp_path):
    write(tmp_path / "notes.txt", "a\n")
    with pytest.raises(IngestionError) as exc:
        scan_directory(str(tmp_path))
    assert "No CSV files" in str(exc.value)


def test_scan_directory_unlistable(tmp_path):
    with pytest.raises(IngestionError):
        scan_directory(str(tmp_path / "missing"))


def test_origin_describe():
    assert Origin.file("x.csv").describe() == "file 'x.csv'"
    assert Origin.directory(".").describe() == "directory '.'"
    assert Origin.stdin().describe() == "stdin"


def test_human():
    assert human(512) == "512 B"
    assert human(3 * MB) == "3.0 MB"


def test_memory_warning(tmp_path, monkeypatch):
    path = write(tmp_path / "big.csv", "a\n" + "x\n" * 500)
    monkeypatch.setattr(sources, "total_ram_bytes", lambda: 1000)
    msg = memory_warning([path], 0.25)
    assert msg is not None and "exceeds budget" in msg
    monkeypatch.setattr(sources, "total_ram_bytes", lambda: 10 ** 12)
    assert memory_warning([path], 0.25) is None
