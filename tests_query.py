import io, random

import pytest

from csvpeek.errors import NoCanonicalHeaders, UnknownColumn
from csvpeek.headers import Dataset
from csvpeek.query import HEADERS, LIST, SAMPLE, load_dataset, run_query
from csvpeek.selector import MISSING, project, sample_row, select_rows
from csvpeek.sources import Origin

SONGS = Dataset(
    ["Song", "Artist", "Year"],
    [["Hey Jude", "The Beatles", "1968"],
     ["Bohemian Rhapsody", "Queen", "1975"],
     ["Yesterday", "The Beatles", "1965"]],
)
ORIGIN = Origin.file("songs.csv")


def test_list_default_column():
    res = run_query(SONGS, ORIGIN, LIST)
    assert res.title == "List from file 'songs.csv' (displaying column(s): Song)"
    assert res.rows == [["Hey Jude"], ["Bohemian Rhapsody"], ["Yesterday"]]
    assert not res.filtered


def test_list_with_filter_and_columns():
    res = run_query(SONGS, ORIGIN, LIST, columns=["song", "YEAR"], filters=["artist=the beatles"])
    assert res.title == ("List from file 'songs.csv' (displaying column(s): Song, Year) "
                         "filtered where artist = 'the beatles'")
    assert res.rows == [["Hey Jude", "1968"], ["Yesterday", "1965"]]


def test_list_numeric_filters_are_anded():
    res = run_query(SONGS, ORIGIN, LIST, filters=["Year>=1966", "Year<1980"])
    assert res.rows == [["Hey Jude"], ["Bohemian Rhapsody"]]
    assert " AND " in res.title


def test_no_matches_is_not_empty():
    res = run_query(SONGS, ORIGIN, LIST, filters=["Artist=Abba"])
    assert res.no_matches
    assert not res.empty


def test_empty_dataset():
    res = run_query(Dataset(["A"], []), ORIGIN, LIST, columns=["A"])
    assert res.empty
    assert not res.no_matches


def test_unknown_column_fails_before_filtering():
    with pytest.raises(UnknownColumn):
        run_query(SONGS, ORIGIN, LIST, columns=["Zzz"], filters=["Year>1"])


def test_sample_is_uniform_choice_of_all_rows():
    res = run_query(SONGS, ORIGIN, SAMPLE, columns=["Artist", "Song"], rng=random.Random(7))
    expected = random.Random(7).choice(SONGS.rows)
    assert res.row == [expected[1], expected[0]]
    assert res.title == "Random entry (from column(s) 'Artist, Song' in file 'songs.csv')"


def test_sample_rejects_filters():
    with pytest.raises(ValueError):
        run_query(SONGS, ORIGIN, SAMPLE, filters=["Year>1"])


def test_headers_mode():
    res = run_query(SONGS, Origin.stdin(), HEADERS)
    assert res.headers == ["Song", "Artist", "Year"]
    assert res.title == "Headers from stdin"


def test_missing_field_sentinel():
    ds = Dataset(["A", "B"], [["only"]])
    assert run_query(ds, ORIGIN, LIST, columns=["B"]).rows == [[MISSING]]
    assert run_query(ds, ORIGIN, LIST, columns=["B"], raw=True).rows == [[""]]


def test_selector_helpers():
    rows = [["a", "1"], ["b", "2"]]
    assert select_rows(rows) == rows
    assert sample_row([]) is None
    assert sample_row(rows) in rows
    assert project(["a", "1"], [1, 0, 5], missing="-") == ["1", "a", "-"]


def test_load_dataset_from_file(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("Name,Value\nAlpha,10\nBeta,5\n", encoding="utf-8")
    ds = load_dataset(Origin.file(str(path)))
    assert ds.headers == ["Name", "Value"]
    res = run_query(ds, Origin.file(str(path)), LIST, filters=["Value>=7"])
    assert res.rows == [["Alpha"]]


def test_load_dataset_from_stdin():
    ds = load_dataset(Origin.stdin(), stdin=io.StringIO("a,b\n1,2\n"))
    assert ds.rows == [["1", "2"]]
    assert ds.headers == ["a", "b"]


def test_load_dataset_from_directory(tmp_path):
    (tmp_path / "a.csv").write_text("A,B\n1,2\n", encoding="utf-8")
    (tmp_path / "b.csv").write_text("A,B\n3,4\n5,6\n", encoding="utf-8")
    (tmp_path / "c.csv").write_text("A,C\n7,8\n", encoding="utf-8")
    ds = load_dataset(Origin.directory(str(tmp_path)))
    assert ds.headers == ["A", "B"]
    assert len(ds.rows) == 3
    assert len(ds.warnings) == 1


def test_load_dataset_header_file(tmp_path):
    (tmp_path / "a.csv").write_text("A,B\n1,2\n", encoding="utf-8")
    with pytest.raises(NoCanonicalHeaders):
        load_dataset(Origin.directory(str(tmp_path)), header_file="missing.csv")
    with pytest.raises(ValueError):
        load_dataset(Origin.file(str(tmp_path / "a.csv")), header_file="a.csv")
