import io, os, re, subprocess, sys

import pytest

from csvpeek import __version__
from csvpeek.cli import main, split_columns

ROOT = os.path.dirname(os.path.abspath(__file__))


def run(args, cwd=None, stdin=""):
    env = dict(os.environ)
    env["PYTHONPATH"] = ROOT + os.pathsep + env.get("PYTHONPATH", "")
    env["PYTHONIOENCODING"] = "utf-8"
    return subprocess.run([sys.executable, "-m", "csvpeek"] + args, cwd=cwd, env=env,
                          input=stdin, capture_output=True, text=True, encoding="utf-8")


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_list_prints_title_count_and_rows(tmp_path):
    write(tmp_path / "test_data.csv", "Name,Value,Category\nAlpha,100,X\nBeta,200,Y\nGamma,150,X\n")
    r = run(["-f", "test_data.csv", "--list"], cwd=tmp_path)
    assert r.returncode == 0
    assert "Reading CSV file: test_data.csv" in r.stdout
    assert "List from file 'test_data.csv' (displaying column(s): Name)" in r.stdout
    assert re.search(r"Number of entries:\s*3", r.stdout)
    assert "1. Alpha" in r.stdout and "3. Gamma" in r.stdout


def test_filter_and_multiple_columns(tmp_path):
    path = write(tmp_path / "songs.csv",
                 "Låt,Artist,Album,År\nHey Jude,The Beatles,N/A,1968\n"
                 "Bohemian Rhapsody,Queen,Opera,1975\nYesterday,The Beatles,N/A,1965\n")
    r = run(["-f", path, "--list", "--filter", "Artist=The Beatles", "--columns", "Låt,År"])
    assert r.returncode == 0
    assert "displaying column(s): Låt, År" in r.stdout
    assert "filtered where Artist = 'The Beatles'" in r.stdout
    assert "1. Hey Jude\t1968" in r.stdout
    assert "2. Yesterday\t1965" in r.stdout
    assert "Bohemian Rhapsody" not in r.stdout
    assert r.stderr == ""


def test_numeric_filter_raw(tmp_path):
    path = write(tmp_path / "data.csv", "Name,Value\nAlpha,10\nBeta,5\n")
    r = run(["-f", path, "--list", "--filter", "Value>=7", "--raw"])
    assert r.returncode == 0
    assert r.stdout == "Alpha\n"


def test_directory_merges_and_skips(tmp_path):
    write(tmp_path / "books_data.csv", "Titel,Författare,Genre\nMoby Dick,Herman Melville,Adventure\n")
    write(tmp_path / "songs_part1.csv", "Låt,Artist\nBohemian Rhapsody,Queen\n")
    write(tmp_path / "songs_part2.csv", "Låt,Artist\nHey Jude,The Beatles\n")
    r = run(["-d", ".", "--list", "--columns", "Titel,Genre"], cwd=tmp_path)
    assert r.returncode == 0
    assert "Reading CSV files from directory: ." in r.stdout
    assert "Reading file: ./songs_part2.csv" in r.stdout
    assert "1. Moby Dick\tAdventure" in r.stdout
    assert "Warning: Headers in file './songs_part1.csv'" in r.stderr
    assert "Expected headers: ['Titel', 'Författare', 'Genre']" in r.stderr

    r = run(["-d", ".", "--list", "--filter", "Artist=The Beatles"], cwd=tmp_path)
    assert r.returncode == 1
    assert "Error: Filter column 'Artist' not found in CSV headers" in r.stderr
    assert "List from directory" not in r.stdout


def test_header_file_picks_schema(tmp_path):
    write(tmp_path / "a.csv", "Titel,Genre\nMoby Dick,Adventure\n")
    write(tmp_path / "b.csv", "Låt,Artist\nBohemian Rhapsody,Queen\n")
    write(tmp_path / "c.csv", "Låt,Artist\nHey Jude,The Beatles\n")
    r = run(["-d", str(tmp_path), "--header-file", "b.csv", "--list", "--raw"])
    assert r.returncode == 0
    assert r.stdout == "Bohemian Rhapsody\nHey Jude\n"


def test_stdin_pipe_without_arguments():
    r = run(["--list", "-c", "b"], stdin="a,b\n1,2\n3,4\n")
    assert r.returncode == 0
    assert "No input file specified, reading CSV data from piped stdin..." in r.stdout
    assert "List from stdin (displaying column(s): b)" in r.stdout


def test_empty_pipe_is_an_error():
    r = run([], stdin="")
    assert r.returncode == 1
    assert "CSV data is missing headers or is empty." in r.stderr


def test_version():
    r = run(["--version"])
    assert r.returncode == 0
    assert __version__ in r.stdout


def test_malformed_filter(capsys):
    assert main(["-f", "-", "--list", "--filter", "=Value"]) == 1
    err = capsys.readouterr().err
    assert "Column name cannot be empty" in err
    assert "'=Value'" in err


def test_filter_requires_list(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["-f", "x.csv", "--filter", "a=b"])
    assert exc.value.code == 2


def test_header_file_requires_directory():
    with pytest.raises(SystemExit) as exc:
        main(["-f", "x.csv", "--header-file", "x.csv"])
    assert exc.value.code == 2


def test_unknown_display_column(tmp_path, capsys):
    path = write(tmp_path / "d.csv", "A,B\n1,2\n")
    assert main(["-f", path, "-c", "Zzz"]) == 1
    assert "Specified column 'Zzz' not found in CSV headers: ['A', 'B']" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main(["-f", str(tmp_path / "nope.csv")]) == 1
    assert "Error: Could not open" in capsys.readouterr().err


def test_no_matches_and_no_rows(tmp_path, capsys):
    path = write(tmp_path / "d.csv", "A,B\n1,2\n")
    assert main(["-f", path, "--list", "--filter", "A=9"]) == 0
    assert "No entries matched your filter." in capsys.readouterr().out
    empty = write(tmp_path / "e.csv", "A,B\n")
    assert main(["-f", empty, "--list"]) == 0
    assert "No data rows found." in capsys.readouterr().out


def test_random_pick_raw_with_seed(tmp_path, capsys):
    path = write(tmp_path / "d.csv", "Name,Age,City\nAnna,30,Oslo\nBo,41,Lund\n")
    assert main(["-f", path, "-c", "City", "-c", "name", "--raw", "--seed", "3"]) == 0
    first = capsys.readouterr().out
    assert first in ("Oslo\tAnna\n", "Lund\tBo\n")
    assert main(["-f", path, "-c", "City", "-c", "name", "--raw", "--seed", "3"]) == 0
    assert capsys.readouterr().out == first


def test_random_pick_title(tmp_path, capsys):
    path = write(tmp_path / "d.csv", "Name\nAnna\n")
    assert main(["-f", path]) == 0
    assert f"Random entry (from column(s) 'Name' in file '{path}'): Anna" in capsys.readouterr().out


def test_headers_listing(tmp_path, capsys):
    path = write(tmp_path / "d.csv", "Name,Age\nAnna,30\n")
    assert main(["-f", path, "--headers"]) == 0
    out = capsys.readouterr().out
    assert f"Headers from file '{path}':" in out
    assert "1. Name\n2. Age\n" in out
    assert main(["-f", path, "--headers", "--raw"]) == 0
    assert capsys.readouterr().out == "Name\nAge\n"


def test_stdin_dash(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("a,b\n1,2\n"))
    assert main(["-f", "-", "--list", "--raw", "-c", "b,a", "--engine", "polars"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "2\t1\n"
    assert "not supported for stdin" in captured.err


class _Terminal(io.StringIO):
    def isatty(self):
        return True


def test_no_input_on_terminal(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", _Terminal())
    assert main([]) == 1
    captured = capsys.readouterr()
    assert "usage: csvpeek" in captured.out
    assert "Error: No input source specified." in captured.err


def test_split_columns():
    assert split_columns(["A, B", "C", ",,"]) == ["A", "B", "C"]
    assert split_columns(None) == []


@pytest.mark.parametrize("engine", ["python", "polars"])
def test_ragged_file_filter_same_for_both_engines(tmp_path, capsys, engine):
    path = write(tmp_path / "ragged.csv", "A,B\nx\ny,z\n")
    assert main(["-f", path, "--list", "--raw", "--filter", "B!=q", "--engine", engine]) == 0
    assert capsys.readouterr().out == "y\n"
    assert main(["-f", path, "--list", "-c", "A,B", "--engine", engine]) == 0
    out = capsys.readouterr().out
    assert "1. x\t[N/A]" in out
    assert "2. y\tz" in out


def test_polars_engine_on_file_and_directory(tmp_path):
    write(tmp_path / "a.csv", "Name,Value\nAlpha,10\nBeta,\n")
    write(tmp_path / "b.csv", "Name,Value\nGamma,30\n")
    for args in (["-f", "a.csv"], ["-d", "."]):
        py = run(args + ["--list", "-c", "Name,Value", "--raw"], cwd=tmp_path)
        fast = run(args + ["--list", "-c", "Name,Value", "--raw", "--engine", "polars"], cwd=tmp_path)
        assert fast.returncode == py.returncode == 0
        assert fast.stdout == py.stdout
        assert fast.stderr == ""
    assert py.stdout == "Alpha\t10\nBeta\t\nGamma\t30\n"


def test_bom_file_and_directory_merge(tmp_path, capsys):
    write(tmp_path / "a.csv", "\ufeffName,Age\nAnna,30\n")
    write(tmp_path / "b.csv", "Name,Age\nBo,41\n")
    assert main(["-f", str(tmp_path / "a.csv"), "-c", "Name", "--list", "--raw"]) == 0
    assert capsys.readouterr().out == "Anna\n"
    assert main(["-d", str(tmp_path), "--list", "--raw"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "Anna\nBo\n"
    assert "do not match" not in captured.err


def test_bom_on_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("\ufeffName,Age\nAnna,30\n"))
    assert main(["-f", "-", "--list", "--raw", "-c", "name"]) == 0
    assert capsys.readouterr().out == "Anna\n"


def test_header_with_trailing_blank(tmp_path, capsys):
    path = write(tmp_path / "d.csv", "Name ,Age\nAnna,30\n")
    assert main(["-f", path, "--list", "--raw", "-c", "Name", "--filter", "name =Anna"]) == 0
    assert capsys.readouterr().out == "Anna\n"
