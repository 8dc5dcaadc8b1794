"""Source reader: turns a file, stdin or a directory of CSV files into (headers, rows).

A directory scan never raises for a single bad file; the failure is kept on the
file's SourceRead so the header resolver can report it as a warning.
"""
import csv, os, sys
from typing import Callable, Iterable, List, Optional, Tuple

import psutil

from .errors import IngestionError

CSV_EXTENSION = ".csv"
EMPTY_MESSAGE = "CSV data is missing headers or is empty."
BOM = "\ufeff"
ENGINES = ("python", "polars")

MB = 1024 * 1024
GB = 1024 * MB
MEMORY_OVERHEAD = 3.0  # rough Python object overhead per on-disk byte


def human(n: int) -> str:
    if n >= GB: return f"{n/GB:.1f} GB"
    if n >= MB: return f"{n/MB:.1f} MB"
    return f"{n} B"


class Origin:
    """Where the data comes from: one file, stdin, or a directory of CSV files."""
    FILE = "file"
    STDIN = "stdin"
    DIRECTORY = "directory"
    __slots__ = ("kind", "path")

    def __init__(self, kind: str, path: Optional[str] = None):
        self.kind = kind
        self.path = path

    @classmethod
    def file(cls, path: str) -> "Origin":
        return cls(cls.FILE, str(path))

    @classmethod
    def stdin(cls) -> "Origin":
        return cls(cls.STDIN)

    @classmethod
    def directory(cls, path: str) -> "Origin":
        return cls(cls.DIRECTORY, str(path))

    def describe(self) -> str:
        if self.kind == self.STDIN:
            return "stdin"
        return f"{self.kind} '{self.path}'"

    def __repr__(self):
        return f"Origin({self.kind!r}, {self.path!r})"


class SourceRead:
    """Outcome of reading one directory entry; exactly one of headers/error is set."""
    __slots__ = ("path", "headers", "rows", "error")

    def __init__(self, path: str, headers: Optional[List[str]] = None,
                 rows: Optional[List[List[str]]] = None, error: Optional[IngestionError] = None):
        self.path = path
        self.headers = headers
        self.rows = rows if rows is not None else []
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def name(self) -> str:
        return os.path.basename(self.path)


def parse_csv(fh, headers_only: bool = False) -> Tuple[List[str], List[List[str]]]:
    rdr = csv.reader(fh)
    try:
        headers = next(rdr, None)
        if not headers:
            raise IngestionError(EMPTY_MESSAGE)
        if headers[0].startswith(BOM):
            headers[0] = headers[0][len(BOM):]
        if headers_only:
            return headers, []
        rows = [row for row in rdr]
    except csv.Error as e:
        raise IngestionError(f"malformed CSV (line {rdr.line_num}): {e}")
    except UnicodeDecodeError as e:
        raise IngestionError(f"input is not valid UTF-8: {e}")
    return headers, rows


def _read_python(path: str, headers_only: bool = False) -> Tuple[List[str], List[List[str]]]:
    try:
        with open(path, newline="", encoding="utf-8-sig") as f:
            return parse_csv(f, headers_only=headers_only)
    except OSError as e:
        raise IngestionError(f"Could not open '{path}': {e.strerror or e}", path)
    except IngestionError as e:
        e.path = path
        raise


def _read_polars(path: str, headers: List[str]) -> Optional[List[List[str]]]:
    """Data rows via polars, or None when the frame could differ from csv.reader.

    polars turns both empty and missing fields into null, pads short rows, skips
    blank lines and only splits on LF, so any of those hands the file back to the
    python reader.
    """
    try:
        import polars as pl  # type: ignore
    except ImportError as e:
        raise IngestionError(f"polars not available: {e}", path)
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError:
        return None
    lines = data.replace(b"\r\n", b"\n")
    if b"\r" in lines or b"\n\n" in lines:
        return None
    try:
        df = pl.read_csv(data, has_header=True, infer_schema=False)
    except pl.exceptions.PolarsError:
        return None
    if df.width != len(headers):
        return None
    rows = [list(r) for r in df.iter_rows()]
    if any(v is None for r in rows for v in r):
        return None
    return rows


def read_file(path: str, headers_only: bool = False, engine: str = "python") -> Tuple[List[str], List[List[str]]]:
    """Header names come from csv.reader for both engines; polars only reads the rows."""
    headers, rows = _read_python(path, headers_only=headers_only or engine == "polars")
    if engine != "polars" or headers_only:
        return headers, rows
    rows = _read_polars(path, headers)
    if rows is None:
        return _read_python(path)
    return headers, rows


def read_stdin(headers_only: bool = False, stream=None) -> Tuple[List[str], List[List[str]]]:
    return parse_csv(stream if stream is not None else sys.stdin, headers_only=headers_only)


def list_csv_files(dir_path: str) -> List[str]:
    """Regular *.csv files directly inside dir_path, sorted byte-wise by name."""
    try:
        with os.scandir(dir_path) as it:
            names = [e.name for e in it if e.name.endswith(CSV_EXTENSION) and e.is_file()]
    except OSError as e:
        raise IngestionError(f"Could not list directory '{dir_path}': {e.strerror or e}", dir_path)
    names.sort(key=os.fsencode)
    return [os.path.join(dir_path, n) for n in names]


def scan_directory(dir_path: str, headers_only: bool = False, engine: str = "python",
                   on_file: Optional[Callable[[str], None]] = None) -> List[SourceRead]:
    paths = list_csv_files(dir_path)
    if not paths:
        raise IngestionError(f"No CSV files found in directory '{dir_path}'.", dir_path)
    reads = []
    for path in paths:
        if on_file is not None:
            on_file(path)
        try:
            headers, rows = read_file(path, headers_only=headers_only, engine=engine)
        except IngestionError as e:
            reads.append(SourceRead(path, error=e))
        else:
            reads.append(SourceRead(path, headers, rows))
    return reads


# ---- Memory budget ----
def total_ram_bytes() -> int:
    return int(psutil.virtual_memory().total)


def estimate_memory(paths: Iterable[str]) -> int:
    size = 0
    for p in paths:
        try:
            size += os.stat(p).st_size
        except OSError:
            continue  # unreadable files are reported by the reader itself
    return int(size * MEMORY_OVERHEAD)


def memory_warning(paths: Iterable[str], mem_pct: float) -> Optional[str]:
    """Warning text when buffering these files likely exceeds mem_pct of RAM."""
    est_mem = estimate_memory(paths)
    budget = int(total_ram_bytes() * mem_pct)
    if est_mem <= budget:
        return None
    return (f"estimated in-memory size {human(est_mem)} exceeds budget {human(budget)} "
            f"({mem_pct:.0%} of RAM); loading everything anyway")
