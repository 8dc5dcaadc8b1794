"""Header resolution for directory scans.

The first successfully parsed file (or the file named by ``header_file``) fixes
the canonical header list. Every file is then admitted only if its header list
is exactly equal to it; rejected and unreadable files become warnings.
"""
import os
from typing import List, Optional, Sequence

from .errors import CsvPeekError, HeaderMismatch, IngestionError, NoCanonicalHeaders
from .sources import SourceRead


class Dataset:
    __slots__ = ("headers", "rows", "warnings")

    def __init__(self, headers: List[str], rows: List[List[str]],
                 warnings: Optional[List[CsvPeekError]] = None):
        self.headers = headers
        self.rows = rows
        self.warnings = warnings or []

    @property
    def empty(self) -> bool:
        return not self.rows


class HeaderResolution:
    """Scan state advanced one file at a time, in sorted-filename order."""
    __slots__ = ("canonical", "rows", "admitted", "warnings")

    def __init__(self, canonical: Optional[List[str]] = None):
        self.canonical = canonical
        self.rows: List[List[str]] = []
        self.admitted: List[str] = []
        self.warnings: List[CsvPeekError] = []

    def consider(self, read: SourceRead) -> None:
        if not read.ok:
            self.warnings.append(IngestionError(
                f"Could not read or parse CSV file '{read.path}': {read.error}. Skipping.", read.path))
            return
        if self.canonical is None:
            self.canonical = list(read.headers)
        if read.headers != self.canonical:
            self.warnings.append(HeaderMismatch(read.path, self.canonical, read.headers))
            return
        self.admitted.append(read.path)
        self.rows.extend(read.rows)

    def finish(self, directory: str) -> Dataset:
        if self.canonical is None or not self.admitted:
            raise NoCanonicalHeaders(
                f"No valid CSV files with matching headers found in directory '{directory}'.",
                self.warnings)
        return Dataset(self.canonical, self.rows, self.warnings)


def _designated(reads: Sequence[SourceRead], header_file: str, directory: str) -> List[str]:
    name = os.path.basename(header_file)
    for read in reads:
        if read.name != name:
            continue
        if not read.ok:
            raise NoCanonicalHeaders(f"Header file '{read.path}' could not be used: {read.error}")
        return list(read.headers)
    raise NoCanonicalHeaders(f"Header file '{header_file}' not found among CSV files in directory '{directory}'.")


def resolve_headers(reads: Sequence[SourceRead], header_file: Optional[str] = None,
                    directory: str = ".") -> Dataset:
    canonical = _designated(reads, header_file, directory) if header_file else None
    state = HeaderResolution(canonical)
    for read in reads:
        state.consider(read)
    return state.finish(directory)
