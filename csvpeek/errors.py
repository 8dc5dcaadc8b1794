from typing import List, Optional

FILTER_GRAMMAR = "COLUMN<OP>VALUE where OP is one of =, !=, <, >, <=, >="


class CsvPeekError(Exception):
    """Base class for every error csvpeek reports to the user."""


class IngestionError(CsvPeekError):
    """A source could not be opened, decoded or parsed as CSV."""
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class NoCanonicalHeaders(CsvPeekError):
    """No usable header list; carries the per-file warnings gathered so far."""
    def __init__(self, message: str, warnings: Optional[List[CsvPeekError]] = None):
        super().__init__(message)
        self.warnings = list(warnings or [])


class HeaderMismatch(CsvPeekError):
    """Non-fatal: a directory file whose headers differ from the canonical ones."""
    def __init__(self, path: str, expected: List[str], received: List[str]):
        self.path = path
        self.expected = list(expected)
        self.received = list(received)
        super().__init__(
            f"Headers in file '{path}' do not match the headers of previously read files. Skipping this file.\n"
            f"Expected headers: {self.expected}\n"
            f"Received headers: {self.received}"
        )


class UnknownColumn(CsvPeekError):
    """A display or filter column that names no header."""
    def __init__(self, name: str, headers: List[str], purpose: str = "display"):
        self.name = name
        self.headers = list(headers)
        self.purpose = purpose
        label = "Filter column" if purpose == "filter" else "Specified column"
        super().__init__(f"{label} '{name}' not found in CSV headers: {self.headers}")


class MalformedFilterExpression(CsvPeekError):
    """A --filter argument that does not read as COLUMN<OP>VALUE."""
    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid filter format: {reason} in '{text}'. Expected {FILTER_GRAMMAR}.")
