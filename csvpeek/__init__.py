"""csvpeek: peek into, list, filter and sample CSV data from the command line."""

__version__ = "0.1.0"

from .errors import (CsvPeekError, HeaderMismatch, IngestionError, MalformedFilterExpression,
                     NoCanonicalHeaders, UnknownColumn)
from .query import QueryResult, load_dataset, run_query
from .sources import Origin
