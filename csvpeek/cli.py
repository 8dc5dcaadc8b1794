import argparse, random, sys
from typing import List, Optional, Tuple

from . import __version__
from .errors import CsvPeekError
from .filters import parse_filters
from .query import HEADERS, LIST, SAMPLE, QueryResult, load_dataset, run_query
from .sources import ENGINES, Origin, list_csv_files, memory_warning

DESCRIPTION = """Quickly peek into, list, filter and sample CSV data.

Data comes from a single file (-f), from stdin (-f - or a pipe), or from every
.csv file in a directory (-d). Files in a directory are merged when their
headers match the first readable file (or --header-file); the rest are skipped
with a warning.

Without --list a single random row is shown. --filter takes COLUMN<OP>VALUE
with OP one of =, !=, <, >, <=, >=. = and != ignore case; the ordering
operators compare numbers numerically and anything else as plain text."""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="csvpeek", description=DESCRIPTION,
                                 formatter_class=argparse.RawDescriptionHelpFormatter)
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("-l", "--list", action="store_true", help="List rows (first column by default)")
    mode.add_argument("--headers", action="store_true", help="Print the header list and exit")
    ap.add_argument("--filter", action="append", metavar="COLUMN<OP>VALUE",
                    help="Keep rows matching the condition; repeat for AND. Requires --list")
    ap.add_argument("-f", "--data-file", help="CSV path or '-' for stdin")
    ap.add_argument("-d", "--directory", help="Merge all .csv files in this directory (wins over --data-file)")
    ap.add_argument("--header-file", help="With --directory: file whose headers are authoritative")
    ap.add_argument("-c", "--columns", action="append", metavar="COL[,COL...]",
                    help="Column(s) to display, comma separated or repeated (default: first column)")
    ap.add_argument("--raw", action="store_true", help="Print values only, tab separated, for piping")
    ap.add_argument("--engine", choices=ENGINES, default="python", help="CSV reader for files (default python)")
    ap.add_argument("--mem-budget", type=float, default=0.25,
                    help="Warn when the data likely needs more than this fraction of RAM (default 0.25)")
    ap.add_argument("--seed", type=int, default=None, help="Seed for random row selection")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def split_columns(values: Optional[List[str]]) -> List[str]:
    out = []
    for v in values or ():
        out.extend(c.strip() for c in v.split(",") if c.strip())
    return out


def choose_origin(args) -> Tuple[Optional[Origin], str]:
    if args.directory:
        return Origin.directory(args.directory), f"Reading CSV files from directory: {args.directory}"
    if args.data_file == "-":
        return Origin.stdin(), "Reading CSV data from stdin (specified by '-f -')..."
    if args.data_file:
        return Origin.file(args.data_file), f"Reading CSV file: {args.data_file}"
    if sys.stdin is None or sys.stdin.isatty():
        return None, ""
    return Origin.stdin(), "No input file specified, reading CSV data from piped stdin..."


def warn(message) -> None:
    print(f"Warning: {message}", file=sys.stderr)


def fail(err: Exception) -> int:
    for w in getattr(err, "warnings", ()):
        warn(w)
    print(f"Error: {err}", file=sys.stderr)
    return 1


def print_result(result: QueryResult, raw: bool) -> None:
    if result.mode == HEADERS:
        if raw:
            for h in result.headers:
                print(h)
            return
        print(f"{result.title}:")
        for i, h in enumerate(result.headers, start=1):
            print(f"{i}. {h}")
        return
    if result.empty:
        if not raw:
            print("No data rows found.")
        return
    if result.mode == SAMPLE:
        values = "\t".join(result.row)
        print(values if raw else f"{result.title}: {values}")
        return
    if raw:
        for row in result.rows:
            print("\t".join(row))
        return
    if result.no_matches:
        print("No entries matched your filter." if result.filtered else "No entries to display.")
        return
    print(result.title)
    print(f"Number of entries: {len(result.rows)}")
    for i, row in enumerate(result.rows, start=1):
        print(f"{i}. " + "\t".join(row))


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if args.filter and not args.list:
        ap.error("--filter requires --list")
    if args.header_file and not args.directory:
        ap.error("--header-file requires --directory")
    if not 0 < args.mem_budget <= 1:
        ap.error("--mem-budget must be a fraction in (0, 1]")

    try:
        exprs = parse_filters(args.filter)
    except CsvPeekError as e:
        return fail(e)

    origin, notice = choose_origin(args)
    if origin is None:
        ap.print_help()
        print("\nError: No input source specified. Please use -f <file>, -d <directory>, or pipe data to stdin.",
              file=sys.stderr)
        return 1
    if not args.raw:
        print(notice)

    engine = args.engine
    if origin.kind == Origin.STDIN and engine != "python":
        print(f"({engine} engine not supported for stdin; using python engine)", file=sys.stderr)
        engine = "python"

    if not args.headers and origin.kind != Origin.STDIN:
        try:
            paths = list_csv_files(origin.path) if origin.kind == Origin.DIRECTORY else [origin.path]
        except CsvPeekError as e:
            return fail(e)
        msg = memory_warning(paths, args.mem_budget)
        if msg:
            warn(msg)

    on_file = None if args.raw else (lambda p: print(f"Reading file: {p}"))
    try:
        dataset = load_dataset(origin, header_file=args.header_file, headers_only=args.headers,
                               engine=engine, on_file=on_file)
    except CsvPeekError as e:
        return fail(e)
    for w in dataset.warnings:
        warn(w)

    mode = HEADERS if args.headers else LIST if args.list else SAMPLE
    rng = random.Random(args.seed) if args.seed is not None else None
    try:
        result = run_query(dataset, origin, mode, columns=split_columns(args.columns),
                           filters=exprs, raw=args.raw, rng=rng)
    except CsvPeekError as e:
        return fail(e)
    print_result(result, args.raw)
    return 0


if __name__ == "__main__":
    sys.exit(main())
