import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from config import load_settings
from digest import LogSourceError, build_digest
from report import digest_to_dict, filter_entries, render_text
from sorting import parse_sort_keys


# ---------------- CLI ----------------

def sort_spec(value: str):
    try:
        return parse_sort_keys(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def parse_args(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        description="Group a PHP error log into distinct, counted entries"
    )
    parser.add_argument(
        "--log-file",
        help="Error log to read (default: $PHPLOG_ERROR_LOG)",
    )
    parser.add_argument(
        "--cache-file",
        help="Where to keep parse state between runs (default: $PHPLOG_CACHE_FILE, none)",
    )
    parser.add_argument(
        "--sort",
        type=sort_spec,
        default=parse_sort_keys("last:desc"),
        help="Comma separated field[:asc|desc] list (default: last:desc)",
    )
    parser.add_argument(
        "--type",
        action="append",
        dest="types",
        help="Only show this type (token or label); repeatable",
    )
    parser.add_argument("--path", help="Only show entries whose path contains this")
    parser.add_argument("--limit", type=int, default=0, help="Show at most N entries")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--no-snippets", action="store_true", help="Do not read source files")
    parser.add_argument("-v", "--verbose", action="store_true")

    return parser.parse_args(argv)


# ---------------- Main ----------------

def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    settings = load_settings(args.log_file, args.cache_file)

    if not settings.error_log:
        print(
            "No error log was defined or could be determined from the configuration.",
            file=sys.stderr,
        )
        return 2

    try:
        digest = build_digest(
            settings.error_log,
            cache_file=settings.cache_file,
            sort_keys=args.sort,
            read_snippets=not args.no_snippets,
        )
    except LogSourceError as e:
        print(f"The file '{e.path}' cannot be opened for reading.", file=sys.stderr)
        return 2

    entries = filter_entries(
        digest.entries,
        digest.types,
        tokens=args.types,
        path_contains=args.path,
    )
    if args.limit > 0:
        entries = entries[: args.limit]

    if args.json:
        print(json.dumps(digest_to_dict(digest, entries), indent=2))
    else:
        print(render_text(digest, entries))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
