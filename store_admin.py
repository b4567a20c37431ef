"""CLI for managing a rotating file store — list, count, combine, and purge stashed files."""

import argparse
import logging
import os
import sys

from rotating_file_store.config import load_config, load_yaml_config
from rotating_file_store.store import RotatingFileStore, stash_listing

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [file-store] %(levelname)s %(message)s",
    stream=sys.stderr,
)


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage stashed log files")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--list", action="store_true", help="List stashed files, newest first")
    group.add_argument("--count", action="store_true", help="Print the number of stashed files")
    group.add_argument("--combine", action="store_true", help="Combine stashed files into one")
    group.add_argument("--purge", action="store_true", help="Delete all stashed files")
    parser.add_argument("--include-current", action="store_true",
                        help="With --combine or --purge, include the current log file")
    parser.add_argument("--archive", action="store_true",
                        help="With --combine, package the combined file into an archive")
    return parser


def main(argv=None) -> int:
    args = build_cli_parser().parse_args(argv)
    config = load_config(load_yaml_config(args.config))

    # Listing is read-only; opening a store would append a session marker
    if args.list:
        stash = stash_listing(config)
        if not stash:
            print("No stashed files found.")
            return 0
        for path in stash:
            print(f"  {os.path.basename(path)}  ({_format_size(os.path.getsize(path))})")
        return 0

    if args.count:
        print(len(stash_listing(config)))
        return 0

    with RotatingFileStore(config) as store:
        if args.combine:
            result = store.combine(include_current_file=args.include_current, archive=args.archive)
            if result is None:
                print("Nothing to combine.")
                return 1
            print(result)

        elif args.purge:
            deleted = store.purge(include_current_file=args.include_current)
            print(f"Deleted {len(deleted)} file(s).")

    return 0


if __name__ == "__main__":
    sys.exit(main())
