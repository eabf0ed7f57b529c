"""Command-line front door for workdir.

Parses listing options, merges them with persisted defaults, and writes the
directory listing (optionally git-status annotated) to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import ListingDefaults, load_listing_defaults, save_listing_defaults
from .errors import WorkdirError
from .workspace import WorkDir

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _existing_directory(value: str) -> Path:
    """argparse type for directory arguments."""
    path = Path(value)
    if not path.exists():
        raise argparse.ArgumentTypeError(f"path not found: {value}")
    if not path.is_dir():
        raise argparse.ArgumentTypeError(f"not a directory: {value}")
    return path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workdir",
        description="List a directory tree, one root-relative entry per line.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        type=_existing_directory,
        default=None,
        help="Directory to list. Defaults to current directory.",
    )
    parser.add_argument("-a", "--all", action="store_true", default=None, help="Include dot-prefixed entries.")
    parser.add_argument("--name-only", action="store_true", default=None, help="Print entry names, not paths.")
    parser.add_argument("--status", action="store_true", help="Prefix entries with their git status column.")
    parser.add_argument("--changed", action="store_true", help="With --status, list only changed entries.")
    parser.add_argument("--sort", action="store_true", help="Sort the listing instead of using directory order.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument(
        "--save-defaults",
        action="store_true",
        help="Remember the resolved -a, --name-only and --no-color choices as defaults.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, list the requested directory, and return an exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING)
    if args.verbose:
        logging.getLogger("workdir").setLevel(logging.DEBUG)

    defaults = load_listing_defaults()
    show_hidden = defaults.show_hidden if args.all is None else args.all
    name_only = defaults.name_only if args.name_only is None else args.name_only
    color_setting = defaults.color and not args.no_color
    color = color_setting and sys.stdout.isatty()
    if args.save_defaults:
        save_listing_defaults(
            ListingDefaults(show_hidden=show_hidden, name_only=name_only, color=color_setting)
        )

    root = args.path if args.path is not None else Path.cwd()
    wd = WorkDir(root, sys.stdout, show_hidden=show_hidden, name_only=name_only)
    try:
        if args.status or args.changed:
            wd.ls_status(changed_only=args.changed, color=color, sort=args.sort)
        else:
            wd.ls(sort=args.sort)
    except (WorkdirError, OSError) as exc:
        raise SystemExit(f"workdir: {exc}") from exc
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
