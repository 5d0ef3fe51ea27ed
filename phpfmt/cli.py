"""
Command-line driver.

Usage:
  phpfmt src/Foo.php             # print the formatted file
  phpfmt -w src                  # rewrite changed .php/.phpt files in place
  phpfmt --check src             # only check; exit 1 if a file would change
  phpfmt < in.php > out.php      # filter standard input

Exit codes: 0 ok, 1 files would change or a file/config error, 2 usage
error or missing path.
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from . import __version__, config
from .config import ConfigError, resolve_options
from .pipeline import format_source

EXTENSIONS = (".php", ".phpt")
STDIN = "-"


def read_source(path: Path) -> str:
    # newline='' keeps \r\n line ends as they are
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_source(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def iter_files(root: Path) -> Iterator[Path]:
    if root.is_dir():
        yield from sorted(p for p in root.rglob("*") if p.suffix in EXTENSIONS and p.is_file())
    else:
        yield root


def process_file(path: Path, overrides: Dict[str, Any], check_only: bool, write: bool) -> bool:
    """Format one file; returns True when the formatted text differs."""
    src = read_source(path)
    options = resolve_options(path.parent, overrides=overrides)
    formatted = format_source(src, options)
    changed = src != formatted
    if config.DEBUG:
        print(f"DEBUG: {path}: {'changed' if changed else 'unchanged'}", file=sys.stderr)
    if check_only:
        return changed
    if write:
        if changed:
            write_source(path, formatted)
    else:
        sys.stdout.write(formatted)
    return changed


def process_stdin(overrides: Dict[str, Any], check_only: bool) -> bool:
    src = sys.stdin.read()
    options = resolve_options(Path(os.getcwd()), overrides=overrides)
    formatted = format_source(src, options)
    if not check_only:
        sys.stdout.write(formatted)
    return src != formatted


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="phpfmt", description="Reformat PHP source files.")
    ap.add_argument("paths", nargs="*", metavar="path",
                    help="files or directories ('-' or nothing: standard input)")
    ap.add_argument("-w", "--write", action="store_true", help="rewrite files in place")
    ap.add_argument("--check", action="store_true", help="only check; non-zero exit if files would change")
    ap.add_argument("--tab-width", type=int, metavar="N", help="spaces per tab (default: 4)")
    ap.add_argument("--no-align", action="store_true",
                    help="do not align const declarations or doc comment tags")
    ap.add_argument("--no-sort-uses", action="store_true", help="do not sort use statements")
    ap.add_argument("--no-tabs", action="store_true", help="keep space indentation")
    ap.add_argument("--debug", action="store_true", help="print diagnostics to stderr")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.tab_width is not None:
        overrides["tab_width"] = args.tab_width
    if args.no_align:
        overrides["align_columns"] = False
    if args.no_sort_uses:
        overrides["order_uses"] = False
    if args.no_tabs:
        overrides["convert_tabs"] = False
    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if args.debug:
        config.DEBUG = True

    paths = args.paths or [STDIN]
    if STDIN in paths and args.write:
        ap.error("cannot use -w with standard input")

    overrides = overrides_from_args(args)
    had_change = False
    had_error = False
    for arg in paths:
        if arg != STDIN and not Path(arg).exists():
            print(f"Path not found: {arg}", file=sys.stderr)
            return 2
        files = [None] if arg == STDIN else iter_files(Path(arg))
        for p in files:
            try:
                if p is None:
                    changed = process_stdin(overrides, args.check)
                else:
                    changed = process_file(p, overrides, args.check, args.write)
            except ConfigError as e:
                print(f"phpfmt: {e}", file=sys.stderr)
                return 1
            except (OSError, UnicodeDecodeError) as e:
                print(f"phpfmt: {e}", file=sys.stderr)
                had_error = True
                continue
            if changed and args.check:
                print(f"Would reformat: {'<stdin>' if p is None else p}")
            had_change = had_change or changed

    if had_error:
        return 1
    if args.check and had_change:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
