"""
Main Entry Point for the unparallel CLI.

This module handles argument parsing and dispatches to the command handlers
defined in `unparallel.cli.handlers`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.markup import escape

from unparallel import __version__
from unparallel.cli.handlers import handle_check
from unparallel.config import LintConfig
from unparallel.utils.console import log_error, set_verbose


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="unparallel: Style/ParallelAssignment checker for Ruby")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CHECK ---
  cmd_check = subparsers.add_parser("check", help="Report (and fix) parallel assignments in Ruby files")
  cmd_check.add_argument("paths", type=Path, nargs="+", help="Ruby files or directories")
  cmd_check.add_argument("--fix", action="store_true", help="Rewrite offending statements in place")
  cmd_check.add_argument("--json", action="store_true", dest="json_mode", help="Print offenses as JSON")
  cmd_check.add_argument(
    "--indent-width",
    type=int,
    default=None,
    help="Spaces per nesting level in corrections (default: from toml, else 2)",
  )
  cmd_check.add_argument("--exclude", nargs="*", default=None, help="Additional glob patterns to skip")
  cmd_check.add_argument("--verbose", action="store_true", help="Log why statements were exempted")

  args = parser.parse_args(argv)

  if args.command == "check":
    set_verbose(args.verbose)
    try:
      config = LintConfig.load(indentation_width=args.indent_width, exclude=args.exclude)
    except ValueError as e:
      log_error(escape(str(e)))
      return 2

    if not config.enabled:
      return 0
    return handle_check(args.paths, config, fix=args.fix, json_mode=args.json_mode)

  return 0


if __name__ == "__main__":
  sys.exit(main())
