"""
Check Command Handler.

Runs the parallel assignment cop over Ruby files, reports the offenses and
optionally writes the corrected files back.
"""

import fnmatch
import json
from pathlib import Path
from typing import Dict, List, Sequence

from rich.markup import escape
from rich.table import Table

from unparallel.config import LintConfig
from unparallel.engine import LintResult, Linter
from unparallel.offense import Offense
from unparallel.utils.console import console, log_error, log_info, log_success

RUBY_PATTERNS = ("*.rb", "*.rake", "*.gemspec")


def is_excluded(path: Path, patterns: Sequence[str]) -> bool:
  """
  Checks a path against the configured exclude globs.

  Args:
      path: Candidate file.
      patterns: Glob patterns (matched against the full path and the name).

  Returns:
      bool: True if any pattern matches.
  """
  text = path.as_posix()
  return any(fnmatch.fnmatch(text, p) or fnmatch.fnmatch(path.name, p) for p in patterns)


def collect_files(paths: Sequence[Path], exclude: Sequence[str]) -> List[Path]:
  """
  Expands input paths into the Ruby files to check.

  Files given explicitly are always checked unless excluded; directories are
  searched recursively for ``*.rb``, ``*.rake`` and ``*.gemspec``.

  Args:
      paths: Files or directories from the command line.
      exclude: Glob patterns to skip.

  Returns:
      List[Path]: Unique files in a stable order.
  """
  found: Dict[Path, None] = {}
  for path in paths:
    if path.is_file():
      candidates = [path]
    else:
      candidates = sorted({f for pattern in RUBY_PATTERNS for f in path.rglob(pattern) if f.is_file()})
    for candidate in candidates:
      if not is_excluded(candidate, exclude):
        found[candidate] = None
  return list(found)


def handle_check(paths: List[Path], config: LintConfig, fix: bool = False, json_mode: bool = False) -> int:
  """
  Lints files and prints a report.

  Args:
      paths: Input files or directories.
      config: Resolved configuration.
      fix: Write corrected code back to the files.
      json_mode: Print a JSON document to stdout instead of a table.

  Returns:
      int: Exit code (1 if offenses remain uncorrected or a file failed, 0 otherwise).
  """
  missing = [p for p in paths if not p.exists()]
  for p in missing:
    log_error(f"Path not found: {escape(str(p))}")
  if missing:
    return 1

  files = collect_files(paths, config.exclude)
  linter = Linter(config)

  if not json_mode:
    log_info(f"Checking {len(files)} file(s)...")

  results: Dict[Path, LintResult] = {}
  failed = False
  for f in files:
    try:
      code = f.read_text("utf-8")
    except (OSError, UnicodeDecodeError) as e:
      log_error(f"Cannot read {escape(str(f))}: {escape(str(e))}")
      failed = True
      continue

    result = linter.run(code, autocorrect=fix, name=str(f))
    results[f] = result
    if not result.success:
      for error in result.errors:
        log_error(escape(error))
      failed = True

    if fix and result.success and result.code != code:
      f.write_text(result.code, encoding="utf-8")

  remaining = sum(1 for r in results.values() for o in r.offenses if not _resolved(o, r, fix))
  offense_count = sum(len(r.offenses) for r in results.values())

  if json_mode:
    payload = [
      {
        "path": str(f),
        "success": r.success,
        "corrected": r.corrected,
        "offenses": [{**o.model_dump(exclude={"correction"}), "correctable": o.correctable} for o in r.offenses],
      }
      for f, r in results.items()
    ]
    print(json.dumps(payload, indent=2))
    return 1 if failed or remaining else 0

  if offense_count:
    console.print(_offense_table(results, fix))

  if fix and offense_count:
    corrected = sum(r.corrected for r in results.values())
    log_success(f"Corrected {corrected} of {offense_count} offense(s).")
  elif not offense_count and not failed:
    log_success(f"No offenses in {len(results)} file(s).")

  return 1 if failed or remaining else 0


def _offense_table(results: Dict[Path, LintResult], fix: bool) -> Table:
  table = Table(title=f"Offenses ({sum(len(r.offenses) for r in results.values())})")
  table.add_column("Location", style="bold blue")
  table.add_column("Cop", style="cyan")
  table.add_column("Source", style="bold magenta")
  table.add_column("Status", style="dim")

  for f, result in results.items():
    for offense in result.offenses:
      if _resolved(offense, result, fix):
        status = "corrected"
      elif offense.correctable:
        status = "correctable"
      else:
        status = "manual"
      table.add_row(
        escape(f"{f}:{offense.line}:{offense.column + 1}"),
        offense.cop_name,
        escape(offense.source.splitlines()[0] if offense.source else ""),
        status,
      )
  return table


def _resolved(offense: Offense, result: LintResult, fix: bool) -> bool:
  return fix and result.success and result.corrected > 0 and offense.correctable
