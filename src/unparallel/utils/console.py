"""
Report Output and Logging.

Diagnostics go through the ``unparallel`` logger, rendered by ``rich``. Module
loggers (``unparallel.analysis.safety`` ...) propagate to it, so
``set_verbose(True)`` reveals why individual statements were exempted.

The offense table and the log records share one console. ``console`` is a
proxy over it so callers keep a stable import while tests swap in a
``Console(file=io.StringIO())``.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

logger = logging.getLogger("unparallel")


def _default_console() -> Console:
  return Console(theme=Theme({"logging.level.success": "green"}))


class _ConsoleProxy:
  """
  Forwards printing to the active console and keeps the log handler on it.

  Attributes:
      backend (Console): The active Rich Console.
  """

  def __init__(self) -> None:
    self.backend = _default_console()
    self._attach_handler()

  def set_backend(self, new_console: Console) -> None:
    """Points report and log output at ``new_console``."""
    self.backend = new_console
    self._attach_handler()

  def print(self, *args: Any, **kwargs: Any) -> None:
    self.backend.print(*args, **kwargs)

  def _attach_handler(self) -> None:
    for handler in list(logger.handlers):
      if isinstance(handler, RichHandler):
        logger.removeHandler(handler)
    # Markup is opt-in per record: debug messages quote Ruby such as `a[i]`.
    logger.addHandler(RichHandler(console=self.backend, show_time=False, show_path=False, markup=False))


console = _ConsoleProxy()
logger.setLevel(logging.INFO)


def set_console(new_console: Console) -> None:
  """
  Injects a console for the offense report and log records.

  Args:
      new_console (Console): e.g. ``Console(file=io.StringIO())`` in tests.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Restores standard output and the INFO level."""
  console.set_backend(_default_console())
  logger.setLevel(logging.INFO)


def set_verbose(verbose: bool) -> None:
  """Switches the ``unparallel`` logger between INFO and DEBUG."""
  logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def log_info(msg: str) -> None:
  """Logs a progress line; ``msg`` may use rich markup."""
  logger.info(msg, extra={"markup": True})


def log_success(msg: str) -> None:
  """Logs a summary line at the SUCCESS level."""
  logger.log(SUCCESS_LEVEL_NUM, msg, extra={"markup": True})


def log_warning(msg: str) -> None:
  """
  Logs a warning, e.g. an offense that could not be corrected.

  Args:
      msg (str): Rich markup; escape interpolated source text.
  """
  logger.warning(msg, extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs an error such as an unreadable file or a syntax error.

  Args:
      msg (str): Rich markup; escape interpolated source text.
  """
  logger.error(msg, extra={"markup": True})
