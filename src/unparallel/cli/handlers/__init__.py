from .check import collect_files, handle_check, is_excluded

__all__ = [
  "collect_files",
  "handle_check",
  "is_excluded",
]
