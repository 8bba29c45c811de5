"""
Lint Configuration.

Settings are read from the ``[tool.unparallel]`` section of the nearest
``pyproject.toml`` and overridden by explicit (CLI) arguments.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

CONFIG_SECTION = "unparallel"


class LintConfig(BaseModel):
  """
  Configuration of the parallel assignment cop and the lint engine.
  """

  enabled: bool = Field(True, description="Run the cop at all.")
  indentation_width: int = Field(2, ge=0, description="Spaces added for nested lines in corrections.")
  max_correction_passes: int = Field(10, ge=1, description="Upper bound of autocorrection passes.")
  exclude: List[str] = Field(default_factory=list, description="Glob patterns of files the CLI skips.")

  @classmethod
  def load(
    cls,
    indentation_width: Optional[int] = None,
    max_correction_passes: Optional[int] = None,
    exclude: Optional[List[str]] = None,
    search_path: Optional[Path] = None,
  ) -> "LintConfig":
    """
    Loads configuration from pyproject.toml and applies overrides.

    Args:
        indentation_width (Optional[int]): Override for the indentation width.
        max_correction_passes (Optional[int]): Override for the pass limit.
        exclude (Optional[List[str]]): Extra exclude patterns (appended).
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        LintConfig: The resolved configuration.

    Raises:
        ValueError: If the file cannot be read or a value is invalid.
    """
    settings, _ = _load_toml_settings(search_path or Path.cwd())

    if indentation_width is not None:
      settings["indentation_width"] = indentation_width
    if max_correction_passes is not None:
      settings["max_correction_passes"] = max_correction_passes
    if exclude:
      settings["exclude"] = list(settings.get("exclude", [])) + list(exclude)

    try:
      return cls.model_validate(settings)
    except ValidationError as e:
      raise ValueError(f"Invalid [tool.{CONFIG_SECTION}] configuration: {e}")


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches ``start_path`` and its parents for 'pyproject.toml'.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The section dict and the directory it was found in.

  Raises:
      ValueError: If the file exists but is not valid TOML.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError) as e:
        raise ValueError(f"Cannot read {toml_path}: {e}")

      return dict(data.get("tool", {}).get(CONFIG_SECTION, {})), parent

  return {}, None
