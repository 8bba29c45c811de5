"""
unparallel Package.

A Ruby lint rule (``Style/ParallelAssignment``) that flags parallel
assignments which can be written as sequential assignments, and rewrites
them while preserving behaviour.

Usage
-----

Simple String Check
^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import unparallel
    offenses = unparallel.lint("a, b, c = 1, 2, 3\n")
    print(offenses[0].message)
    # Do not use parallel assignment.

    print(unparallel.autocorrect("a, b = 1, a\n"))
    # b = a
    # a = 1

Advanced Usage (Linter)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from unparallel import LintConfig, Linter

    linter = Linter(LintConfig(indentation_width=4))
    res = linter.run(code, autocorrect=True)

    if res.success:
        print(res.code)
    else:
        print(f"Errors: {res.errors}")
"""

from typing import List, Optional

from unparallel.config import LintConfig
from unparallel.engine import Linter, LintResult
from unparallel.offense import Correction, Offense

__version__ = "0.1.0"


def lint(code: str, config: Optional[LintConfig] = None) -> List[Offense]:
  """
  Reports the parallel assignment offenses of a Ruby source string.

  Args:
      code (str): The Ruby source.
      config (LintConfig, optional): Settings; defaults are used if None.

  Returns:
      List[Offense]: Offenses in source order, with corrections attached where possible.

  Raises:
      ValueError: If the code has syntax errors.
  """
  result = Linter(config).run(code)
  if not result.success:
    raise ValueError("Lint failed:\n" + "\n".join(result.errors))
  return result.offenses


def autocorrect(code: str, config: Optional[LintConfig] = None) -> str:
  """
  Rewrites every correctable parallel assignment of a Ruby source string.

  Args:
      code (str): The Ruby source.
      config (LintConfig, optional): Settings; defaults are used if None.

  Returns:
      str: The corrected source.

  Raises:
      ValueError: If the code has syntax errors.
  """
  result = Linter(config).run(code, autocorrect=True)
  if not result.success:
    raise ValueError("Autocorrect failed:\n" + "\n".join(result.errors))
  return result.code


__all__ = [
  "Correction",
  "LintConfig",
  "LintResult",
  "Linter",
  "Offense",
  "autocorrect",
  "lint",
  "__version__",
]
