"""
Lint Engine.

Runs the parallel assignment cop over one source text and, on request,
applies its corrections until the text is stable.

Pipeline:

1.  **Parse** the text with the tree-sitter frontend. Text with syntax errors
    is reported as a failed run; nothing is rewritten.
2.  **Investigate** the tree with ``ParallelAssignmentCop``. The offenses of
    this first pass are the ones reported.
3.  **Correct** (optional): apply the non-overlapping corrections, re-parse
    and investigate again. Nested offenses (e.g. a parallel assignment inside
    a rewritten block) are picked up by later passes.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from unparallel.config import LintConfig
from unparallel.cops.parallel_assignment import ParallelAssignmentCop
from unparallel.correction.patcher import apply_corrections, select_applicable
from unparallel.offense import Offense
from unparallel.syntax.nodes import SyntaxTree
from unparallel.syntax.parser import RubyParser, parse_ruby

logger = logging.getLogger(__name__)


class LintResult(BaseModel):
  """
  Structured result of linting a single source text.
  """

  code: str = Field(default="", description="The final source code (corrected if requested).")
  offenses: List[Offense] = Field(default_factory=list, description="Offenses found in the original code.")
  errors: List[str] = Field(default_factory=list, description="A list of error messages.")
  success: bool = Field(default=True, description="False if the code could not be analysed.")
  corrected: int = Field(default=0, description="Number of corrections applied.")

  @property
  def has_errors(self) -> bool:
    """
    Check if the result contains any error messages.

    Returns:
        True if one or more errors are present.
    """
    return len(self.errors) > 0


class Linter:
  """
  Runs the cop over source texts.

  Attributes:
      config (LintConfig): Active configuration.
      parser (Optional[RubyParser]): A dedicated frontend, or None for the
          shared module-level one.
      cop (ParallelAssignmentCop): The rule.
  """

  def __init__(self, config: Optional[LintConfig] = None, parser: Optional[RubyParser] = None) -> None:
    """
    Initializes the Linter.

    Args:
        config: Configuration; defaults to ``LintConfig()``.
        parser: Frontend instance; the shared parser of
            :func:`unparallel.syntax.parser.parse_ruby` is used if None.
    """
    self.config = config or LintConfig()
    self.parser = parser
    self.cop = ParallelAssignmentCop(indentation_width=self.config.indentation_width)

  def run(self, code: str, autocorrect: bool = False, name: str = "(string)") -> LintResult:
    """
    Lints a source text.

    Args:
        code (str): The Ruby source.
        autocorrect (bool): Apply corrections until stable.
        name (str): Display name used in offenses and messages.

    Returns:
        LintResult: Offenses of the original code and the final code.
    """
    if not self.config.enabled:
      return LintResult(code=code)

    tree = self._parse(code, name)
    if tree.has_errors:
      return LintResult(code=code, errors=[f"Syntax error in {name}"], success=False)

    offenses = self.cop.investigate(tree, autocorrect=True)
    result = LintResult(code=code, offenses=offenses)
    if not autocorrect or not offenses:
      return result

    current = code
    corrections = [o.correction for o in offenses if o.correction is not None]
    for pass_number in range(1, self.config.max_correction_passes + 1):
      if not corrections:
        break

      patched = apply_corrections(current, corrections)
      if patched == current:
        break

      reparsed = self._parse(patched, name)
      if reparsed.has_errors:
        result.errors.append(f"Correction pass {pass_number} produced invalid code in {name}")
        result.success = False
        break

      result.corrected += len(select_applicable(corrections))
      current = patched
      logger.debug("Correction pass %d applied to %s", pass_number, name)
      corrections = [o.correction for o in self.cop.investigate(reparsed, autocorrect=True) if o.correction is not None]

    result.code = current
    return result

  def _parse(self, code: str, name: str) -> SyntaxTree:
    if self.parser is not None:
      return self.parser.parse(code, name)
    return parse_ruby(code, name)
