"""
Style/ParallelAssignment Cop.

Flags parallel assignments such as ``a, b, c = 1, 2, 3`` that can be
written as plain sequential assignments, and builds the rewrite:

.. code-block:: ruby

    # bad
    a, b, c = 1, 2, 3

    # good
    a = 1
    b = 2
    c = 3

Swaps (``a, b = b, a``), splats, and assignments from method calls keep their
parallel form; see :mod:`unparallel.analysis.safety`.
"""

import logging
from typing import List, Optional

from rich.markup import escape

from unparallel.analysis.safety import ParallelAssignmentFinding, SafetyClassifier
from unparallel.correction.strategy import assignment_corrector
from unparallel.offense import Correction, Offense
from unparallel.syntax.nodes import MultipleAssignment, SyntaxTree
from unparallel.syntax.search import find_all
from unparallel.utils.console import log_warning

logger = logging.getLogger(__name__)


class ParallelAssignmentCop:
  """
  Reports rewritable parallel assignments of a syntax tree.

  Attributes:
      indentation_width (int): Spaces per nesting level in corrections.
      classifier (SafetyClassifier): Decides which statements are flagged.
  """

  COP_NAME = "Style/ParallelAssignment"
  MSG = "Do not use parallel assignment."

  def __init__(self, indentation_width: int = 2, classifier: Optional[SafetyClassifier] = None) -> None:
    """
    Initializes the cop.

    Args:
        indentation_width: Spaces per nesting level in corrections.
        classifier: Custom classifier, defaults to ``SafetyClassifier()``.
    """
    self.indentation_width = indentation_width
    self.classifier = classifier or SafetyClassifier()

  def investigate(self, tree: SyntaxTree, autocorrect: bool = False) -> List[Offense]:
    """
    Visits every parallel assignment of the tree.

    Args:
        tree: The parsed source.
        autocorrect: Attach corrections to the offenses.

    Returns:
        List[Offense]: Offenses in source order.
    """
    offenses: List[Offense] = []
    for node in find_all(tree.root, lambda n: isinstance(n, MultipleAssignment)):
      offense = self.on_masgn(node, autocorrect)
      if offense is not None:
        offenses.append(offense)
    return sorted(offenses, key=lambda o: o.start)

  def on_masgn(self, node: MultipleAssignment, autocorrect: bool = False) -> Optional[Offense]:
    """
    Checks a single parallel assignment.

    Args:
        node: The statement to check.
        autocorrect: Attach a correction to the offense.

    Returns:
        Optional[Offense]: The offense, or None if the statement is exempt.
    """
    finding = self.classifier.classify(node)
    if finding is None:
      return None

    span = node.span
    return Offense(
      cop_name=self.COP_NAME,
      message=self.MSG,
      path=span.buffer.name,
      line=span.line,
      column=span.column,
      start=span.start,
      end=span.end,
      source=span.source,
      correction=self.autocorrect(finding) if autocorrect else None,
    )

  def autocorrect(self, finding: ParallelAssignmentFinding) -> Optional[Correction]:
    """
    Builds the correction for a finding.

    Statements that cannot be split safely (used as a value, opening a
    heredoc) yield no correction; a context without a registered corrector
    is logged as a warning.

    Args:
        finding: The flagged statement and its ordering.

    Returns:
        Optional[Correction]: The text edit, or None.
    """
    try:
      corrector = assignment_corrector(finding.node, finding.order, self.indentation_width)
      if corrector is None:
        logger.debug("No safe rewrite for: %s", finding.node.source)
        return None
      return corrector.to_correction()
    except ValueError as e:
      log_warning(f"Cannot autocorrect {self.COP_NAME} at line {finding.node.span.line}: {escape(str(e))}")
      return None
