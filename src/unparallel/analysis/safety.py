"""
Safety Classification of Parallel Assignments.

Decides for each ``MultipleAssignment`` whether it is exempt from the rule or
can be rewritten sequentially. Only the latter produce a finding.

Exempt statements:

1.  **Single or splatted targets**: ``a, = foo``, ``first, *rest = list``.
2.  **Opaque sources**: anything that is not a literal array, including the
    result of a method call or a block (``a, b = foo()``), and literal arrays
    containing a splat (``a, b = 1, *rest``).
3.  **Arity mismatch**: ``a, b = 1, 2, 3``.
4.  **Circular dependencies**: swaps and rotations (``a, b = b, a``), which
    genuinely need parallel semantics.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from unparallel.analysis.dependencies import AssignmentPair, visible_locals
from unparallel.analysis.ordering import find_valid_order
from unparallel.syntax.nodes import ArrayLiteral, Block, MultipleAssignment, RubyNode, Send, Splat

logger = logging.getLogger(__name__)


@dataclass
class ParallelAssignmentFinding:
  """
  A parallel assignment that can be written sequentially.

  Attributes:
      node (MultipleAssignment): The offending statement.
      order (List[AssignmentPair]): A safe emission order of its pairs.
  """

  node: MultipleAssignment
  order: List[AssignmentPair]


def source_elements(value: RubyNode) -> List[RubyNode]:
  """
  Returns the right-hand side elements of a parallel assignment.

  A non-array source counts as a single element (``a, b = CONSTANT``).

  Args:
      value: The right-hand side node.

  Returns:
      List[RubyNode]: The elements.
  """
  if isinstance(value, ArrayLiteral):
    return list(value.elements)
  return [value]


class SafetyClassifier:
  """
  Classifies parallel assignments as exempt or rewritable.
  """

  def classify(self, node: MultipleAssignment) -> Optional[ParallelAssignmentFinding]:
    """
    Runs the exemption checks and, if none applies, the ordering.

    Args:
        node: The parallel assignment.

    Returns:
        Optional[ParallelAssignmentFinding]: The finding, or None if exempt.
    """
    if self.allowed_lhs(node.targets):
      logger.debug("Exempt (single or splatted target): %s", node.source)
      return None

    if self.allowed_rhs(node.value):
      logger.debug("Exempt (opaque source): %s", node.source)
      return None

    order = find_valid_order(node.targets, source_elements(node.value), visible_locals(node))
    if order is None:
      logger.debug("Exempt (arity mismatch or cyclic dependency): %s", node.source)
      return None

    return ParallelAssignmentFinding(node=node, order=order)

  def allowed_lhs(self, targets: List[RubyNode]) -> bool:
    """
    Checks the target list for forms the rule leaves alone.

    Args:
        targets: Left-hand side elements.

    Returns:
        bool: True for a single target or any splatted target.
    """
    return len(targets) == 1 or any(isinstance(t, Splat) for t in targets)

  def allowed_rhs(self, value: RubyNode) -> bool:
    """
    Checks the source for forms the rule leaves alone.

    Args:
        value: The right-hand side node.

    Returns:
        bool: True unless the source is a literal array without splats.
    """
    return (
      self.return_of_method_call(value)
      or not isinstance(value, ArrayLiteral)
      or any(isinstance(e, Splat) for e in value.elements)
    )

  @staticmethod
  def return_of_method_call(value: RubyNode) -> bool:
    """True if the source is produced by a method call or block."""
    return isinstance(value, (Send, Block))
