"""
Rewrite Strategy Selection.

Picks how a flagged parallel assignment is rewritten from its immediate
syntactic context, and maps each strategy to its corrector class.
"""

from typing import Dict, List, Optional, Type

from unparallel.analysis.dependencies import AssignmentPair
from unparallel.correction.correctors import GenericCorrector, ModifierCorrector, RescueCorrector
from unparallel.enums import CorrectionStrategy
from unparallel.syntax.nodes import (
  Begin,
  Block,
  Conditional,
  Ensure,
  Literal,
  Loop,
  MethodDefinition,
  MultipleAssignment,
  Other,
  Program,
  RescueClause,
  RescueModifier,
  RubyNode,
)
from unparallel.syntax.search import contains

CORRECTORS: Dict[CorrectionStrategy, Type[GenericCorrector]] = {
  CorrectionStrategy.GENERIC: GenericCorrector,
  CorrectionStrategy.MODIFIER: ModifierCorrector,
  CorrectionStrategy.RESCUE: RescueCorrector,
}


def modifier_statement(node: MultipleAssignment) -> bool:
  """True if the node is the body of an ``if``/``unless``/``while``/``until`` modifier."""
  parent = node.parent
  return isinstance(parent, (Conditional, Loop)) and parent.modifier and any(stmt is node for stmt in parent.body)


def rescue_modifier(node: MultipleAssignment) -> bool:
  """
  Checks whether the node is guarded by a rescue modifier.

  A rescue modifier sitting directly inside an explicit ``begin`` or an
  ``ensure`` clause does not count.

  Args:
      node: The flagged statement.

  Returns:
      bool: True if the rescue strategy applies.
  """
  parent = node.parent
  return (
    isinstance(parent, RescueModifier)
    and parent.body is node
    and not isinstance(parent.parent, (Begin, Ensure))
  )


# Node kinds without a model class of their own whose contents are statements.
_STATEMENT_CONTAINERS = frozenset(
  {"else", "class", "module", "singleton_class", "when", "in", "block", "do_block", "begin_block", "end_block"}
)


def statement_lists(parent: Optional[RubyNode]) -> List[List[RubyNode]]:
  """Returns the statement sequences held directly by ``parent``."""
  if isinstance(parent, (Program, Block, Ensure, RescueClause)):
    return [parent.body]
  if isinstance(parent, (MethodDefinition, Begin)):
    return [parent.body, parent.else_body]
  if isinstance(parent, (Conditional, Loop)) and not parent.modifier:
    return [parent.body]
  if isinstance(parent, Other) and parent.kind in _STATEMENT_CONTAINERS:
    return [parent.contents]
  return []


def replaced_statement(node: MultipleAssignment) -> RubyNode:
  """Returns the statement a correction of ``node`` replaces: the node or its modifier."""
  parent = node.parent
  if modifier_statement(node) or (isinstance(parent, RescueModifier) and parent.body is node):
    return parent
  return node


def statement_context(node: MultipleAssignment) -> bool:
  """
  Checks whether the rewritten statement stands in a statement list.

  A parallel assignment used as a value (``x = (a, b = 1, 2)``,
  ``foo(a, b = 1, 2)``) evaluates to its right-hand side array; a sequence
  of assignments would evaluate to the last value instead.

  Args:
      node: The flagged statement.

  Returns:
      bool: True if splitting the statement keeps the surrounding code valid.
  """
  statement = replaced_statement(node)
  return any(s is statement for body in statement_lists(statement.parent) for s in body)


def has_heredoc(node: MultipleAssignment) -> bool:
  """True if a source opens a heredoc, whose body follows the statement's line."""
  return contains(node.value, lambda n: isinstance(n, Literal) and n.source.startswith("<<"))


def select_strategy(node: MultipleAssignment) -> CorrectionStrategy:
  """
  Selects the rewrite strategy for a flagged statement.

  Args:
      node: The flagged statement (with its parent link set).

  Returns:
      CorrectionStrategy: MODIFIER, RESCUE or GENERIC.
  """
  if modifier_statement(node):
    return CorrectionStrategy.MODIFIER
  if rescue_modifier(node):
    return CorrectionStrategy.RESCUE
  return CorrectionStrategy.GENERIC


def build_corrector(
  strategy: CorrectionStrategy,
  node: MultipleAssignment,
  order: List[AssignmentPair],
  indentation_width: int = 2,
) -> GenericCorrector:
  """
  Instantiates the corrector registered for ``strategy``.

  Args:
      strategy: The selected strategy.
      node: The flagged statement.
      order: Pairs in emission order.
      indentation_width: Spaces per nesting level.

  Returns:
      GenericCorrector: The corrector instance.

  Raises:
      ValueError: If no corrector is registered for the strategy.
  """
  corrector_cls = CORRECTORS.get(strategy)
  if corrector_cls is None:
    raise ValueError(f"No corrector registered for strategy '{strategy}'")
  return corrector_cls(node, order, indentation_width)


def assignment_corrector(
  node: MultipleAssignment, order: List[AssignmentPair], indentation_width: int = 2
) -> Optional[GenericCorrector]:
  """
  Selects the strategy for ``node`` and builds its corrector.

  Statements whose value is used and statements opening a heredoc cannot be
  split into lines without changing the program, and get no corrector.

  Args:
      node: The flagged statement.
      order: Pairs in emission order.
      indentation_width: Spaces per nesting level.

  Returns:
      Optional[GenericCorrector]: The corrector instance, or None.
  """
  if not statement_context(node) or has_heredoc(node):
    return None
  return build_corrector(select_strategy(node), node, order, indentation_width)
