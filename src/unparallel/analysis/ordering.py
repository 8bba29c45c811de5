"""
Topological Ordering of Assignment Pairs.

Arranges the pairs of a parallel assignment so that no pair's source reads a
location that an earlier emitted pair has already overwritten.

The sort is a depth-first search that visits pairs, and the readers of each
pair, in original left-to-right order and emits a pair once all of its
readers are emitted (post-order). Independent pairs therefore keep their
original order, and the result is identical on every run.
"""

import logging
from typing import AbstractSet, List, Optional, Sequence

from unparallel.analysis.dependencies import (
  AssignmentPair,
  DependencyGraph,
  build_dependency_graph,
  build_pairs,
)
from unparallel.syntax.nodes import RubyNode

logger = logging.getLogger(__name__)

_UNVISITED, _VISITING, _DONE = 0, 1, 2


class CyclicDependencyError(ValueError):
  """Raised when the pairs depend on each other circularly (e.g. a swap)."""


def topological_order(graph: DependencyGraph) -> List[AssignmentPair]:
  """
  Sorts the pairs of a dependency graph.

  A pair reading its own target (``a = a + 1``) is not a cycle.

  Args:
      graph: The reader relation over the pairs.

  Returns:
      List[AssignmentPair]: Pairs in emission order.

  Raises:
      CyclicDependencyError: If two or more pairs depend on each other.
  """
  state = [_UNVISITED] * len(graph.pairs)
  order: List[AssignmentPair] = []

  def visit(index: int) -> None:
    state[index] = _VISITING
    for reader in graph.readers_of(index):
      if reader == index:
        continue
      if state[reader] == _VISITING:
        raise CyclicDependencyError(f"Assignments {reader} and {index} depend on each other")
      if state[reader] == _UNVISITED:
        visit(reader)
    state[index] = _DONE
    order.append(graph.pairs[index])

  for pair in graph.pairs:
    if state[pair.index] == _UNVISITED:
      visit(pair.index)

  return order


def find_valid_order(
  targets: Sequence[RubyNode], sources: Sequence[RubyNode], known_locals: AbstractSet[str] = frozenset()
) -> Optional[List[AssignmentPair]]:
  """
  Computes a safe sequential order for a parallel assignment.

  Args:
      targets: Left-hand side elements.
      sources: Right-hand side elements.
      known_locals: Local variables already assigned before the statement.

  Returns:
      Optional[List[AssignmentPair]]: The ordering, or None when the counts
      differ or the dependencies are cyclic.
  """
  if len(targets) != len(sources):
    return None

  graph = build_dependency_graph(build_pairs(targets, sources, known_locals))
  try:
    return topological_order(graph)
  except CyclicDependencyError as e:
    logger.debug("No sequential order: %s", e)
    return None
