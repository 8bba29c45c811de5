"""
Subtree Search Helpers.

Predicate-driven searches over the syntax model. All searches include the
start node itself and descend through every child, so "contains" means
anywhere in the subtree, not only among direct children.
"""

from typing import Callable, Iterator, List, Optional

from unparallel.syntax.nodes import Constant, RubyNode, Send, Variable

NodePredicate = Callable[[RubyNode], bool]


def walk(node: RubyNode) -> Iterator[RubyNode]:
  """
  Yields ``node`` and all of its descendants in pre-order.

  Args:
      node: The subtree root.

  Yields:
      RubyNode: Each node of the subtree, parents before children.
  """
  stack = [node]
  while stack:
    current = stack.pop()
    yield current
    stack.extend(reversed(current.children()))


def find_all(node: RubyNode, predicate: NodePredicate) -> List[RubyNode]:
  """
  Collects every node of the subtree matching ``predicate``.

  Args:
      node: The subtree root.
      predicate: Test applied to each node.

  Returns:
      List[RubyNode]: Matches in pre-order.
  """
  return [n for n in walk(node) if predicate(n)]


def contains(node: RubyNode, predicate: NodePredicate) -> bool:
  """
  Checks whether any node of the subtree matches ``predicate``.

  Args:
      node: The subtree root.
      predicate: Test applied to each node.

  Returns:
      bool: True on the first match.
  """
  return any(predicate(n) for n in walk(node))


def assigned_name(target: RubyNode) -> Optional[str]:
  """
  Returns the name written by a variable or constant target.

  Setter calls and nested targets have no plain name and yield None.

  Args:
      target: A left-hand side element.

  Returns:
      Optional[str]: ``a``, ``@a``, ``A`` ... or None.
  """
  if isinstance(target, (Variable, Constant)):
    return target.name
  return None


def reads_name(node: RubyNode, name: str) -> bool:
  """
  Checks whether the subtree reads a variable or constant called ``name``.

  Constants match on their final segment regardless of scope, so a write
  to ``Foo::A`` is seen by a read of ``A``.

  Args:
      node: The expression to search.
      name: Variable name including sigil, or constant name.

  Returns:
      bool: True if a matching read exists.
  """

  def _is_read(n: RubyNode) -> bool:
    return isinstance(n, (Variable, Constant)) and n.name == name

  return contains(node, _is_read)


def matching_calls(node: RubyNode, receiver: Optional[RubyNode], method: str) -> Iterator[List[RubyNode]]:
  """
  Finds calls of ``method`` on a receiver structurally equal to ``receiver``.

  Args:
      node: The expression to search.
      receiver: The receiver to match (compared structurally).
      method: The method name to match.

  Yields:
      List[RubyNode]: The argument list of each matching call.
  """
  for n in walk(node):
    if isinstance(n, Send) and n.method == method and n.receiver == receiver:
      yield n.arguments
