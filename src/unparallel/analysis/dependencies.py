"""
Dependency Analysis for Parallel Assignment.

Turns the (target, source) pairs of a parallel assignment into a graph that
records, for every pair, which other pairs read the location it writes.

A pair *reads* another pair's location when:

1.  **Variables / constants**: the other target is ``a``, ``@a``, ``@@a``,
    ``$a`` or a constant, and this source reads the same name anywhere in
    its subtree.
2.  **Setters**: the other target is ``recv.attr=`` or ``recv[args]=`` and
    this source calls ``recv.attr`` or ``recv[args]`` (same receiver, same
    index arguments) anywhere in its subtree.
3.  **Nested targets**: the other target is ``(x, y)`` or ``*rest`` and this
    source reads any location written inside it.

Every reader must be emitted before the pair it reads from, otherwise the
sequential rewrite would observe the new value instead of the old one.
"""

from dataclasses import dataclass, field
from typing import AbstractSet, Dict, List, Sequence, Set

from unparallel.enums import VariableKind
from unparallel.syntax.nodes import (
  Assignment,
  Block,
  DestructuredTarget,
  MethodDefinition,
  MultipleAssignment,
  Other,
  Program,
  RubyNode,
  SelfRef,
  Send,
  Splat,
  Variable,
)
from unparallel.syntax.search import assigned_name, matching_calls, reads_name


@dataclass
class AssignmentPair:
  """
  One (target, source) binding of a parallel assignment.

  Attributes:
      index (int): Position in the original left-to-right order.
      target (RubyNode): The left-hand side element.
      source (RubyNode): The right-hand side element as written.
      analyzed_source (RubyNode): The source used for dependency checks,
          with implicit-self getters made explicit.
  """

  index: int
  target: RubyNode
  source: RubyNode
  analyzed_source: RubyNode


@dataclass
class DependencyGraph:
  """
  Reader relation between assignment pairs.

  Attributes:
      pairs (List[AssignmentPair]): The pairs in original order.
      readers (Dict[int, List[int]]): For each pair index, the indices of
          pairs whose source reads the location that pair writes, in
          left-to-right order. May include the pair itself.
  """

  pairs: List[AssignmentPair]
  readers: Dict[int, List[int]] = field(default_factory=dict)

  def readers_of(self, index: int) -> List[int]:
    """
    Returns the pairs that must be emitted before pair ``index``.

    Args:
        index: The writing pair.

    Returns:
        List[int]: Reader indices, possibly including ``index`` itself.
    """
    return self.readers.get(index, [])


def local_target_names(targets: Sequence[RubyNode]) -> Set[str]:
  """
  Collects the local variable names declared by a target list, including
  those inside nested ``(x, y)`` and ``*rest`` targets.

  Args:
      targets: Left-hand side elements.

  Returns:
      Set[str]: Names of local variable targets.
  """
  names: Set[str] = set()
  for target in targets:
    if isinstance(target, Variable) and target.kind == VariableKind.LOCAL:
      names.add(target.name)
    elif isinstance(target, DestructuredTarget):
      names |= local_target_names(target.targets)
    elif isinstance(target, Splat) and target.value is not None:
      names |= local_target_names([target.value])
  return names


_SCOPE_KINDS = frozenset({"class", "module", "singleton_class"})
_BLOCK_KINDS = frozenset({"block", "do_block", "lambda"})


def _opens_scope(node: RubyNode) -> bool:
  return isinstance(node, (Program, MethodDefinition)) or (isinstance(node, Other) and node.kind in _SCOPE_KINDS)


def _is_block(node: RubyNode) -> bool:
  return isinstance(node, Block) or (isinstance(node, Other) and node.kind in _BLOCK_KINDS)


def visible_locals(node: RubyNode) -> Set[str]:
  """
  Collects the local variables assigned before ``node`` in its scope.

  The scope is the enclosing method, class body or file. Locals assigned
  inside a block are only visible when ``node`` sits in that same block.

  Args:
      node: A located statement with parent links.

  Returns:
      Set[str]: Local variable names Ruby already knows at ``node``.
  """
  if node.span is None:
    return set()

  enclosing = []
  scope = node.parent
  while scope is not None and not _opens_scope(scope):
    enclosing.append(scope)
    scope = scope.parent
  if scope is None:
    return set()

  start = node.span.start
  open_blocks = {id(n) for n in enclosing if _is_block(n)}
  names: Set[str] = set()
  stack = list(scope.children())
  while stack:
    current = stack.pop()
    if current.span is None or current.span.start >= start:
      continue
    if _opens_scope(current) or (_is_block(current) and id(current) not in open_blocks):
      continue
    if current.span.end <= start:
      if isinstance(current, Assignment):
        names |= local_target_names([current.target])
      elif isinstance(current, MultipleAssignment):
        names |= local_target_names(current.targets)
    stack.extend(current.children())
  return names


def add_self_to_getter(source: RubyNode, local_names: Set[str]) -> RubyNode:
  """
  Rewrites an implicit-self getter into an explicit ``self.name`` call.

  Lets ``self.a, self.b = b, a`` be analysed like
  ``self.a, self.b = self.b, self.a``. Applies to a receiverless call without
  arguments and to a bare identifier that is not a known local: neither one
  of the statement's own local targets nor a local assigned earlier in the
  same scope.

  Args:
      source: A top-level right-hand side element.
      local_names: Local variable names in scope for the statement.

  Returns:
      RubyNode: The normalized node, or ``source`` unchanged.
  """
  if isinstance(source, Send) and source.receiver is None and not source.arguments:
    return Send(SelfRef(), source.method, [])
  if isinstance(source, Variable) and source.kind == VariableKind.LOCAL and source.name not in local_names:
    return Send(SelfRef(), source.name, [])
  return source


def build_pairs(
  targets: Sequence[RubyNode], sources: Sequence[RubyNode], known_locals: AbstractSet[str] = frozenset()
) -> List[AssignmentPair]:
  """
  Zips targets and sources positionally.

  Args:
      targets: Left-hand side elements.
      sources: Right-hand side elements; must have the same length.
      known_locals: Local variables already assigned before the statement.

  Returns:
      List[AssignmentPair]: The pairs in original order.

  Raises:
      ValueError: If the lengths differ.
  """
  if len(targets) != len(sources):
    raise ValueError(f"Cannot pair {len(targets)} targets with {len(sources)} sources")

  local_names = local_target_names(targets) | set(known_locals)
  return [
    AssignmentPair(index, target, source, add_self_to_getter(source, local_names))
    for index, (target, source) in enumerate(zip(targets, sources))
  ]


def accesses(source: RubyNode, setter: Send) -> bool:
  """
  Checks whether ``source`` reads the location written by ``setter``.

  Args:
      source: The expression to search.
      setter: An assignment-style call such as ``obj.attr=`` or ``ary[i]=``.

  Returns:
      bool: True if the matching getter is called on the same receiver.
  """
  if setter.method == "[]=":
    return any(args == setter.arguments for args in matching_calls(source, setter.receiver, "[]"))
  return any(True for _ in matching_calls(source, setter.receiver, setter.getter_name))


def reads_target(source: RubyNode, target: RubyNode) -> bool:
  """
  Checks whether ``source`` depends on the previous value of ``target``.

  Args:
      source: A right-hand side expression.
      target: A left-hand side element.

  Returns:
      bool: True if rewriting ``target`` first would change ``source``.
  """
  name = assigned_name(target)
  if name is not None:
    return reads_name(source, name)
  if isinstance(target, Send) and target.is_setter:
    return accesses(source, target)
  if isinstance(target, DestructuredTarget):
    return any(reads_target(source, t) for t in target.targets)
  if isinstance(target, Splat) and target.value is not None:
    return reads_target(source, target.value)
  return False


def build_dependency_graph(pairs: List[AssignmentPair]) -> DependencyGraph:
  """
  Computes the reader relation for a list of pairs.

  Args:
      pairs: Pairs built by ``build_pairs``.

  Returns:
      DependencyGraph: The graph over pair indices.
  """
  graph = DependencyGraph(pairs=pairs)
  for writer in pairs:
    graph.readers[writer.index] = [
      reader.index for reader in pairs if reads_target(reader.analyzed_source, writer.target)
    ]
  return graph
