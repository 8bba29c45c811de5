"""
Ruby Frontend.

Parses Ruby source with tree-sitter and converts the concrete syntax tree
into the node model of :mod:`unparallel.syntax.nodes`.

Conversion rules worth knowing:

1.  **Transparent wrappers**: ``body_statement``, ``block_body``, ``then`` and
    ``do`` nodes are dissolved; their statements belong directly to the
    enclosing method, block, conditional or loop.
2.  **Assignment targets**: on the left-hand side ``obj.attr`` becomes the
    setter ``Send(obj, "attr=")`` and ``ary[i]`` becomes ``Send(ary, "[]=", [i])``.
3.  **Right-hand lists**: the bare ``1, 2`` after ``=`` becomes an unbracketed
    ``ArrayLiteral``, just like ``[1, 2]``, ``%w(a b)`` and ``%i(a b)``.
4.  **Calls with blocks** become ``Block`` nodes wrapping the ``Send``.
5.  **Trailing rescue**: in ``a, b = 1, 2 rescue foo`` the rescue modifier
    always guards the whole parallel assignment.
6.  Everything else is preserved as ``Other`` so subtree searches still see
    every variable read.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

import tree_sitter_ruby
from tree_sitter import Language, Node, Parser

from unparallel.enums import LiteralKind, VariableKind
from unparallel.syntax.nodes import (
  ArrayLiteral,
  Assignment,
  Begin,
  Block,
  Conditional,
  Constant,
  DestructuredTarget,
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
  SelfRef,
  Send,
  SourceBuffer,
  Span,
  Splat,
  SyntaxTree,
  Variable,
  link_parents,
)

logger = logging.getLogger(__name__)

RUBY_LANGUAGE = Language(tree_sitter_ruby.language())

_TRANSPARENT = frozenset({"body_statement", "block_body", "then", "do"})

_VARIABLE_KINDS: Dict[str, VariableKind] = {
  "identifier": VariableKind.LOCAL,
  "instance_variable": VariableKind.INSTANCE,
  "class_variable": VariableKind.CLASS,
  "global_variable": VariableKind.GLOBAL,
}

_LITERAL_KINDS: Dict[str, LiteralKind] = {
  "integer": LiteralKind.INTEGER,
  "float": LiteralKind.FLOAT,
  "complex": LiteralKind.OTHER,
  "rational": LiteralKind.OTHER,
  "nil": LiteralKind.NIL,
  "true": LiteralKind.TRUE,
  "false": LiteralKind.FALSE,
  "string": LiteralKind.STRING,
  "chained_string": LiteralKind.STRING,
  "character": LiteralKind.OTHER,
  "regex": LiteralKind.OTHER,
  "subshell": LiteralKind.OTHER,
  "heredoc_beginning": LiteralKind.OTHER,
  "simple_symbol": LiteralKind.SYMBOL,
  "delimited_symbol": LiteralKind.SYMBOL,
  "hash_key_symbol": LiteralKind.SYMBOL,
}


class _TreeConverter:
  """
  Converts one tree-sitter tree into model nodes.

  Holds the per-parse SourceBuffer so spans and token text can be resolved.
  """

  def __init__(self, buffer: SourceBuffer) -> None:
    self.buffer = buffer
    self._handlers: Dict[str, Callable[[Node], RubyNode]] = {
      "program": self._program,
      "self": lambda ts: SelfRef(),
      "constant": lambda ts: Constant(self._text(ts)),
      "scope_resolution": self._scope_resolution,
      "bare_string": lambda ts: self._literal(ts, LiteralKind.STRING, delimited=False),
      "bare_symbol": lambda ts: self._literal(ts, LiteralKind.SYMBOL, delimited=False),
      "array": lambda ts: ArrayLiteral(self._elements(ts), bracketed=True),
      "string_array": lambda ts: ArrayLiteral(self._elements(ts), bracketed=True),
      "symbol_array": lambda ts: ArrayLiteral(self._elements(ts), bracketed=True),
      "right_assignment_list": lambda ts: ArrayLiteral(self._elements(ts), bracketed=False),
      "splat_argument": self._splat,
      "assignment": self._assignment,
      "operator_assignment": self._operator_assignment,
      "call": self._call,
      "element_reference": self._element_reference,
      "if_modifier": self._conditional_modifier,
      "unless_modifier": self._conditional_modifier,
      "while_modifier": self._loop_modifier,
      "until_modifier": self._loop_modifier,
      "if": self._conditional,
      "unless": self._conditional,
      "elsif": self._conditional,
      "while": self._loop,
      "until": self._loop,
      "rescue_modifier": self._rescue_modifier,
      "begin": self._begin,
      "method": self._method,
      "singleton_method": self._method,
      "rescue": self._rescue_clause,
      "ensure": lambda ts: Ensure(self.statements(ts.named_children)),
    }
    for ts_type in _VARIABLE_KINDS:
      self._handlers[ts_type] = self._variable
    for ts_type, kind in _LITERAL_KINDS.items():
      self._handlers[ts_type] = lambda ts, kind=kind: self._literal(ts, kind)

  # --- Helpers ---

  def _text(self, ts: Node) -> str:
    return self.buffer.raw[ts.start_byte : ts.end_byte].decode("utf-8", errors="replace")

  def _span(self, ts: Node) -> Span:
    return Span(self.buffer, self.buffer.char_offset(ts.start_byte), self.buffer.char_offset(ts.end_byte))

  def _locate(self, node: RubyNode, ts: Node) -> RubyNode:
    node.span = self._span(ts)
    return node

  @staticmethod
  def _named(ts: Optional[Node]) -> List[Node]:
    if ts is None:
      return []
    return [c for c in ts.named_children if c.type != "comment"]

  @staticmethod
  def _same(a: Optional[Node], b: Node) -> bool:
    return a is not None and (a.start_byte, a.end_byte, a.type) == (b.start_byte, b.end_byte, b.type)

  def _keyword_span(self, ts: Node, keyword: str) -> Optional[Span]:
    for child in ts.children:
      if not child.is_named and child.type == keyword:
        return self._span(child)
    return None

  # --- Entry points ---

  def convert(self, ts: Node) -> RubyNode:
    """
    Converts a single tree-sitter node (and its subtree).

    Args:
        ts: The tree-sitter node.

    Returns:
        RubyNode: The located model node.
    """
    handler = self._handlers.get(ts.type, self._other)
    return self._locate(handler(ts), ts)

  def statements(self, nodes: List[Node]) -> List[RubyNode]:
    """
    Converts a statement sequence, dissolving transparent wrappers.

    Args:
        nodes: Raw tree-sitter children.

    Returns:
        List[RubyNode]: Converted statements.
    """
    result: List[RubyNode] = []
    for child in nodes:
      if child.type == "comment":
        continue
      if child.type in _TRANSPARENT:
        result.extend(self.statements(child.named_children))
      else:
        result.append(self.convert(child))
    return result

  # --- Handlers ---

  def _program(self, ts: Node) -> RubyNode:
    return Program(self.statements(ts.named_children))

  def _variable(self, ts: Node) -> RubyNode:
    return Variable(_VARIABLE_KINDS[ts.type], self._text(ts))

  def _scope_resolution(self, ts: Node) -> RubyNode:
    scope = ts.child_by_field_name("scope")
    name = ts.child_by_field_name("name")
    scope_node = self.convert(scope) if scope is not None else None
    if name is None or name.type == "constant":
      return Constant(self._text(name) if name is not None else self._text(ts), scope_node)
    return Send(scope_node, self._text(name), [])

  def _literal(self, ts: Node, kind: LiteralKind, delimited: bool = True) -> RubyNode:
    return Literal(kind, self._text(ts), self._interpolations(ts), delimited)

  def _interpolations(self, ts: Node) -> List[RubyNode]:
    parts: List[RubyNode] = []
    for child in self._named(ts):
      if child.type == "interpolation":
        parts.extend(self.statements(child.named_children))
      else:
        parts.extend(self._interpolations(child))
    return parts

  def _elements(self, ts: Node) -> List[RubyNode]:
    return [self.convert(c) for c in self._named(ts)]

  def _splat(self, ts: Node) -> RubyNode:
    named = self._named(ts)
    return Splat(self.convert(named[0]) if named else None)

  def _target(self, ts: Node) -> RubyNode:
    """Converts an assignment target, turning attribute/index access into setters."""
    if ts.type == "call":
      receiver = ts.child_by_field_name("receiver")
      method = ts.child_by_field_name("method")
      name = self._text(method) if method is not None else "call"
      node: RubyNode = Send(self.convert(receiver) if receiver is not None else None, f"{name}=", [])
    elif ts.type == "element_reference":
      named = self._named(ts)
      node = Send(self.convert(named[0]), "[]=", [self.convert(a) for a in named[1:]])
    elif ts.type == "rest_assignment":
      named = self._named(ts)
      node = Splat(self._target(named[0]) if named else None)
    elif ts.type == "destructured_left_assignment":
      node = DestructuredTarget([self._target(c) for c in self._named(ts)])
    else:
      return self.convert(ts)
    return self._locate(node, ts)

  def _assignment(self, ts: Node) -> RubyNode:
    left = ts.child_by_field_name("left")
    right = ts.child_by_field_name("right")
    if left.type == "left_assignment_list":
      targets = [self._target(c) for c in self._named(left)]
      rescue = self._trailing_rescue(right)
      if rescue is None:
        return MultipleAssignment(targets, self.convert(right))
      return self._guarded_multiple_assignment(ts, targets, right, rescue)
    return Assignment(self._target(left), self.convert(right))

  def _trailing_rescue(self, right: Node) -> Optional[Node]:
    """Finds a rescue modifier that ends the right-hand side of a parallel assignment."""
    if right.type == "rescue_modifier":
      return right
    if right.type == "right_assignment_list":
      named = self._named(right)
      if named and named[-1].type == "rescue_modifier":
        return named[-1]
    return None

  def _guarded_multiple_assignment(
    self, ts: Node, targets: List[RubyNode], right: Node, rescue: Node
  ) -> RubyNode:
    """
    Rebuilds ``a, b = 1, 2 rescue foo`` as a rescue modifier guarding the
    whole parallel assignment, which is how Ruby evaluates it.
    """
    guarded = rescue.child_by_field_name("body")
    if right.type == "rescue_modifier":
      value = self.convert(guarded)
    else:
      elements = [self.convert(c) for c in self._named(right)[:-1]] + [self.convert(guarded)]
      value = ArrayLiteral(elements, bracketed=False)
      value.span = Span(self.buffer, self.buffer.char_offset(right.start_byte), self.buffer.char_offset(guarded.end_byte))

    masgn = MultipleAssignment(targets, value)
    masgn.span = Span(self.buffer, self.buffer.char_offset(ts.start_byte), self.buffer.char_offset(guarded.end_byte))
    return RescueModifier(masgn, self.convert(rescue.child_by_field_name("handler")))

  def _operator_assignment(self, ts: Node) -> RubyNode:
    operator = ts.child_by_field_name("operator")
    return Assignment(
      self._target(ts.child_by_field_name("left")),
      self.convert(ts.child_by_field_name("right")),
      self._text(operator) if operator is not None else "=",
    )

  def _call(self, ts: Node) -> RubyNode:
    receiver = ts.child_by_field_name("receiver")
    method = ts.child_by_field_name("method")
    arguments = ts.child_by_field_name("arguments")
    block = ts.child_by_field_name("block")

    send = Send(
      self.convert(receiver) if receiver is not None else None,
      self._text(method) if method is not None else "call",
      [self.convert(a) for a in self._named(arguments)],
    )
    if block is None:
      return send

    self._locate(send, ts)
    body = [c for c in block.named_children if c.type != "block_parameters"]
    return Block(send, self.statements(body))

  def _element_reference(self, ts: Node) -> RubyNode:
    named = self._named(ts)
    return Send(self.convert(named[0]), "[]", [self.convert(a) for a in named[1:]])

  def _conditional_modifier(self, ts: Node) -> RubyNode:
    keyword = ts.type.split("_")[0]
    return Conditional(
      keyword,
      self.convert(ts.child_by_field_name("condition")),
      [self.convert(ts.child_by_field_name("body"))],
      modifier=True,
      keyword_span=self._keyword_span(ts, keyword),
    )

  def _loop_modifier(self, ts: Node) -> RubyNode:
    keyword = ts.type.split("_")[0]
    return Loop(
      keyword,
      self.convert(ts.child_by_field_name("condition")),
      [self.convert(ts.child_by_field_name("body"))],
      modifier=True,
      keyword_span=self._keyword_span(ts, keyword),
    )

  def _conditional(self, ts: Node) -> RubyNode:
    consequence = ts.child_by_field_name("consequence")
    alternative = ts.child_by_field_name("alternative")
    return Conditional(
      ts.type,
      self.convert(ts.child_by_field_name("condition")),
      self.statements(consequence.named_children) if consequence is not None else [],
      alternative=self.convert(alternative) if alternative is not None else None,
      keyword_span=self._keyword_span(ts, ts.type),
    )

  def _loop(self, ts: Node) -> RubyNode:
    body = ts.child_by_field_name("body")
    return Loop(
      ts.type,
      self.convert(ts.child_by_field_name("condition")),
      self.statements(body.named_children) if body is not None else [],
      keyword_span=self._keyword_span(ts, ts.type),
    )

  def _rescue_modifier(self, ts: Node) -> RubyNode:
    return RescueModifier(
      self.convert(ts.child_by_field_name("body")),
      self.convert(ts.child_by_field_name("handler")),
    )

  def _split_clauses(
    self, nodes: List[RubyNode]
  ) -> Tuple[List[RubyNode], List[RescueClause], List[RubyNode], Optional[Ensure]]:
    """Partitions a body into statements, rescue clauses, else statements and ensure."""
    body: List[RubyNode] = []
    rescues: List[RescueClause] = []
    else_body: List[RubyNode] = []
    ensure: Optional[Ensure] = None
    for node in nodes:
      if isinstance(node, RescueClause):
        rescues.append(node)
      elif isinstance(node, Ensure):
        ensure = node
      elif isinstance(node, Other) and node.kind == "else":
        else_body.extend(node.contents)
      else:
        body.append(node)
    return body, rescues, else_body, ensure

  def _begin(self, ts: Node) -> RubyNode:
    body, rescues, else_body, ensure = self._split_clauses(self.statements(ts.named_children))
    return Begin(body, rescues, else_body, ensure)

  def _method(self, ts: Node) -> RubyNode:
    name = ts.child_by_field_name("name")
    header = [name, ts.child_by_field_name("parameters"), ts.child_by_field_name("object")]
    rest = [c for c in ts.named_children if not any(self._same(h, c) for h in header)]
    body, rescues, else_body, ensure = self._split_clauses(self.statements(rest))
    return MethodDefinition(
      self._text(name) if name is not None else "",
      body,
      singleton=ts.type == "singleton_method",
      rescues=rescues,
      else_body=else_body,
      ensure=ensure,
    )

  def _rescue_clause(self, ts: Node) -> RubyNode:
    exceptions = ts.child_by_field_name("exceptions")
    variable = ts.child_by_field_name("variable")
    body = ts.child_by_field_name("body")
    variable_nodes = self._named(variable)
    return RescueClause(
      [self.convert(c) for c in self._named(exceptions)],
      self.convert(variable_nodes[0]) if variable_nodes else None,
      self.statements(body.named_children) if body is not None else [],
    )

  def _other(self, ts: Node) -> RubyNode:
    tokens = tuple(self._text(c) for c in ts.children if not c.is_named)
    return Other(ts.type, self.statements(ts.named_children), tokens)


class RubyParser:
  """
  Parses Ruby source text into a SyntaxTree.

  A single instance can parse any number of sources; it is not thread safe.
  """

  def __init__(self) -> None:
    """Initializes the underlying tree-sitter parser for Ruby."""
    self._parser = Parser(RUBY_LANGUAGE)

  def parse(self, code: str, name: str = "(string)") -> SyntaxTree:
    """
    Parses source code.

    Syntax errors do not raise; tree-sitter recovers and the returned tree
    has ``has_errors`` set.

    Args:
        code: The Ruby source text.
        name: Display name of the source (usually a file path).

    Returns:
        SyntaxTree: Buffer, root Program and error flag.
    """
    buffer = SourceBuffer(code, name)
    ts_tree = self._parser.parse(buffer.raw)
    root_ts = ts_tree.root_node

    root = _TreeConverter(buffer).convert(root_ts)
    link_parents(root)

    if root_ts.has_error:
      logger.debug("Syntax errors while parsing %s", name)

    return SyntaxTree(buffer=buffer, root=root, has_errors=root_ts.has_error)


_default_parser: Optional[RubyParser] = None


def parse_ruby(code: str, name: str = "(string)") -> SyntaxTree:
  """
  Parses Ruby source with a lazily created module-level parser.

  Args:
      code: The Ruby source text.
      name: Display name of the source.

  Returns:
      SyntaxTree: The parsed tree.
  """
  global _default_parser
  if _default_parser is None:
    _default_parser = RubyParser()
  return _default_parser.parse(code, name)
