"""
Ruby Syntax Model.

Defines the closed set of node variants the analysis operates on. The
frontend (:mod:`unparallel.syntax.parser`) converts tree-sitter output into
these dataclasses; every analysis pass matches on the variant type instead of
probing node categories at run time.

Equality is structural: two nodes compare equal when their syntactic fields
match, regardless of where they appear in the file. Source positions
(``span``) and the ``parent`` back-link live outside the dataclass fields so
they never take part in comparisons. Getter/setter matching relies on this
(``ary[0] = ...`` is matched against any ``ary[0]`` read).
"""

import abc
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from unparallel.enums import LiteralKind, VariableKind

# Methods ending in `=` that are comparisons rather than setters.
_COMPARISON_METHODS = frozenset({"==", "!=", "<=", ">=", "==="})


class SourceBuffer:
  """
  Holds the analysed source text and answers position queries.

  tree-sitter reports UTF-8 byte offsets; everything above the frontend works
  with character offsets into ``text``.

  Attributes:
      text (str): The full source code.
      name (str): File path or a placeholder for in-memory sources.
  """

  def __init__(self, text: str, name: str = "(string)") -> None:
    """
    Initializes the buffer.

    Args:
        text: The full source code.
        name: Display name used in diagnostics.
    """
    self.text = text
    self.name = name
    self._raw = text.encode("utf-8")
    self._is_ascii = len(self._raw) == len(text)

  @property
  def raw(self) -> bytes:
    """The UTF-8 encoded source handed to tree-sitter."""
    return self._raw

  def char_offset(self, byte_offset: int) -> int:
    """
    Converts a UTF-8 byte offset into a character offset.

    Args:
        byte_offset: Offset as reported by tree-sitter.

    Returns:
        int: Offset into ``text``.
    """
    if self._is_ascii:
      return byte_offset
    return len(self._raw[:byte_offset].decode("utf-8", errors="ignore"))

  def slice(self, start: int, end: int) -> str:
    """Returns the text between two character offsets."""
    return self.text[start:end]

  def line_of(self, pos: int) -> int:
    """Returns the 1-based line number of a character offset."""
    return self.text.count("\n", 0, pos) + 1

  def column_of(self, pos: int) -> int:
    """Returns the 0-based column of a character offset."""
    return pos - (self.text.rfind("\n", 0, pos) + 1)


@dataclass(frozen=True)
class Span:
  """
  A half-open character range ``[start, end)`` inside a SourceBuffer.

  Attributes:
      buffer (SourceBuffer): The buffer the range points into.
      start (int): First character offset.
      end (int): Offset one past the last character.
  """

  buffer: SourceBuffer = field(compare=False, repr=False)
  start: int
  end: int

  @property
  def source(self) -> str:
    """The text covered by the range."""
    return self.buffer.slice(self.start, self.end)

  @property
  def line(self) -> int:
    """1-based line of the range start."""
    return self.buffer.line_of(self.start)

  @property
  def column(self) -> int:
    """0-based column of the range start."""
    return self.buffer.column_of(self.start)


class RubyNode(abc.ABC):
  """
  Abstract base class for all Ruby syntax nodes.

  Attributes:
      span (Optional[Span]): Source range, None for synthesized nodes.
      parent (Optional[RubyNode]): Enclosing node, None for the root.
  """

  span: Optional[Span] = None
  parent: Optional["RubyNode"] = None

  @abc.abstractmethod
  def children(self) -> List["RubyNode"]:
    """Returns the direct child nodes in source order."""
    pass

  @property
  def source(self) -> str:
    """The original source text of the node, empty when synthesized."""
    return self.span.source if self.span else ""


@dataclass
class Program(RubyNode):
  """
  The root of a parsed file.

  Attributes:
      body (List[RubyNode]): Top-level statements.
  """

  body: List[RubyNode] = field(default_factory=list)

  def children(self) -> List[RubyNode]:
    return list(self.body)


@dataclass
class Variable(RubyNode):
  """
  A variable read or a variable assignment target.

  Attributes:
      kind (VariableKind): Local, instance, class or global.
      name (str): The name including its sigil (e.g. ``@count``).
  """

  kind: VariableKind
  name: str

  def children(self) -> List[RubyNode]:
    return []


@dataclass
class Constant(RubyNode):
  """
  A constant read or assignment target (``A``, ``Foo::A``).

  Attributes:
      name (str): The final constant segment.
      scope (Optional[RubyNode]): The namespace expression, if any.
  """

  name: str
  scope: Optional[RubyNode] = None

  def children(self) -> List[RubyNode]:
    return [self.scope] if self.scope is not None else []


@dataclass
class SelfRef(RubyNode):
  """The ``self`` keyword."""

  def children(self) -> List[RubyNode]:
    return []


@dataclass
class Literal(RubyNode):
  """
  A literal value.

  Attributes:
      kind (LiteralKind): Category of the literal.
      value (str): The literal text (without ``%w``/``%i`` container).
      parts (List[RubyNode]): Expressions embedded through interpolation.
      delimited (bool): False for elements of ``%w()``/``%i()`` arrays, which
          carry no quotes or colon of their own.
  """

  kind: LiteralKind
  value: str
  parts: List[RubyNode] = field(default_factory=list)
  delimited: bool = True

  def children(self) -> List[RubyNode]:
    return list(self.parts)


@dataclass
class ArrayLiteral(RubyNode):
  """
  A literal array construction.

  Attributes:
      elements (List[RubyNode]): The array elements.
      bracketed (bool): False for the bare ``1, 2`` list on the right-hand
          side of a parallel assignment.
  """

  elements: List[RubyNode] = field(default_factory=list)
  bracketed: bool = True

  def children(self) -> List[RubyNode]:
    return list(self.elements)


@dataclass
class Splat(RubyNode):
  """
  A splat source (``*foo``) or rest target (``*rest``, bare ``*``).

  Attributes:
      value (Optional[RubyNode]): The splatted expression or target.
  """

  value: Optional[RubyNode] = None

  def children(self) -> List[RubyNode]:
    return [self.value] if self.value is not None else []


@dataclass
class Send(RubyNode):
  """
  A method call without a block.

  Index reads are calls of ``[]``; on the left-hand side of an assignment,
  attribute and index targets are stored as their setter (``attr=``,
  ``[]=``).

  Attributes:
      receiver (Optional[RubyNode]): Explicit receiver, None when implicit.
      method (str): The method name.
      arguments (List[RubyNode]): Positional and keyword arguments.
  """

  receiver: Optional[RubyNode]
  method: str
  arguments: List[RubyNode] = field(default_factory=list)

  def children(self) -> List[RubyNode]:
    nodes = [self.receiver] if self.receiver is not None else []
    return nodes + list(self.arguments)

  @property
  def is_setter(self) -> bool:
    """True for assignment-style calls such as ``obj.attr=`` or ``ary[i]=``."""
    return self.method.endswith("=") and self.method not in _COMPARISON_METHODS

  @property
  def getter_name(self) -> str:
    """The reader matching this setter (``attr=`` -> ``attr``)."""
    return self.method[:-1] if self.is_setter else self.method


@dataclass
class Block(RubyNode):
  """
  A method call with a literal block (``foo { ... }``, ``foo do ... end``).

  Attributes:
      call (Send): The invoked method.
      body (List[RubyNode]): Statements of the block.
  """

  call: Send
  body: List[RubyNode] = field(default_factory=list)

  def children(self) -> List[RubyNode]:
    return [self.call] + list(self.body)


@dataclass
class MultipleAssignment(RubyNode):
  """
  A parallel assignment statement (``a, b = 1, 2``).

  Attributes:
      targets (List[RubyNode]): Left-hand side elements in order.
      value (RubyNode): The right-hand side; an ``ArrayLiteral`` for
          ``1, 2`` and ``[1, 2]``, any expression otherwise.
  """

  targets: List[RubyNode]
  value: RubyNode

  def children(self) -> List[RubyNode]:
    return list(self.targets) + [self.value]


@dataclass
class Assignment(RubyNode):
  """
  A single assignment (``a = 1``, ``obj.attr = 1``, ``a += 1``).

  Attributes:
      target (RubyNode): The assigned variable, constant or setter.
      value (RubyNode): The assigned expression.
      operator (str): ``=`` or the compound operator.
  """

  target: RubyNode
  value: RubyNode
  operator: str = "="

  def children(self) -> List[RubyNode]:
    return [self.target, self.value]


@dataclass
class DestructuredTarget(RubyNode):
  """
  A nested target list (``(a, b), c = ...``).

  Attributes:
      targets (List[RubyNode]): The nested targets.
  """

  targets: List[RubyNode] = field(default_factory=list)

  def children(self) -> List[RubyNode]:
    return list(self.targets)


@dataclass
class Conditional(RubyNode):
  """
  An ``if``/``unless``/``elsif`` statement, block or modifier form.

  Attributes:
      keyword (str): ``if``, ``unless`` or ``elsif``.
      condition (RubyNode): The tested expression.
      body (List[RubyNode]): Statements executed when the test passes.
      alternative (Optional[RubyNode]): ``elsif``/``else`` branch.
      modifier (bool): True for the trailing form (``x if y``).
      keyword_span (Optional[Span]): Range of the keyword token.
  """

  keyword: str
  condition: RubyNode
  body: List[RubyNode] = field(default_factory=list)
  alternative: Optional[RubyNode] = None
  modifier: bool = False
  keyword_span: Optional[Span] = field(default=None, compare=False, repr=False)

  def children(self) -> List[RubyNode]:
    if self.modifier:
      return list(self.body) + [self.condition]
    nodes = [self.condition] + list(self.body)
    if self.alternative is not None:
      nodes.append(self.alternative)
    return nodes


@dataclass
class Loop(RubyNode):
  """
  A ``while``/``until`` loop, block or modifier form.

  Attributes:
      keyword (str): ``while`` or ``until``.
      condition (RubyNode): The loop condition.
      body (List[RubyNode]): The loop body.
      modifier (bool): True for the trailing form (``x while y``).
      keyword_span (Optional[Span]): Range of the keyword token.
  """

  keyword: str
  condition: RubyNode
  body: List[RubyNode] = field(default_factory=list)
  modifier: bool = False
  keyword_span: Optional[Span] = field(default=None, compare=False, repr=False)

  def children(self) -> List[RubyNode]:
    if self.modifier:
      return list(self.body) + [self.condition]
    return [self.condition] + list(self.body)


@dataclass
class RescueModifier(RubyNode):
  """
  A trailing rescue (``stmt rescue handler``).

  Attributes:
      body (RubyNode): The guarded statement.
      handler (RubyNode): Expression evaluated when ``body`` raises.
  """

  body: RubyNode
  handler: RubyNode

  def children(self) -> List[RubyNode]:
    return [self.body, self.handler]


@dataclass
class RescueClause(RubyNode):
  """
  A ``rescue`` clause of a begin block or method body.

  Attributes:
      exceptions (List[RubyNode]): Rescued exception classes.
      variable (Optional[RubyNode]): The ``=> e`` binding.
      body (List[RubyNode]): Handler statements.
  """

  exceptions: List[RubyNode] = field(default_factory=list)
  variable: Optional[RubyNode] = None
  body: List[RubyNode] = field(default_factory=list)

  def children(self) -> List[RubyNode]:
    nodes = list(self.exceptions)
    if self.variable is not None:
      nodes.append(self.variable)
    return nodes + list(self.body)


@dataclass
class Ensure(RubyNode):
  """
  An ``ensure`` clause.

  Attributes:
      body (List[RubyNode]): Statements always executed.
  """

  body: List[RubyNode] = field(default_factory=list)

  def children(self) -> List[RubyNode]:
    return list(self.body)


@dataclass
class Begin(RubyNode):
  """
  An explicit ``begin ... end`` block.

  Attributes:
      body (List[RubyNode]): Main statements.
      rescues (List[RescueClause]): Rescue clauses.
      else_body (List[RubyNode]): Statements of the ``else`` clause.
      ensure (Optional[Ensure]): The ``ensure`` clause.
  """

  body: List[RubyNode] = field(default_factory=list)
  rescues: List[RescueClause] = field(default_factory=list)
  else_body: List[RubyNode] = field(default_factory=list)
  ensure: Optional[Ensure] = None

  def children(self) -> List[RubyNode]:
    nodes = list(self.body) + list(self.rescues) + list(self.else_body)
    if self.ensure is not None:
      nodes.append(self.ensure)
    return nodes


@dataclass
class MethodDefinition(RubyNode):
  """
  A method definition (``def foo``, ``def self.foo``).

  The body of a method behaves as an implicit ``begin`` block: it may carry
  rescue, else and ensure clauses without an explicit ``begin``.

  Attributes:
      name (str): The method name.
      body (List[RubyNode]): Body statements.
      singleton (bool): True for ``def self.foo``.
      rescues (List[RescueClause]): Rescue clauses of the body.
      else_body (List[RubyNode]): Statements of the ``else`` clause.
      ensure (Optional[Ensure]): The ``ensure`` clause.
  """

  name: str
  body: List[RubyNode] = field(default_factory=list)
  singleton: bool = False
  rescues: List[RescueClause] = field(default_factory=list)
  else_body: List[RubyNode] = field(default_factory=list)
  ensure: Optional[Ensure] = None

  def children(self) -> List[RubyNode]:
    nodes = list(self.body) + list(self.rescues) + list(self.else_body)
    if self.ensure is not None:
      nodes.append(self.ensure)
    return nodes

  @property
  def has_handlers(self) -> bool:
    """True if the body already declares rescue, else or ensure clauses."""
    return bool(self.rescues or self.else_body or self.ensure is not None)


@dataclass
class Other(RubyNode):
  """
  Any construct the analysis does not distinguish (operators, hashes,
  classes, ranges ...).

  Attributes:
      kind (str): The tree-sitter node type.
      contents (List[RubyNode]): Named child nodes.
      tokens (Tuple[str, ...]): Anonymous tokens (operators, keywords) so
          that ``a + b`` and ``a - b`` do not compare equal.
  """

  kind: str
  contents: List[RubyNode] = field(default_factory=list)
  tokens: Tuple[str, ...] = ()

  def children(self) -> List[RubyNode]:
    return list(self.contents)


@dataclass
class SyntaxTree:
  """
  A parsed source file.

  Attributes:
      buffer (SourceBuffer): The parsed text.
      root (Program): The root node.
      has_errors (bool): True when the parser recovered from syntax errors.
  """

  buffer: SourceBuffer
  root: Program
  has_errors: bool = False


def link_parents(root: RubyNode) -> None:
  """
  Populates the ``parent`` back-link of every node below ``root``.

  Args:
      root: The subtree root; its own parent is left untouched.
  """
  stack = [root]
  while stack:
    node = stack.pop()
    for child in node.children():
      child.parent = node
      stack.append(child)
