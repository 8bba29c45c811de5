"""
Textual Reconstructors for Parallel Assignment.

Each corrector turns a flagged parallel assignment and its safe ordering into
replacement text plus the range it replaces:

*   ``GenericCorrector``: one ``target = source`` line per pair, replacing the
    statement itself.
*   ``ModifierCorrector``: expands ``a, b = 1, 2 if cond`` into an
    ``if cond ... end`` block, replacing the whole modifier statement.
*   ``RescueCorrector``: expands ``a, b = 1, 2 rescue handler`` into a
    ``begin ... rescue ... end`` block, or, when the statement is the whole
    body of a method, into plain lines followed by a method-level ``rescue``.

Layout follows the offending node: continuation lines start at the node's
column (``offset``); nested lines add ``indentation_width`` spaces
(``indentation``).
"""

import re
from typing import List

from unparallel.analysis.dependencies import AssignmentPair
from unparallel.enums import LiteralKind
from unparallel.offense import Correction
from unparallel.syntax.nodes import (
  ArrayLiteral,
  Conditional,
  Literal,
  Loop,
  MethodDefinition,
  MultipleAssignment,
  RescueModifier,
  RubyNode,
  Span,
)

_PAIRED_DELIMITERS = {"(": ")", "[": "]", "{": "}", "<": ">"}
_PLAIN_SYMBOL = re.compile(r"\A[A-Za-z_][A-Za-z0-9_]*[?!=]?\Z")


def _word_array_opening(node: RubyNode) -> str:
  """Returns the ``%w(``-style opening of the array holding ``node``, or an empty string."""
  parent = node.parent
  if isinstance(parent, ArrayLiteral) and parent.source.startswith("%"):
    return parent.source[:3]
  return ""


def _unescape_word(text: str, delimiter: str) -> str:
  """Resolves the backslash escapes a ``%w``/``%i`` element understands."""
  escapable = {"\\", delimiter, _PAIRED_DELIMITERS.get(delimiter, delimiter)} - {""}

  def _resolve(match: "re.Match[str]") -> str:
    char = match.group(1)
    return char if char.isspace() or char in escapable else match.group(0)

  return re.sub(r"\\(.)", _resolve, text, flags=re.DOTALL)


def _double_quoted(text: str) -> str:
  """
  Wraps a ``%W``/``%I`` element in double quotes.

  Escape sequences and ``#{...}`` interpolations are copied as written; bare
  double quotes are escaped, and an escaped newline, which is a line
  continuation inside double quotes, becomes ``\\n``.
  """
  out: List[str] = []
  depth = 0
  i = 0
  while i < len(text):
    char = text[i]
    if depth:
      depth += {"{": 1, "}": -1}.get(char, 0)
      out.append(char)
    elif char == "\\":
      escaped = text[i + 1 : i + 2]
      if escaped == "\n":
        out.append("\\n")
      elif escaped:
        out.append(char + escaped)
      else:
        out.append("\\\\")
      i += 2
      continue
    elif text.startswith("#{", i):
      depth = 1
      out.append("#{")
      i += 2
      continue
    elif char == '"':
      out.append('\\"')
    else:
      out.append(char)
    i += 1
  return '"' + "".join(out) + '"'


class GenericCorrector:
  """
  Rewrites a parallel assignment as sequential statements in place.

  Attributes:
      node (MultipleAssignment): The flagged statement.
      order (List[AssignmentPair]): Pairs in emission order.
      indentation_width (int): Spaces per nesting level.
  """

  def __init__(self, node: MultipleAssignment, order: List[AssignmentPair], indentation_width: int = 2) -> None:
    """
    Initializes the corrector.

    Args:
        node: The flagged statement.
        order: Pairs in emission order.
        indentation_width: Spaces per nesting level.
    """
    self.node = node
    self.order = order
    self.indentation_width = indentation_width

  @property
  def offset(self) -> str:
    """Whitespace up to the node's column."""
    return " " * self.node.span.column

  @property
  def indentation(self) -> str:
    """Whitespace for lines nested one level below the node."""
    return self.offset + " " * self.indentation_width

  def correction(self) -> str:
    """
    Builds the replacement text.

    Returns:
        str: The sequential assignments.
    """
    return f"\n{self.offset}".join(self.assignment())

  def correction_range(self) -> Span:
    """
    Returns the range replaced by ``correction()``.

    Returns:
        Span: The statement's own range.
    """
    return self.node.span

  def to_correction(self) -> Correction:
    """
    Packages range and replacement text.

    Returns:
        Correction: The text edit.
    """
    span = self.correction_range()
    return Correction(start=span.start, end=span.end, replacement=self.correction())

  def assignment(self) -> List[str]:
    """
    Renders one ``target = source`` line per ordered pair.

    Returns:
        List[str]: The lines without indentation.
    """
    return [f"{pair.target.source} = {self.source(pair.source)}" for pair in self.order]

  @staticmethod
  def source(node: RubyNode) -> str:
    """
    Returns the text of a source element, valid as a standalone expression.

    Elements of ``%w()``/``%i()`` carry no delimiters and are re-quoted with
    the value they had inside the array: ``%w`` elements only unescape
    whitespace, backslashes and the array delimiters and become single-quoted
    strings; ``%W``/``%I`` elements process escapes and interpolation and
    become double-quoted.

    Args:
        node: A right-hand side element.

    Returns:
        str: The expression text.
    """
    if not isinstance(node, Literal) or node.delimited:
      return node.source

    opening = _word_array_opening(node)
    text = node.source
    if node.parts or (opening[1:2] in ("W", "I") and ("\\" in text or "#" in text)):
      quoted = _double_quoted(text)
    else:
      value = _unescape_word(text, opening[2:3])
      if node.kind == LiteralKind.SYMBOL and _PLAIN_SYMBOL.match(value):
        return f":{value}"
      quoted = "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
    return f":{quoted}" if node.kind == LiteralKind.SYMBOL else quoted


class ModifierCorrector(GenericCorrector):
  """
  Rewrites a parallel assignment guarded by ``if``/``unless``/``while``/``until``.
  """

  def correction(self) -> str:
    parent = self.node.parent
    lines = f"\n{self.indentation}".join(self.assignment())
    return f"{self._modifier_header(parent)}\n{self.indentation}{lines}\n{self.offset}end"

  def correction_range(self) -> Span:
    return self.node.parent.span

  @staticmethod
  def _modifier_header(parent: RubyNode) -> str:
    """
    Returns the text from the modifier keyword to the end of the statement.

    Args:
        parent: The modifier statement.

    Returns:
        str: e.g. ``if foo``.

    Raises:
        ValueError: If the keyword position is unknown.
    """
    if not isinstance(parent, (Conditional, Loop)) or parent.keyword_span is None:
      raise ValueError(f"Cannot locate modifier keyword in: {parent.source!r}")
    return parent.span.buffer.slice(parent.keyword_span.start, parent.span.end)


class RescueCorrector(GenericCorrector):
  """
  Rewrites a parallel assignment guarded by a rescue modifier.
  """

  def correction(self) -> str:
    rescue_node = self.node.parent
    if not isinstance(rescue_node, RescueModifier):
      raise ValueError(f"Expected a rescue modifier around: {self.node.source!r}")

    handler = rescue_node.handler.source
    method = rescue_node.parent
    if self.uses_implicit_begin(rescue_node):
      return super().correction() + self._def_correction(method, handler)
    return self._begin_correction(handler)

  def correction_range(self) -> Span:
    return self.node.parent.span

  @staticmethod
  def uses_implicit_begin(rescue_node: RescueModifier) -> bool:
    """
    Checks whether the rescue modifier is the whole body of a method.

    Such a body can take a ``rescue`` clause directly; a body that already
    has rescue/else/ensure clauses is left to the ``begin`` form.

    Args:
        rescue_node: The rescue modifier statement.

    Returns:
        bool: True if a method-level ``rescue`` clause can be used.
    """
    method = rescue_node.parent
    return (
      isinstance(method, MethodDefinition)
      and len(method.body) == 1
      and method.body[0] is rescue_node
      and not method.has_handlers
    )

  def _def_correction(self, method: MethodDefinition, handler: str) -> str:
    method_offset = " " * method.span.column
    return f"\n{method_offset}rescue\n{self.offset}{handler}"

  def _begin_correction(self, handler: str) -> str:
    lines = f"\n{self.indentation}".join(self.assignment())
    return (
      f"begin\n"
      f"{self.indentation}{lines}\n"
      f"{self.offset}rescue\n"
      f"{self.indentation}{handler}\n"
      f"{self.offset}end"
    )
