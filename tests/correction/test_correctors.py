"""
Tests for the Textual Reconstructors.

Correctors are driven directly with a parsed node and the order computed by
the classifier; full-file results are covered by the cop tests.
"""

import pytest

from unparallel.analysis.safety import SafetyClassifier
from unparallel.correction.correctors import GenericCorrector, ModifierCorrector, RescueCorrector
from unparallel.enums import LiteralKind
from unparallel.syntax.nodes import Literal, Other, SourceBuffer, Span


def _corrector(cls, node, width=2):
  finding = SafetyClassifier().classify(node)
  assert finding is not None
  return cls(node, finding.order, width)


def test_generic_lines_and_range(masgn):
  """
  Scenario: `a, b = 1, a` inside a method.
  Expectation: Ordered lines at the node's column; range is the statement.
  """
  node = masgn("def foo\n  a, b = 1, a\nend\n")
  corrector = _corrector(GenericCorrector, node)

  assert corrector.offset == "  "
  assert corrector.indentation == "    "
  assert corrector.assignment() == ["b = a", "a = 1"]
  assert corrector.correction() == "b = a\n  a = 1"
  assert corrector.correction_range() == node.span


def test_to_correction(masgn):
  """
  Scenario: Top-level statement.
  Expectation: Correction record with the node's offsets.
  """
  node = masgn("x = 1\na, b = 1, 2\n")
  correction = _corrector(GenericCorrector, node).to_correction()
  assert (correction.start, correction.end) == (6, 17)
  assert correction.replacement == "a = 1\nb = 2"


@pytest.mark.parametrize(
  "literal, expected",
  [
    (Literal(LiteralKind.STRING, "one", delimited=False), "'one'"),
    (Literal(LiteralKind.STRING, "it's", delimited=False), "'it\\'s'"),
    (Literal(LiteralKind.SYMBOL, "one", delimited=False), ":one"),
  ],
)
def test_source_requotes_undelimited(literal, expected):
  """
  Scenario: Elements of %w()/%i() arrays.
  Expectation: Wrapped so they stand alone as expressions.
  """
  literal.span = Span(SourceBuffer(literal.value), 0, len(literal.value))
  assert GenericCorrector.source(literal) == expected


def test_source_interpolated_word():
  """
  Scenario: Undelimited string with interpolation parts (%W element).
  Expectation: Double quotes.
  """
  literal = Literal(LiteralKind.STRING, "x", parts=[Other("identifier")], delimited=False)
  literal.span = Span(SourceBuffer("x"), 0, 1)
  assert GenericCorrector.source(literal) == '"x"'


def test_source_keeps_delimited(masgn):
  """
  Scenario: Ordinary sources.
  Expectation: Original text.
  """
  node = masgn("a, b = 'x', :y\n")
  assert [GenericCorrector.source(e) for e in node.value.elements] == ["'x'", ":y"]


def test_modifier_correction(masgn):
  """
  Scenario: `a, b = 1, 2 unless foo`.
  Expectation: Block form spanning the modifier statement.
  """
  node = masgn("a, b = 1, 2 unless foo\n")
  corrector = _corrector(ModifierCorrector, node)
  assert corrector.correction() == "unless foo\n  a = 1\n  b = 2\nend"
  assert corrector.correction_range() == node.parent.span


def test_modifier_requires_modifier_parent(masgn):
  """
  Scenario: ModifierCorrector used on a plain statement.
  Expectation: ValueError.
  """
  node = masgn("a, b = 1, 2\n")
  with pytest.raises(ValueError):
    _corrector(ModifierCorrector, node).correction()


def test_rescue_begin_form(masgn):
  """
  Scenario: Top-level guarded statement.
  Expectation: Explicit begin/rescue/end.
  """
  node = masgn("a, b = 1, 2 rescue foo\n")
  corrector = _corrector(RescueCorrector, node, width=4)
  assert corrector.correction() == "begin\n    a = 1\n    b = 2\nrescue\n    foo\nend"
  assert corrector.correction_range() == node.parent.span


def test_rescue_method_form(masgn):
  """
  Scenario: Guarded statement is the whole method body.
  Expectation: Lines plus a method-level rescue at the method's column.
  """
  node = masgn("class A\n  def bar\n    a, b = 1, 2 rescue foo\n  end\nend\n")
  corrector = _corrector(RescueCorrector, node)
  assert RescueCorrector.uses_implicit_begin(node.parent)
  assert corrector.correction() == "a = 1\n    b = 2\n  rescue\n    foo"


def test_rescue_method_with_handlers_uses_begin(masgn):
  """
  Scenario: Method already has an ensure clause.
  Expectation: Begin form.
  """
  node = masgn("def bar\n  a, b = 1, 2 rescue foo\nensure\n  baz\nend\n")
  assert not RescueCorrector.uses_implicit_begin(node.parent)
  assert _corrector(RescueCorrector, node).correction().startswith("begin\n")


@pytest.mark.parametrize(
  "code, expected",
  [
    ("a, b = %w(it's b)\n", "'it\\'s'"),
    ("a, b = %w(x\\\\y b)\n", "'x\\\\y'"),
    ("a, b = %W(x\\ y b)\n", '"x\\ y"'),
    ("a, b = %W(#{c}\\\" b)\n", '"#{c}\\""'),
    ("a, b = %W(#{c + \"d\"} b)\n", '"#{c + "d"}"'),
    ("a, b = %I(#{c}-d b)\n", ':"#{c}-d"'),
    ("a, b = %i(one? b)\n", ":one?"),
  ],
)
def test_source_word_array_element(masgn, code, expected):
  """
  Scenario: First element of a word or symbol array.
  Expectation: A literal of the same value, quoted by the array's rules.
  """
  assert GenericCorrector.source(masgn(code).value.elements[0]) == expected
