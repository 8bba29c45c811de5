"""
Tests for the Style/ParallelAssignment Cop.

Covers offense reporting (message, location, exemptions) and the corrected
source for every rewrite context: plain statements, modifier conditionals
and loops, rescue modifiers at top level, as a whole method body, and
inside explicit begin blocks.
"""

import io

import pytest
from rich.console import Console

from unparallel.cops.parallel_assignment import ParallelAssignmentCop
from unparallel.correction import strategy
from unparallel.correction.patcher import apply_corrections
from unparallel.enums import CorrectionStrategy
from unparallel.utils.console import set_console


@pytest.fixture
def cop():
  return ParallelAssignmentCop()


def correct(cop, parse, code: str) -> str:
  """Applies one pass of the cop's corrections."""
  offenses = cop.investigate(parse(code), autocorrect=True)
  return apply_corrections(code, [o.correction for o in offenses if o.correction is not None])


def test_offense_details(cop, parse):
  """
  Scenario: Indented parallel assignment on line 2.
  Expectation: One offense with name, message and location of the statement.
  """
  offenses = cop.investigate(parse("def foo\n  a, b, c = 1, 2, 3\nend\n"))
  assert len(offenses) == 1
  offense = offenses[0]
  assert offense.cop_name == "Style/ParallelAssignment"
  assert offense.message == "Do not use parallel assignment."
  assert (offense.line, offense.column) == (2, 2)
  assert offense.source == "a, b, c = 1, 2, 3"
  assert offense.correction is None


def test_offense_without_autocorrect_has_no_correction(cop, parse):
  """
  Scenario: Investigation without autocorrection.
  Expectation: Offense is not correctable.
  """
  offense = cop.investigate(parse("a, b = 1, 2\n"))[0]
  assert not offense.correctable


@pytest.mark.parametrize(
  "code",
  [
    "a, b = foo\n",
    "a, b = foo()\n",
    "a, b = b, a\n",
    "a, b, c = b, c, a\n",
    "a, *b = 1, 2\n",
    "a, b = *c, 1\n",
    "a, b = 1, 2, 3\n",
    "self.a, self.b = b, a\n",
    "a[0], a[1] = a[1], a[0]\n",
    "a = 1\n",
    "(a, b), c = [1, c], a\n",
    "foo { x = 1 }\nself.x, self.y = y, x\n",
  ],
)
def test_no_offense(cop, parse, code):
  """
  Scenario: Exempt statements.
  Expectation: No offenses.
  """
  assert cop.investigate(parse(code)) == []


def test_multiple_offenses_in_source_order(cop, parse):
  """
  Scenario: Two offending statements separated by a swap.
  Expectation: Two offenses, ordered by position.
  """
  code = "a, b = 1, 2\nc, d = d, c\ne, f = 3, 4\n"
  offenses = cop.investigate(parse(code))
  assert [o.line for o in offenses] == [1, 3]


@pytest.mark.parametrize(
  "code, expected",
  [
    ("a, b, c = 1, 2, 3\n", "a = 1\nb = 2\nc = 3\n"),
    ("a, b = [1, 2]\n", "a = 1\nb = 2\n"),
    ("a, b = 1, a\n", "b = a\na = 1\n"),
    ("a, b, c = b, c, 1\n", "a = b\nb = c\nc = 1\n"),
    ("a, b = a + 1, 2\n", "a = a + 1\nb = 2\n"),
    ("@a, @@b, $c = 1, 2, 3\n", "@a = 1\n@@b = 2\n$c = 3\n"),
    ("A, B = 1, 2\n", "A = 1\nB = 2\n"),
    ("self.a, self.b = 1, 2\n", "self.a = 1\nself.b = 2\n"),
    ("a[0], a[1] = 1, a[0]\n", "a[1] = a[0]\na[0] = 1\n"),
    ("a, b = foo(), bar\n", "a = foo()\nb = bar\n"),
    ("a, b = %w(one two)\n", "a = 'one'\nb = 'two'\n"),
    ("a, b = %i(one two)\n", "a = :one\nb = :two\n"),
    ("(a, b), c = [1, 2], a\n", "c = a\n(a, b) = [1, 2]\n"),
    ("x = 5\ny = 6\nself.x, self.y = y, x\n", "x = 5\ny = 6\nself.x = y\nself.y = x\n"),
    ("def foo\n  a, b = 1, 2\nend\n", "def foo\n  a = 1\n  b = 2\nend\n"),
    ("foo.each do |x|\n  a, b = x, 2\nend\n", "foo.each do |x|\n  a = x\n  b = 2\nend\n"),
  ],
)
def test_generic_correction(cop, parse, code, expected):
  """
  Scenario: Plain statements.
  Expectation: One sequential assignment per pair, aligned to the statement.
  """
  assert correct(cop, parse, code) == expected


@pytest.mark.parametrize(
  "code, expected",
  [
    ("a, b = 1, 2 if foo\n", "if foo\n  a = 1\n  b = 2\nend\n"),
    ("a, b = 1, 2 unless foo\n", "unless foo\n  a = 1\n  b = 2\nend\n"),
    ("a, b = 1, 2 while foo\n", "while foo\n  a = 1\n  b = 2\nend\n"),
    ("a, b = 1, 2 until foo\n", "until foo\n  a = 1\n  b = 2\nend\n"),
    ("a, b = 1, a if foo.bar?\n", "if foo.bar?\n  b = a\n  a = 1\nend\n"),
    (
      "def baz\n  a, b = 1, 2 if foo\nend\n",
      "def baz\n  if foo\n    a = 1\n    b = 2\n  end\nend\n",
    ),
  ],
)
def test_modifier_correction(cop, parse, code, expected):
  """
  Scenario: Statement guarded by a modifier conditional or loop.
  Expectation: Expanded into a block form.
  """
  assert correct(cop, parse, code) == expected


@pytest.mark.parametrize(
  "code, expected",
  [
    (
      "a, b = 1, 2 rescue foo\n",
      "begin\n  a = 1\n  b = 2\nrescue\n  foo\nend\n",
    ),
    (
      "def bar\n  a, b = 1, 2 rescue foo\nend\n",
      "def bar\n  a = 1\n  b = 2\nrescue\n  foo\nend\n",
    ),
    (
      "def bar\n  x = 1\n  a, b = 1, 2 rescue foo\nend\n",
      "def bar\n  x = 1\n  begin\n    a = 1\n    b = 2\n  rescue\n    foo\n  end\nend\n",
    ),
    (
      "def bar\n  a, b = 1, 2 rescue foo\nensure\n  baz\nend\n",
      "def bar\n  begin\n    a = 1\n    b = 2\n  rescue\n    foo\n  end\nensure\n  baz\nend\n",
    ),
    (
      "begin\n  a, b = 1, 2 rescue foo\nend\n",
      "begin\n  a = 1\n  b = 2 rescue foo\nend\n",
    ),
  ],
)
def test_rescue_correction(cop, parse, code, expected):
  """
  Scenario: Statement guarded by a rescue modifier.
  Expectation: Method-level rescue when it is the whole method body, an
  explicit begin block elsewhere, and a plain rewrite inside explicit begin.
  """
  assert correct(cop, parse, code) == expected


def test_indentation_width(parse):
  """
  Scenario: Configured width of 4.
  Expectation: Nested lines use 4 spaces.
  """
  cop = ParallelAssignmentCop(indentation_width=4)
  assert correct(cop, parse, "a, b = 1, 2 if foo\n") == "if foo\n    a = 1\n    b = 2\nend\n"


def test_corrected_code_has_no_offenses(cop, parse):
  """
  Scenario: Correct, then investigate the result again.
  Expectation: Nothing left to report.
  """
  code = "a, b = 1, a\nc, d = 1, 2 if x\ne, f = 3, 4 rescue nil\n"
  fixed = correct(cop, parse, code)
  tree = parse(fixed)
  assert not tree.has_errors
  assert cop.investigate(tree) == []


def test_unsupported_strategy_keeps_offense(cop, parse, monkeypatch):
  """
  Scenario: No corrector registered for the rescue context.
  Expectation: Offense reported without correction and a warning logged.
  """
  monkeypatch.delitem(strategy.CORRECTORS, CorrectionStrategy.RESCUE)
  buf = io.StringIO()
  set_console(Console(file=buf, width=200))

  offenses = cop.investigate(parse("a, b = 1, 2 rescue foo\n"), autocorrect=True)

  assert len(offenses) == 1
  assert offenses[0].correction is None
  assert "Cannot autocorrect" in buf.getvalue()


@pytest.mark.parametrize(
  "code, expected",
  [
    ("a, b = %w(a\\ b c)\n", "a = 'a b'\nb = 'c'\n"),
    ("a, b = %w(a\\tb c)\n", "a = 'a\\\\tb'\nb = 'c'\n"),
    ("a, b = %w[x\\] y]\n", "a = 'x]'\nb = 'y'\n"),
    ("a, b = %W(a\\tb c)\n", "a = \"a\\tb\"\nb = 'c'\n"),
    ("a, b = %W(#{x}\"y c)\n", "a = \"#{x}\\\"y\"\nb = 'c'\n"),
    ("a, b = %I(#{x} y)\n", "a = :\"#{x}\"\nb = :y\n"),
    ("a, b = %i(a-b c)\n", "a = :'a-b'\nb = :c\n"),
  ],
)
def test_word_array_elements_keep_their_value(cop, parse, code, expected):
  """
  Scenario: %w/%W/%i/%I elements with escapes, quotes and interpolation.
  Expectation: Each element becomes a literal with the same value.
  """
  fixed = correct(cop, parse, code)
  assert fixed == expected
  assert not parse(fixed).has_errors


@pytest.mark.parametrize(
  "code",
  [
    "x = (a, b = 1, 2)\n",
    "foo((a, b = 1, 2))\n",
    "a, b = <<~TEXT, 2\n  body\nTEXT\n",
  ],
)
def test_offense_without_safe_rewrite(cop, parse, code):
  """
  Scenario: Parallel assignment used as a value, or opening a heredoc.
  Expectation: Offense reported, no correction attached.
  """
  offenses = cop.investigate(parse(code), autocorrect=True)
  assert len(offenses) == 1
  assert offenses[0].correction is None
