"""
Tests for Rewrite Strategy Selection and the Corrector Registry.
"""

import pytest

from unparallel.correction.correctors import GenericCorrector, ModifierCorrector, RescueCorrector
from unparallel.correction.strategy import (
  CORRECTORS,
  assignment_corrector,
  build_corrector,
  has_heredoc,
  select_strategy,
  statement_context,
)
from unparallel.enums import CorrectionStrategy


@pytest.mark.parametrize(
  "code, expected",
  [
    ("a, b = 1, 2\n", CorrectionStrategy.GENERIC),
    ("a, b = 1, 2 if foo\n", CorrectionStrategy.MODIFIER),
    ("a, b = 1, 2 unless foo\n", CorrectionStrategy.MODIFIER),
    ("a, b = 1, 2 while foo\n", CorrectionStrategy.MODIFIER),
    ("a, b = 1, 2 until foo\n", CorrectionStrategy.MODIFIER),
    ("a, b = 1, 2 rescue foo\n", CorrectionStrategy.RESCUE),
    ("def bar\n  a, b = 1, 2 rescue foo\nend\n", CorrectionStrategy.RESCUE),
    ("if foo\n  a, b = 1, 2\nend\n", CorrectionStrategy.GENERIC),
    ("while foo\n  a, b = 1, 2\nend\n", CorrectionStrategy.GENERIC),
    ("begin\n  a, b = 1, 2 rescue foo\nend\n", CorrectionStrategy.GENERIC),
    ("begin\n  x\nensure\n  a, b = 1, 2 rescue foo\nend\n", CorrectionStrategy.GENERIC),
  ],
)
def test_select_strategy(masgn, code, expected):
  """
  Scenario: Parallel assignment in various contexts.
  Expectation: Strategy chosen from the immediate parent.
  """
  assert select_strategy(masgn(code)) == expected


def test_registry_covers_every_strategy():
  """
  Scenario: Registry contents.
  Expectation: One corrector class per strategy.
  """
  assert CORRECTORS == {
    CorrectionStrategy.GENERIC: GenericCorrector,
    CorrectionStrategy.MODIFIER: ModifierCorrector,
    CorrectionStrategy.RESCUE: RescueCorrector,
  }


def test_build_corrector_unknown_strategy(masgn):
  """
  Scenario: A strategy without a registered corrector.
  Expectation: ValueError.
  """
  with pytest.raises(ValueError, match="No corrector registered"):
    build_corrector("bogus", masgn("a, b = 1, 2\n"), [])


def test_assignment_corrector_picks_class(masgn):
  """
  Scenario: Modifier context.
  Expectation: ModifierCorrector with the configured width.
  """
  corrector = assignment_corrector(masgn("a, b = 1, 2 if foo\n"), [], indentation_width=4)
  assert isinstance(corrector, ModifierCorrector)
  assert corrector.indentation_width == 4


@pytest.mark.parametrize(
  "code, expected",
  [
    ("a, b = 1, 2\n", True),
    ("def foo\n  a, b = 1, 2\nend\n", True),
    ("class Foo\n  a, b = 1, 2\nend\n", True),
    ("if x\n  y\nelse\n  a, b = 1, 2\nend\n", True),
    ("case x\nwhen 1\n  a, b = 1, 2\nend\n", True),
    ("a, b = 1, 2 if foo\n", True),
    ("def bar\n  a, b = 1, 2 rescue foo\nend\n", True),
    ("x = (a, b = 1, 2)\n", False),
    ("x = (a, b = 1, 2 if foo)\n", False),
    ("puts((a, b = 1, 2))\n", False),
  ],
)
def test_statement_context(masgn, code, expected):
  """
  Scenario: Parallel assignment as a statement or as a value.
  Expectation: Only statements inside a statement list qualify.
  """
  assert statement_context(masgn(code)) is expected


def test_has_heredoc(masgn):
  """
  Scenario: Heredoc among the sources.
  Expectation: Detected; plain strings are not.
  """
  assert has_heredoc(masgn("a, b = <<~TEXT, 2\n  body\nTEXT\n"))
  assert not has_heredoc(masgn("a, b = 'x', 1 << 2\n"))


def test_assignment_corrector_declines_used_value(masgn):
  """
  Scenario: Parallel assignment whose value is assigned to `x`.
  Expectation: No corrector.
  """
  assert assignment_corrector(masgn("x = (a, b = 1, 2)\n"), []) is None
