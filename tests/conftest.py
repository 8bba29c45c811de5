"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- A shared tree-sitter Ruby parser and helpers to parse snippets.
- Console isolation so log output from one test does not leak into another.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'unparallel' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from unparallel.syntax.nodes import MultipleAssignment, SyntaxTree  # noqa: E402
from unparallel.syntax.parser import RubyParser  # noqa: E402
from unparallel.syntax.search import find_all  # noqa: E402
from unparallel.utils.console import reset_console  # noqa: E402


@pytest.fixture(scope="session")
def ruby_parser() -> RubyParser:
  """A single parser instance shared by the session."""
  return RubyParser()


@pytest.fixture
def parse(ruby_parser):
  """Parses a Ruby snippet into a SyntaxTree."""

  def _parse(code: str) -> SyntaxTree:
    return ruby_parser.parse(code)

  return _parse


@pytest.fixture
def masgn(ruby_parser):
  """Parses a snippet and returns its first parallel assignment."""

  def _masgn(code: str) -> MultipleAssignment:
    tree = ruby_parser.parse(code)
    found = find_all(tree.root, lambda n: isinstance(n, MultipleAssignment))
    assert found, f"No parallel assignment in {code!r}"
    return found[0]

  return _masgn


@pytest.fixture(autouse=True)
def cleanup_console():
  """Ensures console is reset to stdout after every test."""
  yield
  reset_console()
