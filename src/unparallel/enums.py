"""
Enumerations for unparallel.

This module defines the small closed vocabularies shared by the syntax model,
the analysis passes and the correction layer.
"""

from enum import Enum


class VariableKind(str, Enum):
  """
  Storage class of a Ruby variable reference or assignment target.

  The sigil is part of the name (``@a``, ``@@a``, ``$a``), so two variables
  only alias each other when both kind and name match.
  """

  LOCAL = "local"  # a
  INSTANCE = "instance"  # @a
  CLASS = "class"  # @@a
  GLOBAL = "global"  # $a


class LiteralKind(str, Enum):
  """
  Categories of literal values recognised by the syntax model.
  """

  INTEGER = "integer"
  FLOAT = "float"
  STRING = "string"
  SYMBOL = "symbol"
  NIL = "nil"
  TRUE = "true"
  FALSE = "false"
  OTHER = "other"  # regex, character, heredoc, rational ...


class CorrectionStrategy(str, Enum):
  """
  Textual reconstruction strategies for a flagged parallel assignment.

  Selected from the syntactic category of the statement's parent.
  """

  GENERIC = "generic"  # plain statement
  MODIFIER = "modifier"  # `... if cond`, `... while cond`
  RESCUE = "rescue"  # `... rescue handler`
