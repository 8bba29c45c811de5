"""
Text Patcher.

Applies corrections to source text. Corrections are plain data so the
patch step stays a pure function of its inputs.
"""

import logging
from typing import List, Sequence

from unparallel.offense import Correction

logger = logging.getLogger(__name__)


def select_applicable(corrections: Sequence[Correction]) -> List[Correction]:
  """
  Picks the corrections that can be applied together in one pass.

  Corrections are taken in ascending start order; one that overlaps an
  already selected correction is dropped.

  Args:
      corrections: Candidate corrections in any order.

  Returns:
      List[Correction]: Non-overlapping corrections sorted by start.
  """
  selected: List[Correction] = []
  cursor = 0
  for correction in sorted(corrections, key=lambda c: (c.start, c.end)):
    if correction.start < cursor:
      logger.debug("Skipping overlapping correction at %d..%d", correction.start, correction.end)
      continue
    selected.append(correction)
    cursor = correction.end
  return selected


def apply_corrections(text: str, corrections: Sequence[Correction]) -> str:
  """
  Returns ``text`` with the non-overlapping corrections applied.

  Args:
      text: The original source.
      corrections: Corrections with offsets into ``text``.

  Returns:
      str: The patched source.

  Raises:
      ValueError: If a correction range lies outside ``text`` or is reversed.
  """
  pieces: List[str] = []
  cursor = 0
  for correction in select_applicable(corrections):
    if correction.end < correction.start or correction.end > len(text):
      raise ValueError(f"Invalid correction range {correction.start}..{correction.end} for text of length {len(text)}")
    pieces.append(text[cursor : correction.start])
    pieces.append(correction.replacement)
    cursor = correction.end
  pieces.append(text[cursor:])
  return "".join(pieces)
