"""
Data structures describing rule violations.

This module defines the `Offense` and `Correction` Pydantic models handed
from the cop to the engine, the CLI and any external reporter.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Correction(BaseModel):
  """
  A replacement of one character range of the source text.
  """

  start: int = Field(..., ge=0, description="Character offset where the replaced range starts.")
  end: int = Field(..., ge=0, description="Character offset one past the replaced range.")
  replacement: str = Field(..., description="Text inserted in place of the range.")


class Offense(BaseModel):
  """
  A single violation reported by a cop.
  """

  cop_name: str = Field(..., description="Qualified cop name (e.g. 'Style/ParallelAssignment').")
  message: str = Field(..., description="Human readable description of the violation.")
  path: str = Field("(string)", description="Source file the offense was found in.")
  line: int = Field(..., ge=1, description="1-based line of the offending node.")
  column: int = Field(..., ge=0, description="0-based column of the offending node.")
  start: int = Field(..., ge=0, description="Character offset of the offending node.")
  end: int = Field(..., ge=0, description="Character offset one past the offending node.")
  source: str = Field("", description="The offending source text.")
  correction: Optional[Correction] = Field(None, description="Suggested autocorrection, if available.")

  @property
  def correctable(self) -> bool:
    """
    Check if the offense carries an autocorrection.

    Returns:
        True if a correction is attached.
    """
    return self.correction is not None
