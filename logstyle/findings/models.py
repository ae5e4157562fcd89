# Pydantic data models for reported diagnostics: Diagnostic, Location.

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class Location(BaseModel):
    """Where in the source a diagnostic was reported (file, line, column)."""

    path: Path
    line: int = Field(..., ge=1, description="1-based line number")
    column: int = Field(..., ge=1, description="1-based byte column")
    end_line: Optional[int] = Field(None, ge=1)
    end_column: Optional[int] = Field(None, ge=1)
    snippet: Optional[str] = None

    model_config = {"arbitrary_types_allowed": True}


class Diagnostic(BaseModel):
    """A single violation reported by a rule (e.g. a zap call with a Sprintf message)."""

    rule_id: str
    message: str
    location: Location
    severity: str = Field(default="warning", description="e.g. error, warning, info")

    model_config = {"arbitrary_types_allowed": True}
