# Fatal analysis errors: anything raised here aborts the run before inspection.

from __future__ import annotations

from pathlib import Path
from typing import Optional


class AnalysisError(Exception):
    """Base class for errors that abort an analysis run."""


class LoadError(AnalysisError):
    """The directory cannot be read as one valid Go package, or a file fails to parse."""


class TypeCheckError(AnalysisError):
    """
    The package failed type resolution.

    Rendered the way the Go type checker reports errors:
    "path/file.go:line:col: message".
    """

    def __init__(
        self,
        message: str,
        path: Optional[Path] = None,
        line: int = 0,
        column: int = 0,
    ) -> None:
        self.message = message
        self.path = path
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}:{self.line}:{self.column}: {self.message}"
