"""
vector_pessimization/errors.py
══════════════════════════════

Error hierarchy.

    AnalyzerError (base)
    ├── ConfigError     - invalid option values
    └── DumpLoadError   - dump file missing or unparsable

The analysis core never raises; these cover the layers around it.
"""

from __future__ import annotations

from typing import Any, Optional


class AnalyzerError(Exception):
    """Base class for errors raised by this package."""

    error_id: str = "analyzerError"

    def __init__(self, message: str, *, detail: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail is not None:
            return f"{self.message} ({self.detail})"
        return self.message


class ConfigError(AnalyzerError):
    error_id = "badConfiguration"

    def __init__(self, option: str, value: Any, reason: str) -> None:
        super().__init__(f"invalid value for '{option}': {reason}",
                         detail=value)
        self.option = option
        self.value = value


class DumpLoadError(AnalyzerError):
    error_id = "dumpLoadFailed"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot load dump file '{path}': {reason}")
        self.path = path


__all__ = ["AnalyzerError", "ConfigError", "DumpLoadError"]
