# File: modelgen/exceptions.py
"""
modelgen - Exception Hierarchy
===============================

    ModelGenError (base)
    ├── ModelValidationError   bad command-line input, raised before generation
    ├── FormatterError         external formatter failed (best effort, logged)
    ├── ExportError            directory creation / file write / file read
    └── MigrationWriteError    migration pair could not be written

Each exception carries a context dict and, when wrapping a lower-level
failure, the original exception as ``__cause__``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ModelGenError(Exception):
    """
    Base exception for all generation errors.

    Attributes:
        message: Human-readable error message
        context: Additional context (paths, names, exit codes)
        original_exception: The exception that was caught, if any
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None,
    ) -> None:
        self.message: str = message
        self.context: Dict[str, Any] = context or {}
        self.original_exception: Optional[BaseException] = original_exception
        super().__init__(message)
        if original_exception is not None:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        base_msg: str = self.message
        if self.context:
            context_str: str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" ({context_str})"
        if self.original_exception is not None:
            base_msg += (
                f": {type(self.original_exception).__name__}: "
                f"{self.original_exception}"
            )
        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "original_error": (
                str(self.original_exception) if self.original_exception else None
            ),
        }


class ModelValidationError(ModelGenError):
    """The model description is unusable; nothing has been generated."""

    def __init__(
        self,
        message: str,
        issues: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.issues: List[str] = list(issues or [])
        super().__init__(message, context=context)


class FormatterError(ModelGenError):
    """The external source formatter could not be run or exited non-zero."""


class ExportError(ModelGenError):
    """A model file or directory could not be created, written or read."""


class MigrationWriteError(ModelGenError):
    """The migration pair could not be written."""


__all__: List[str] = [
    "ModelGenError",
    "ModelValidationError",
    "FormatterError",
    "ExportError",
    "MigrationWriteError",
]
