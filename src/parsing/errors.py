"""Structured parsing errors and non-fatal diagnostics for config documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional


class ParsingError(Exception):
    """Base class for parsing related issues."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class MalformedArrayError(ParsingError):
    """Raised when inline ``[...]`` content cannot be split into entries.

    Never escapes the value decoder; it falls back to an empty value.
    """


@dataclass(frozen=True)
class ParseDiagnostic:
    level: int
    message: str
    line_no: Optional[int] = None
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)


def report(
    diagnostics: Optional[List[ParseDiagnostic]],
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    line_no: Optional[int] = None,
    **context: Any,
) -> None:
    """Log ``message`` and, if a sink list was given, record it there too."""
    logger.log(level, message)
    if diagnostics is not None:
        diagnostics.append(
            ParseDiagnostic(level=level, message=message, line_no=line_no, context=context)
        )
