"""Error taxonomy for document generation."""

from __future__ import annotations

from typing import Any


class DocumentGenerationError(RuntimeError):
    """Base class for all request-level generation failures."""


class TemplateNotFoundError(DocumentGenerationError):
    """Neither an uploaded template nor the bundled default could be read."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Template not found: {path}")
        self.path = path


class TemplateCompileError(DocumentGenerationError):
    """The template package or its placeholder syntax is malformed.

    ``details`` carries one entry per underlying problem and is returned to
    the caller unchanged.
    """

    def __init__(self, message: str, details: list[Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or [message]


class RenderError(DocumentGenerationError):
    """Substitution failed while rendering a compiled template."""


class InputParseError(ValueError):
    """A user-provided value could not be parsed.

    Never leaves the normalizer: callers absorb it into a default.
    """
