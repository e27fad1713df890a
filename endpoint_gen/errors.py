"""Diagnostics raised while compiling an endpoint source.

Every error carries an optional source span so the orchestrator can report
it as ``file:line:col: message``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ast_nodes import Span


class EndpointGenError(Exception):
    """Base class for all compile-time diagnostics."""

    def __init__(self, message: str, span: Span | None = None, filename: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.span = span
        self.filename = filename

    def with_filename(self, filename: str) -> EndpointGenError:
        """Attach the source filename if none was recorded yet."""
        if self.filename is None:
            self.filename = filename
        return self

    def location(self) -> str:
        parts = [self.filename or "<endpoint>"]
        if self.span is not None:
            parts.extend((str(self.span.line), str(self.span.col)))
        return ":".join(parts)

    def __str__(self) -> str:
        if self.filename is None and self.span is None:
            return self.message
        return f"{self.location()}: {self.message}"


class SpecSyntaxError(EndpointGenError):
    """Malformed tokens, sections or fields."""


class SpecSemanticError(EndpointGenError):
    """Well-formed input that breaks a rule of the language."""


class AttributesWithoutResponseError(SpecSemanticError):
    """Attributes were given but no ``response`` section follows them."""


class MissingCapabilityError(SpecSemanticError):
    """The invoking project does not declare a required capability."""

    def __init__(self, capability: str, enables: str) -> None:
        super().__init__(
            f"This project doesn't define a `{capability}` extra in its `pyproject.toml`.\n"
            f"Please add a `{capability}` entry to [project.optional-dependencies] such that "
            f"generated {enables} bindings can be enabled."
        )
        self.capability = capability


class ManifestIOError(EndpointGenError):
    """The project manifest could not be located or read."""


class ManifestFormatError(EndpointGenError):
    """The project manifest is not the expected TOML structure."""
