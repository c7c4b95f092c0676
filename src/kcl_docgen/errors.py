"""Exception types raised by the documentation generator."""

from __future__ import annotations


class DocGenError(Exception):
    """Base class for all generator failures."""


class ExtractionError(DocGenError):
    """Raised when a schema dump is malformed."""


class ConfigError(DocGenError):
    """Raised when the configuration file is invalid."""


class RenderError(DocGenError):
    """Raised when a schema cannot be rendered."""

    def __init__(self, message: str, schema_id: str | None = None) -> None:
        self.reason = message
        self.schema_id = schema_id
        if schema_id:
            message = f"schema '{schema_id}': {message}"
        super().__init__(message)


class GenerationError(DocGenError):
    """Raised when a generation run aborts."""

    def __init__(
        self,
        message: str,
        *,
        schema_id: str | None = None,
        package: str | None = None,
    ) -> None:
        self.schema_id = schema_id
        self.package = package
        context = []
        if package is not None:
            context.append(f"package '{package or '<root>'}'")
        if schema_id:
            context.append(f"schema '{schema_id}'")
        if context:
            message = f"{', '.join(context)}: {message}"
        super().__init__(message)


class OutputError(GenerationError):
    """Raised when the output tree cannot be prepared or written."""
