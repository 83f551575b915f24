"""Exception hierarchy for documentation generation.

Authoring errors point at a broken annotation in the documented source and
must be fixed by the author. Everything else is either a configuration
problem or a fatal storage failure.
"""


class RouteDocError(Exception):
    """Base class for all routedoc errors."""


class ConfigError(RouteDocError):
    """The configuration file is missing, unreadable or invalid."""


class OutputError(RouteDocError):
    """The generated document could not be written."""


class SourceUnavailableError(RouteDocError):
    """The source of a response resource could not be read."""


class AuthoringError(RouteDocError):
    """An annotation in the documented source cannot be parsed."""

    def __init__(self, message: str, handler: str | None = None):
        super().__init__(message)
        self.message = message
        self.handler = handler

    def __str__(self) -> str:
        if self.handler:
            return f"{self.handler}: {self.message}"
        return self.message


class AnnotationError(AuthoringError):
    """A parameter or response tag does not match any accepted grammar."""


class HandlerResolutionError(AuthoringError):
    """A route handler identity does not point at importable code."""


class ResourceResolutionError(AuthoringError):
    """A @responseResource tag names a class that cannot be used."""


class SchemaStructureError(AuthoringError):
    """Nested @responseParam scopes are not closed before the method ends."""


class GenerationError(RouteDocError):
    """One or more routes failed to parse; no document was produced."""

    def __init__(self, failures: list):
        self.failures = failures
        lines = [f"{len(failures)} route(s) have documentation errors:"]
        for failure in failures:
            lines.append(f"  [{','.join(failure.methods)}] {failure.uri}: {failure.error}")
        super().__init__("\n".join(lines))
