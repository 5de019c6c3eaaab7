"""
Domain exceptions for Vaulty.

All application errors should inherit from VaultyError.
"""


class VaultyError(Exception):
    """Base class for all Vaulty exceptions."""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(VaultyError):
    """Raised when a configuration file cannot be read or parsed."""

    pass


class TemplateRenderError(VaultyError):
    """Raised when a template filter fails during rendering."""

    pass


class RemoteTimeoutError(VaultyError):
    """Raised when a call to the secrets manager exceeds its time budget."""

    def __init__(self, operation: str, timeout_seconds: float):
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Operation '{operation}' timed out after {timeout_seconds}s",
            context={"operation": operation, "timeout_seconds": timeout_seconds},
        )
