class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when a user action violates attendance rules.

    ``code`` is a stable machine-readable identifier (e.g. ``TOO_EARLY``).
    """

    def __init__(self, message: str, *, code: str = "INVALID"):
        super().__init__(message)
        self.code = code


class PreconditionError(DomainError):
    """Raised when a job cannot run at all (no active schedule, no admin actor)."""


class ConfigurationError(DomainError):
    """Raised when a stored setting cannot be coerced to its declared type."""
