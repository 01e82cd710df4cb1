"""
finlit exception hierarchy.

All finlit exceptions inherit from FinlitError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.

Calculators do not raise for bad numbers: they coerce and return a best-effort
result. These exceptions cover the few places where computing would be wrong.
"""


class FinlitError(Exception):
    """Base exception class for all finlit errors."""


class ConfigurationError(FinlitError):
    """Raised for configuration errors (unreadable file, invalid values)."""


class InvalidInputError(FinlitError):
    """Raised when inputs fail validation at a gate that refuses to compute.

    Attributes:
        errors: Field name -> human-readable message.
    """

    def __init__(self, message: str, errors: dict[str, str] | None = None):
        super().__init__(message)
        self.errors = dict(errors or {})


class SimulationCancelledError(FinlitError):
    """Raised when a Monte Carlo run is abandoned between batches."""
