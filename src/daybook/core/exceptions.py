"""
Daybook exception hierarchy.

All daybook exceptions inherit from DaybookError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.
None of these are fatal: every one is recoverable by retrying or re-issuing
the action.
"""


class DaybookError(Exception):
    """Base exception class for all daybook errors."""


class ConfigurationError(DaybookError):
    """Raised for configuration errors (missing keys, invalid values)."""


class APIError(DaybookError):
    """Raised for API communication errors."""


class TransientFetchError(DaybookError):
    """Raised when a read (entries, heatmap, goals, search) fails.

    The cache keeps its prior state; the caller should show a retryable error.
    """


class MutationError(DaybookError):
    """Raised when the backend rejects a create, update or delete.

    Any optimistic local change has already been rolled back when this is raised.
    """


class StaleResponseError(DaybookError):
    """Raised internally for a response that was superseded before it arrived.

    Never user-facing: the result is dropped and logged at DEBUG.
    """


class ValidationError(DaybookError):
    """Raised for invalid input caught before any network call."""
