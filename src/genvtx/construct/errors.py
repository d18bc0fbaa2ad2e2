"""Typed exceptions raised while building the event collections."""


class InputValidationError(ValueError):
    """Raised when the event records or the builder configuration are
    numerically degenerate or inconsistent (NaN positions, duplicate IDs,
    non-positive distance cuts, etc.)."""


class MissingPrimaryVertexError(RuntimeError):
    """Raised when an event does not provide the primary vertex needed to
    build its generator vertex collections."""
