"""
MiniSFC Errors
==============
Every failure raised by the curve core derives from SFCError.

  - InvalidArgumentError: bad dimension ordinal, bad dimension definition,
    min > max on normalization, malformed keys. Also a ValueError so
    callers that already catch ValueError keep working.
  - ConfigurationError: attempts to mutate or re-shape a configured curve.

All errors are synchronous and deterministic: the core does no I/O.
"""


class SFCError(Exception):
    """Base class for all space filling curve errors."""
    pass


class InvalidArgumentError(SFCError, ValueError):
    """Raised when an argument falls outside the documented contract."""
    pass


class ConfigurationError(SFCError):
    """Raised when a configured curve is modified or re-shaped."""
    pass
