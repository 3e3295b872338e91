"""Exception types raised by the masked NCC engine."""


class MNCCError(Exception):
    """Base class for every error raised by mncc."""


class ValidationError(MNCCError, ValueError):
    """Input shape or parameter out of domain."""


class BackendError(MNCCError, RuntimeError):
    """FFT planning or execution failed (out of memory, unsupported size...)."""


class NumericAssertion(MNCCError, AssertionError):
    """Correlation left [-1, 1] by more than the guard tolerance (debug mode only)."""


class CorrelationAborted(MNCCError):
    """The caller's abort check asked the engine to stop between stages."""
