"""
SeqFlow - Error Types

Every failure in the matching and sampling kernels is one of two kinds:

ConfigurationError
    Bad parameters (empty pattern, invalid regex, non-positive sizes,
    probabilities out of range). Raised synchronously when the matcher or
    sampler is built, before any stream is touched.

ExecutionError
    The regular-expression engine failed while matching. Raised from the
    call that triggered it; no partial result list is returned.
"""


class SeqFlowError(Exception):
    """Base class for all seqflow errors."""
    pass


class ConfigurationError(SeqFlowError, ValueError):
    """Raised when a matcher, sampler or option set is misconfigured."""
    pass


class ExecutionError(SeqFlowError, RuntimeError):
    """Raised when a match attempt fails inside the pattern engine."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Matching '{pattern}' failed: {reason}")
