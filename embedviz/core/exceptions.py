# embedviz/core/exceptions.py

"""
Custom exceptions used across embedviz.
"""

from typing import Optional


class EmbedVizException(Exception):
    """Base exception for embedviz."""


class TokenLimitExceeded(EmbedVizException):
    """Input text is longer than the provider accepts."""

    def __init__(self, token_count: int, limit: int):
        self.token_count = token_count
        self.limit = limit
        super().__init__(f"max tokens exceeded: {token_count} > {limit}")


class DimensionMismatch(EmbedVizException):
    """Vectors of inconsistent length."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"dimension mismatch: expected {expected}, got {actual}")


class DegenerateVector(EmbedVizException):
    """A zero-norm vector where a direction is required."""


class InsufficientSamples(EmbedVizException):
    """Too few vectors for the requested projection."""

    def __init__(self, n_samples: int, required: int):
        self.n_samples = n_samples
        self.required = required
        super().__init__(f"need at least {required} vectors, got {n_samples}")


class CorruptEntry(EmbedVizException):
    """On-disk cache entry with an invalid byte length."""

    def __init__(self, path, size: int, reason: Optional[str] = None):
        self.path = path
        self.size = size
        msg = f"corrupt cache entry {path} ({size} bytes)"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class ProviderFailure(EmbedVizException):
    """The embedding provider failed."""


class IOFailure(EmbedVizException):
    """Filesystem read/write failure on the cache or image output."""


class ConfigurationError(EmbedVizException):
    """Invalid or missing configuration."""
