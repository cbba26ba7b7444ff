"""
Error Taxonomy

Every precondition failure in blockdsp is raised synchronously, before any
buffer is mutated. InvalidArgumentError also derives from ValueError so
callers that only know the builtin still catch it.
"""


class BlockDSPError(Exception):
    """Base class for all blockdsp errors."""


class InvalidArgumentError(BlockDSPError, ValueError):
    """A call received a missing buffer, a wrong length or an out-of-range offset/count."""


class InvalidConfigurationError(InvalidArgumentError):
    """A component was constructed with parameters it cannot operate under."""
