"""
Error Types
===========

Exceptions raised by the flow field engine.

Taxonomy:
    - PreconditionError: malformed configuration or geometry, raised at
      construction or build entry (never silently coerced)
    - GridIndexError: grid accessed outside [0, resolution)

Degenerate geometry (e.g. normalizing a zero-length offset) is NOT an
error. Resolvers fall back to a zero contribution instead.
"""


class PreconditionError(ValueError):
    """Raised when an input violates a documented precondition."""
    pass


class GridIndexError(IndexError):
    """Raised when a flow field cell is accessed out of bounds."""
    pass
