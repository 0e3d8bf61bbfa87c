class SemanticIndexError(Exception):
    """Base class for every error raised by semantic_index."""


class DimensionMismatch(SemanticIndexError, ValueError):
    """Vector length does not match the dimension the index was built with."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected a vector of dimension {expected}, got {actual}")


class DegenerateVector(SemanticIndexError, ValueError):
    """Zero-magnitude vector: it cannot be normalized or compared."""


class InvalidSubspaceCount(SemanticIndexError, ValueError):
    """Vector dimension is not divisible by the requested number of subspaces."""

    def __init__(self, dimension: int, num_subspaces: int):
        self.dimension = dimension
        self.num_subspaces = num_subspaces
        super().__init__(f"Dimension {dimension} must be divisible by num_subspaces={num_subspaces}")


class EmptyIndex(SemanticIndexError):
    """
    Raised only by callers that want "nothing indexed yet" to be an error.
    Index searches themselves return an empty result instead.
    """
