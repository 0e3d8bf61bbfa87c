"""In-memory approximate nearest neighbor search over sentence embeddings of a document."""

from semantic_index.errors import (
    DegenerateVector,
    DimensionMismatch,
    EmptyIndex,
    InvalidSubspaceCount,
    SemanticIndexError,
)
from semantic_index.facade import SearchFacade, SearchResult
from semantic_index.indexes import ClusterIndex, FlatIndex, HNSWIndex, VectorIndex, create_index
from semantic_index.quantization import KMeans, ProductQuantizer
from semantic_index.vector_math import distance, normalize, similarity

__version__ = "0.1.0"

__all__ = [
    "SemanticIndexError",
    "DimensionMismatch",
    "DegenerateVector",
    "InvalidSubspaceCount",
    "EmptyIndex",
    "SearchFacade",
    "SearchResult",
    "VectorIndex",
    "HNSWIndex",
    "ClusterIndex",
    "FlatIndex",
    "create_index",
    "KMeans",
    "ProductQuantizer",
    "similarity",
    "distance",
    "normalize",
]
